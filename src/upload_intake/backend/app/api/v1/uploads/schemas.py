from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class StoredFileResponse(BaseModel):
    field_name: str
    stored_name: str
    original_filename: str
    mime_type: str
    size_bytes: int
    storage_path: str

    model_config = ConfigDict(from_attributes=True)


class UploadResponse(BaseModel):
    """
    Stored files grouped by form field name, in the order the parts arrived.
    """
    files: dict[str, list[StoredFileResponse]]
    fields: dict[str, list[str]]


class RejectionResponse(BaseModel):
    reason: str
    detail: str


class FieldRuleResponse(BaseModel):
    allowed_mime_types: list[str]
    max_count: int
    max_bytes_per_file: int


class LimitsResponse(BaseModel):
    max_header_bytes: int
    max_field_bytes: int
    max_parts: int


class PolicyResponse(BaseModel):
    fields: dict[str, FieldRuleResponse]
    limits: LimitsResponse
