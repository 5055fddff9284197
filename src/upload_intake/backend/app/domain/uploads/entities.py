from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from upload_intake.backend.app.domain.uploads.enums import RejectionKind


@dataclass(frozen=True, slots=True)
class PartHeader:
    field_name: str
    original_filename: str
    declared_mime_type: str
    is_file: bool
    # filename parameter present, even when empty
    has_filename: bool = False


@dataclass(frozen=True, slots=True)
class StoredFile:
    field_name: str
    stored_name: str
    original_filename: str
    mime_type: str
    size_bytes: int
    storage_path: str  # relative to the storage root


@dataclass(frozen=True, slots=True)
class Accepted:
    files: tuple[StoredFile, ...]
    fields: dict[str, list[str]] = field(default_factory=dict)

    def files_for(self, field_name: str) -> list[StoredFile]:
        return [f for f in self.files if f.field_name == field_name]

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)


@dataclass(frozen=True, slots=True)
class Rejected:
    reason: RejectionKind
    detail: str


IntakeResult = Union[Accepted, Rejected]
