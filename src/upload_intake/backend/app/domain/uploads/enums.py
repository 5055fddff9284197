from __future__ import annotations

from enum import StrEnum


class RejectionKind(StrEnum):
    MALFORMED_MULTIPART = "MalformedMultipart"
    UNEXPECTED_FIELD = "UnexpectedField"
    UNSUPPORTED_MEDIA_TYPE = "UnsupportedMediaType"
    TOO_MANY_FILES = "TooManyFiles"
    FILE_TOO_LARGE = "FileTooLarge"
    TOO_MANY_PARTS = "TooManyParts"
    FIELD_TOO_LARGE = "FieldTooLarge"
    STORAGE_WRITE_FAILED = "StorageWriteFailed"

    @property
    def is_client_fault(self) -> bool:
        return self is not RejectionKind.STORAGE_WRITE_FAILED
