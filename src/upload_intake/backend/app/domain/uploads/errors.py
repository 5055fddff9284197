from __future__ import annotations

from upload_intake.backend.app.domain.uploads.enums import RejectionKind


class IntakeError(Exception):
    """Base class for everything that ends an upload with a rejection."""

    kind: RejectionKind

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class MalformedMultipart(IntakeError):
    kind = RejectionKind.MALFORMED_MULTIPART


class UnexpectedField(IntakeError):
    kind = RejectionKind.UNEXPECTED_FIELD


class UnsupportedMediaType(IntakeError):
    kind = RejectionKind.UNSUPPORTED_MEDIA_TYPE


class TooManyFiles(IntakeError):
    kind = RejectionKind.TOO_MANY_FILES


class FileTooLarge(IntakeError):
    kind = RejectionKind.FILE_TOO_LARGE


class TooManyParts(IntakeError):
    kind = RejectionKind.TOO_MANY_PARTS


class FieldTooLarge(IntakeError):
    kind = RejectionKind.FIELD_TOO_LARGE


class StorageWriteFailed(IntakeError):
    kind = RejectionKind.STORAGE_WRITE_FAILED

    def __init__(self, detail: str = "Could not store uploaded file") -> None:
        super().__init__(detail)


_ERRORS_BY_KIND: dict[RejectionKind, type[IntakeError]] = {
    cls.kind: cls
    for cls in (
        MalformedMultipart,
        UnexpectedField,
        UnsupportedMediaType,
        TooManyFiles,
        FileTooLarge,
        TooManyParts,
        FieldTooLarge,
        StorageWriteFailed,
    )
}


def error_for(kind: RejectionKind, detail: str) -> IntakeError:
    return _ERRORS_BY_KIND[kind](detail)


class NoFilesUploaded(Exception):
    def __init__(self) -> None:
        super().__init__("No files uploaded")
