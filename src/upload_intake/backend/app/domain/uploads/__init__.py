from upload_intake.backend.app.domain.uploads.entities import (
    Accepted,
    IntakeResult,
    PartHeader,
    Rejected,
    StoredFile,
)
from upload_intake.backend.app.domain.uploads.enums import RejectionKind
from upload_intake.backend.app.domain.uploads.errors import (
    FieldTooLarge,
    FileTooLarge,
    IntakeError,
    MalformedMultipart,
    NoFilesUploaded,
    StorageWriteFailed,
    TooManyFiles,
    TooManyParts,
    UnexpectedField,
    UnsupportedMediaType,
    error_for,
)
from upload_intake.backend.app.domain.uploads.value_objects import FieldRule, IntakeLimits, UploadPolicy

__all__ = ['Accepted', 'IntakeResult', 'PartHeader', 'Rejected', 'StoredFile', 'RejectionKind',
           'IntakeError', 'MalformedMultipart', 'UnexpectedField', 'UnsupportedMediaType', 'TooManyFiles',
           'FileTooLarge', 'TooManyParts', 'FieldTooLarge', 'StorageWriteFailed', 'NoFilesUploaded',
           'error_for', 'FieldRule', 'IntakeLimits', 'UploadPolicy']
