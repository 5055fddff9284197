from __future__ import annotations

from upload_intake.backend.app.application.uploads.dto import StoredFileDTO
from upload_intake.backend.app.domain.uploads.entities import StoredFile


def stored_file_to_dto(stored: StoredFile) -> StoredFileDTO:
    return StoredFileDTO(
        field_name=stored.field_name,
        stored_name=stored.stored_name,
        original_filename=stored.original_filename,
        mime_type=stored.mime_type,
        size_bytes=stored.size_bytes,
        storage_path=stored.storage_path,
    )


def group_by_field(files: tuple[StoredFile, ...]) -> dict[str, list[StoredFileDTO]]:
    grouped: dict[str, list[StoredFileDTO]] = {}
    for stored in files:
        grouped.setdefault(stored.field_name, []).append(stored_file_to_dto(stored))
    return grouped
