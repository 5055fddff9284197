from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterator


@dataclass(frozen=True)
class IntakeRequestDTO:
    content_type: str | None
    body: AsyncIterator[bytes]


# ---------- OUTPUT DTOs ----------
@dataclass(frozen=True)
class StoredFileDTO:
    field_name: str
    stored_name: str
    original_filename: str
    mime_type: str
    size_bytes: int
    storage_path: str
