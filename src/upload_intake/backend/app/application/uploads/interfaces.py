from __future__ import annotations

from typing import Protocol


class StoredNameGenerator(Protocol):
    def generate(self, original_filename: str) -> str: ...
