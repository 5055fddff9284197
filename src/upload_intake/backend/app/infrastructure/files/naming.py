from __future__ import annotations

import re
import secrets
import time
from pathlib import PurePosixPath
from typing import Callable

_EXTENSION_RE = re.compile(r"^\.[a-z0-9]{1,10}$")


def safe_extension(original_filename: str) -> str:
    """Lower-cased extension of the client filename, or "" if it looks odd."""
    ext = PurePosixPath(original_filename.replace("\\", "/")).suffix.lower()
    return ext if _EXTENSION_RE.match(ext) else ""


class TimestampNameGenerator:
    """
    Stored names look like ``1760601600000-3f9c2a7d41b0e6c5.jpg``: epoch
    milliseconds, a random token and the original extension. Nothing else of
    the client filename is used.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], int] = time.time_ns,
        token_bytes: int = 8,
    ) -> None:
        self._clock = clock
        self._token_bytes = token_bytes

    def generate(self, original_filename: str) -> str:
        millis = self._clock() // 1_000_000
        token = secrets.token_hex(self._token_bytes)
        return f"{millis}-{token}{safe_extension(original_filename)}"
