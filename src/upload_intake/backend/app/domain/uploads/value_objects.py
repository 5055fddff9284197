from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping


@dataclass(frozen=True, slots=True)
class FieldRule:
    allowed_mime_types: frozenset[str]
    max_count: int
    max_bytes_per_file: int

    def __post_init__(self) -> None:
        if not self.allowed_mime_types:
            raise ValueError("A field rule needs at least one allowed MIME type.")
        if self.max_count < 1:
            raise ValueError("max_count must be at least 1.")
        if self.max_bytes_per_file < 1:
            raise ValueError("max_bytes_per_file must be at least 1.")
        # normalize stored value
        object.__setattr__(
            self,
            "allowed_mime_types",
            frozenset(m.strip().lower() for m in self.allowed_mime_types),
        )

    def allows_mime(self, mime_type: str) -> bool:
        return mime_type.lower() in self.allowed_mime_types

    def to_dict(self) -> dict:
        return {
            "allowed_mime_types": sorted(self.allowed_mime_types),
            "max_count": int(self.max_count),
            "max_bytes_per_file": int(self.max_bytes_per_file),
        }


class UploadPolicy:
    """Read-only table of per-field acceptance rules."""

    __slots__ = ("_rules",)

    def __init__(self, rules: Mapping[str, FieldRule]) -> None:
        self._rules: Mapping[str, FieldRule] = MappingProxyType(dict(rules))

    def allows(self, field_name: str) -> bool:
        return field_name in self._rules

    def rule_for(self, field_name: str) -> FieldRule | None:
        return self._rules.get(field_name)

    @property
    def field_names(self) -> Iterable[str]:
        return tuple(self._rules)

    def to_dict(self) -> dict:
        return {name: rule.to_dict() for name, rule in self._rules.items()}

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"UploadPolicy({dict(self._rules)!r})"


@dataclass(frozen=True, slots=True)
class IntakeLimits:
    # per part header block, per plain form-field value, per request
    max_header_bytes: int = 16 * 1024
    max_field_bytes: int = 1024 * 1024
    max_parts: int = 1000

    def to_dict(self) -> dict:
        return {
            "max_header_bytes": self.max_header_bytes,
            "max_field_bytes": self.max_field_bytes,
            "max_parts": self.max_parts,
        }
