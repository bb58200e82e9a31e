"""Mapping from GitHub labels to change types."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, Sequence, Union

from ..change import (
    ADDED_FEATURE,
    BREAKING_CHANGE,
    BUG_FIX,
    DEPRECATED_FEATURE,
    REMOVED_FEATURE,
    SECURITY_FIXES,
)

LabelOverride = Union[str, Sequence[str]]

DEFAULT_LABELS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "breaking-change": (BREAKING_CHANGE.name,),
        "breaking": (BREAKING_CHANGE.name,),
        "backwards-incompatible": (BREAKING_CHANGE.name,),
        "security": (SECURITY_FIXES.name,),
        "vulnerability": (SECURITY_FIXES.name,),
        "enhancement": (ADDED_FEATURE.name,),
        "feature": (ADDED_FEATURE.name,),
        "minor": (ADDED_FEATURE.name,),
        "bug": (BUG_FIX.name,),
        "fix": (BUG_FIX.name,),
        "bug-fix": (BUG_FIX.name,),
        "patch": (BUG_FIX.name,),
        "removed": (REMOVED_FEATURE.name,),
        "deprecated": (DEPRECATED_FEATURE.name,),
    }
)


def _normalize_types(value: LabelOverride) -> tuple[str, ...]:
    candidates = [value] if isinstance(value, str) else list(value)
    normalized: list[str] = []
    for candidate in candidates:
        text = str(candidate).strip()
        if text and text not in normalized:
            normalized.append(text)
    return tuple(normalized)


class LabelTable:
    """Read-only classification of labels into change types.

    Label names are case-sensitive. Every label in the table maps to at
    least one change type; labels outside the table classify to nothing.
    """

    def __init__(self, mapping: Mapping[str, LabelOverride]) -> None:
        table: dict[str, tuple[str, ...]] = {}
        for label, value in mapping.items():
            change_types = _normalize_types(value)
            if change_types:
                table[str(label)] = change_types
        self._table: Mapping[str, tuple[str, ...]] = MappingProxyType(table)

    @classmethod
    def default(cls) -> "LabelTable":
        return cls(DEFAULT_LABELS)

    def with_overrides(self, overrides: Mapping[str, LabelOverride]) -> "LabelTable":
        """Return a new table with ``overrides`` replacing individual labels.

        A label overridden with an empty sequence is removed.
        """
        merged: dict[str, LabelOverride] = dict(self._table)
        for label, value in overrides.items():
            merged[str(label)] = value
        return LabelTable(merged)

    def labels(self) -> list[str]:
        return list(self._table)

    def change_types(self, labels: Iterable[str]) -> tuple[str, ...]:
        """Return the duplicate-free union of change types for ``labels``."""
        result: list[str] = []
        for label in labels:
            for change_type in self._table.get(label, ()):
                if change_type not in result:
                    result.append(change_type)
        return tuple(result)

    def as_dict(self) -> dict[str, list[str]]:
        return {label: list(types) for label, types in self._table.items()}

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, label: object) -> bool:
        return label in self._table

    def __repr__(self) -> str:
        return f"LabelTable({self.as_dict()!r})"
