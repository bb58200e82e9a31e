"""Change types and change summaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Sequence


class SemVerKind(Enum):
    """The part of a semantic version a change type bumps."""

    UNKNOWN = "unknown"
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"

    @property
    def rank(self) -> int:
        return _SEMVER_RANKS[self]

    @classmethod
    def parse(cls, value: str) -> "SemVerKind":
        normalized = value.strip().lower()
        for kind in cls:
            if kind.value == normalized:
                return kind
        allowed = ", ".join(kind.value for kind in cls)
        raise ValueError(f"unknown semver field '{value}'. Allowed values: {allowed}")


_SEMVER_RANKS = {
    SemVerKind.UNKNOWN: 0,
    SemVerKind.PATCH: 1,
    SemVerKind.MINOR: 2,
    SemVerKind.MAJOR: 3,
}


@dataclass(frozen=True)
class ChangeType:
    """A normalized change category such as ``bug-fix``."""

    name: str
    title: str
    kind: SemVerKind = SemVerKind.UNKNOWN


@dataclass(frozen=True)
class Reference:
    """An external link attached to a change summary."""

    text: str
    url: str


@dataclass(frozen=True)
class ChangeSummary:
    """A single changelog line derived from one closed issue or PR."""

    text: str
    change_types: tuple[str, ...]
    timestamp: datetime
    references: tuple[Reference, ...] = field(default_factory=tuple)


BREAKING_CHANGE = ChangeType("breaking-change", "Breaking Changes", SemVerKind.MAJOR)
SECURITY_FIXES = ChangeType("security-fixes", "Security Fixes", SemVerKind.PATCH)
ADDED_FEATURE = ChangeType("added-feature", "Added Features", SemVerKind.MINOR)
BUG_FIX = ChangeType("bug-fix", "Bug Fixes", SemVerKind.PATCH)
REMOVED_FEATURE = ChangeType("removed-feature", "Removed Features", SemVerKind.MAJOR)
DEPRECATED_FEATURE = ChangeType("deprecated-feature", "Deprecated Features", SemVerKind.MINOR)

# Section order used when rendering.
DEFAULT_CHANGE_TYPES: tuple[ChangeType, ...] = (
    BREAKING_CHANGE,
    SECURITY_FIXES,
    ADDED_FEATURE,
    BUG_FIX,
    REMOVED_FEATURE,
    DEPRECATED_FEATURE,
)


def find_change_type(name: str, change_types: Iterable[ChangeType]) -> Optional[ChangeType]:
    """Return the change type called ``name``, if any."""
    for change_type in change_types:
        if change_type.name == name:
            return change_type
    return None


def largest_kind(
    changes: Iterable[ChangeSummary], change_types: Sequence[ChangeType]
) -> SemVerKind:
    """Return the most significant semver kind across all changes."""
    largest = SemVerKind.UNKNOWN
    for change in changes:
        for name in change.change_types:
            change_type = find_change_type(name, change_types)
            if change_type is not None and change_type.kind.rank > largest.rank:
                largest = change_type.kind
    return largest
