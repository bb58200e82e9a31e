"""Guess the next release version from the kinds of pending changes."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from packaging.version import InvalidVersion, Version

from .change import ChangeSummary, ChangeType, SemVerKind, largest_kind
from .errors import ConfigurationError


def split_version_prefix(label: str) -> tuple[str, Version]:
    """Split ``v1.2.3`` into ``("v", Version("1.2.3"))``."""
    prefix = ""
    value = label.strip()
    if value.startswith(("v", "V")):
        prefix = value[0]
        value = value[1:]
    try:
        return prefix, Version(value)
    except InvalidVersion as exc:
        raise ConfigurationError(
            f"release version {label!r} is not a valid semantic version (e.g. 1.2.3 or v1.2.3)"
        ) from exc


def bump_version(base: Version, kind: SemVerKind, *, enforce_v0: bool = False) -> Version:
    """Return ``base`` bumped by ``kind``.

    With ``enforce_v0`` a major bump of a 0.x version becomes a minor bump.
    """
    major, minor, micro = (list(base.release) + [0, 0, 0])[:3]
    if kind is SemVerKind.MAJOR and enforce_v0 and major == 0:
        kind = SemVerKind.MINOR
    if kind is SemVerKind.MAJOR:
        major += 1
        minor = 0
        micro = 0
    elif kind is SemVerKind.MINOR:
        minor += 1
        micro = 0
    elif kind is SemVerKind.PATCH:
        micro += 1
    return Version(f"{major}.{minor}.{micro}")


def find_next_version(
    current: str,
    changes: Iterable[ChangeSummary],
    change_types: Sequence[ChangeType],
    *,
    enforce_v0: bool = False,
) -> Optional[str]:
    """Return the next version label, or None when no change affects the version."""
    kind = largest_kind(changes, change_types)
    if kind is SemVerKind.UNKNOWN:
        return None
    prefix, base = split_version_prefix(current)
    return f"{prefix}{bump_version(base, kind, enforce_v0=enforce_v0)}"
