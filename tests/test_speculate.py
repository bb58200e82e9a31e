from __future__ import annotations

from datetime import datetime, timezone

import pytest
from packaging.version import Version

from chronicle.change import (
    ADDED_FEATURE,
    BREAKING_CHANGE,
    BUG_FIX,
    DEFAULT_CHANGE_TYPES,
    ChangeSummary,
    ChangeType,
    SemVerKind,
)
from chronicle.errors import ConfigurationError
from chronicle.speculate import bump_version, find_next_version, split_version_prefix

CLOSED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _change(*change_types: str) -> ChangeSummary:
    return ChangeSummary(text="change", change_types=change_types, timestamp=CLOSED_AT)


@pytest.mark.parametrize(
    ("current", "changes", "enforce_v0", "expected"),
    [
        ("v0.1.0", [_change(BREAKING_CHANGE.name)], True, "v0.2.0"),
        ("v0.1.0", [_change(BREAKING_CHANGE.name)], False, "v1.0.0"),
        ("v1.2.3", [_change(BUG_FIX.name)], False, "v1.2.4"),
        ("v1.2.3", [_change(BUG_FIX.name), _change(ADDED_FEATURE.name)], False, "v1.3.0"),
        ("1.2.3", [_change(BREAKING_CHANGE.name)], True, "2.0.0"),
    ],
)
def test_find_next_version(
    current: str, changes: list[ChangeSummary], enforce_v0: bool, expected: str
) -> None:
    assert (
        find_next_version(current, changes, DEFAULT_CHANGE_TYPES, enforce_v0=enforce_v0)
        == expected
    )


def test_find_next_version_without_versioned_changes() -> None:
    docs = ChangeType("docs", "Documentation")

    assert find_next_version("v1.0.0", [_change("docs")], [docs]) is None
    assert find_next_version("v1.0.0", [], DEFAULT_CHANGE_TYPES) is None


def test_unknown_change_type_names_are_ignored() -> None:
    changes = [_change("mystery"), _change(BUG_FIX.name)]

    assert find_next_version("v2.0.0", changes, DEFAULT_CHANGE_TYPES) == "v2.0.1"


def test_bump_version_resets_lower_fields() -> None:
    assert bump_version(Version("1.4.7"), SemVerKind.MAJOR) == Version("2.0.0")
    assert bump_version(Version("1.4.7"), SemVerKind.MINOR) == Version("1.5.0")
    assert bump_version(Version("1.4"), SemVerKind.PATCH) == Version("1.4.1")


def test_split_version_prefix() -> None:
    assert split_version_prefix("v1.2.3") == ("v", Version("1.2.3"))
    assert split_version_prefix("1.2.3") == ("", Version("1.2.3"))


def test_split_version_prefix_rejects_non_versions() -> None:
    with pytest.raises(ConfigurationError, match="not a valid semantic version"):
        split_version_prefix("nightly")
