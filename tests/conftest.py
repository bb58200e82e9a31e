"""Shared fixtures for the chronicle test-suite."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

import pytest

from chronicle.change import (
    ADDED_FEATURE,
    BUG_FIX,
    DEFAULT_CHANGE_TYPES,
    ChangeSummary,
    ChangeType,
    Reference,
)
from chronicle.errors import NotFoundError
from chronicle.release import Release


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


class FakeSummarizer:
    """In-memory summarizer for exercising callers of the summarizer contract."""

    base_url = "https://github.com/acme/widgets"

    def __init__(
        self,
        releases: dict[str, Release],
        latest: str,
        changes: Sequence[ChangeSummary],
        supported: Sequence[ChangeType] = DEFAULT_CHANGE_TYPES,
    ) -> None:
        self.releases = releases
        self.latest = latest
        self._changes = list(changes)
        self._supported = list(supported)
        self.calls: list[tuple[str, ...]] = []

    def release(self, ref: str) -> Release:
        self.calls.append(("release", ref))
        if ref not in self.releases:
            raise NotFoundError(f"release '{ref}' not found in acme/widgets")
        return self.releases[ref]

    def last_release(self) -> Release:
        self.calls.append(("last_release",))
        return self.releases[self.latest]

    def tag_url(self, tag: str) -> str:
        return f"{self.base_url}/tree/{tag}"

    def changes_url(self, since_ref: str, until_ref: str) -> str:
        return f"{self.base_url}/compare/{since_ref}...{until_ref}"

    def changes(self, since_ref: str, until_ref: str) -> list[ChangeSummary]:
        self.calls.append(("changes", since_ref, until_ref))
        return list(self._changes)

    def supported_changes(self) -> list[ChangeType]:
        return list(self._supported)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Keep config discovery and env overrides away from the developer's machine."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_CONFIG_DIRS", str(tmp_path / "xdg"))
    for key in list(os.environ):
        if key.startswith("CHRONICLE_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    return home


@pytest.fixture
def sample_changes() -> list[ChangeSummary]:
    return [
        ChangeSummary(
            text="Add widget export",
            change_types=(ADDED_FEATURE.name,),
            timestamp=utc(2024, 2, 1),
            references=(Reference("#3", "https://github.com/acme/widgets/issues/3"),),
        ),
        ChangeSummary(
            text="Fix crash on empty input",
            change_types=(BUG_FIX.name,),
            timestamp=utc(2024, 2, 10),
            references=(Reference("#4", "https://github.com/acme/widgets/pull/4"),),
        ),
    ]


@pytest.fixture
def fake_summarizer(sample_changes: list[ChangeSummary]) -> FakeSummarizer:
    releases = {
        "v1.0.0": Release(version="v1.0.0", date=utc(2024, 1, 1)),
        "v1.1.0": Release(version="v1.1.0", date=utc(2024, 3, 1)),
    }
    return FakeSummarizer(releases, latest="v1.0.0", changes=sample_changes)
