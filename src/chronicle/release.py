"""Release values and the summarizer contract shared by all providers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from .change import ChangeSummary, ChangeType


@dataclass(frozen=True)
class Release:
    """A released version and the time it was cut."""

    version: str
    date: datetime


@dataclass
class Description:
    """Everything a presenter needs to render a changelog for one release."""

    release: Release
    vcs_reference_url: str
    vcs_changes_url: str
    changes: list[ChangeSummary] = field(default_factory=list)
    supported_changes: list[ChangeType] = field(default_factory=list)
    notice: str = ""


class Summarizer(Protocol):
    """Resolve releases and summarize the changes between two references."""

    def release(self, ref: str) -> Release: ...

    def last_release(self) -> Release: ...

    def tag_url(self, tag: str) -> str: ...

    def changes_url(self, since_ref: str, until_ref: str) -> str: ...

    def changes(self, since_ref: str, until_ref: str) -> list[ChangeSummary]: ...

    def supported_changes(self) -> list[ChangeType]: ...
