"""Summarize closed GitHub issues and pull requests between two tags."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from .. import git
from ..change import DEFAULT_CHANGE_TYPES, ChangeSummary, ChangeType, Reference
from ..errors import NotFoundError, UpstreamFetchError
from ..release import Release
from ..utils import log_debug
from . import client
from .filters import (
    IssueFilter,
    filter_issues,
    issues_after,
    issues_before,
    issues_closed,
    issues_with_label,
)
from .labels import LabelTable
from .releases import latest_non_draft_release, resolve_tag
from .remote import RepoCoordinates, parse_remote_url

__all__ = ["ChangeSummarizer"]


class ChangeSummarizer:
    """Summarizer backed by a local git checkout and its GitHub repository.

    Holds no mutable state after construction; every call to ``changes``
    re-fetches the closed issues.
    """

    def __init__(
        self,
        repo_path: Path,
        coordinates: RepoCoordinates,
        *,
        label_table: Optional[LabelTable] = None,
        change_types: Sequence[ChangeType] = DEFAULT_CHANGE_TYPES,
    ) -> None:
        self.repo_path = repo_path
        self.coordinates = coordinates
        self.label_table = label_table if label_table is not None else LabelTable.default()
        self._change_types = tuple(change_types)

    @classmethod
    def from_path(
        cls,
        repo_path: Path,
        *,
        label_table: Optional[LabelTable] = None,
        change_types: Sequence[ChangeType] = DEFAULT_CHANGE_TYPES,
        remote: str = "origin",
    ) -> "ChangeSummarizer":
        """Bind a summarizer to the GitHub repository behind ``remote``."""
        url = git.remote_url(repo_path, remote)
        coordinates = parse_remote_url(url)
        log_debug(f"using GitHub repository {coordinates.slug} on {coordinates.host}")
        return cls(
            repo_path,
            coordinates,
            label_table=label_table,
            change_types=change_types,
        )

    @property
    def _base_url(self) -> str:
        coords = self.coordinates
        return f"https://{coords.host}/{coords.owner}/{coords.name}"

    def release(self, ref: str) -> Release:
        target = client.fetch_release(self.coordinates, ref)
        return Release(version=target.tag, date=target.date)

    def last_release(self) -> Release:
        try:
            releases = client.fetch_all_releases(self.coordinates)
        except UpstreamFetchError as exc:
            raise UpstreamFetchError(
                "find the latest release", self.coordinates.slug, str(exc)
            ) from exc
        latest = latest_non_draft_release(releases)
        if latest is None:
            raise NotFoundError(
                f"unable to find latest release for {self.coordinates.slug}"
            )
        return Release(version=latest.tag, date=latest.date)

    def tag_url(self, tag: str) -> str:
        return f"{self._base_url}/tree/{tag}"

    def changes_url(self, since_ref: str, until_ref: str) -> str:
        return f"{self._base_url}/compare/{since_ref}...{until_ref}"

    def supported_changes(self) -> list[ChangeType]:
        """Return the change types the label table can produce, in section order."""
        produced = self.label_table.change_types(self.label_table.labels())
        supported = [change_type for change_type in self._change_types if change_type.name in produced]
        known = {change_type.name for change_type in supported}
        for name in produced:
            if name not in known:
                supported.append(ChangeType(name=name, title=name.replace("-", " ").title()))
        return supported

    def changes(self, since_ref: str, until_ref: str) -> list[ChangeSummary]:
        all_closed = client.fetch_closed_issues(self.coordinates)

        since_tag = resolve_tag(self.repo_path, since_ref)
        filters: list[IssueFilter] = [
            issues_closed(),
            issues_after(since_tag.timestamp),
            issues_with_label(*self.label_table.labels()),
        ]
        if until_ref:
            until_tag = resolve_tag(self.repo_path, until_ref)
            filters.append(issues_before(until_tag.timestamp))

        summaries: list[ChangeSummary] = []
        for issue in filter_issues(all_closed, *filters):
            change_types = self.label_table.change_types(issue.labels)
            if not change_types or issue.closed_at is None:
                continue
            summaries.append(
                ChangeSummary(
                    text=issue.title,
                    change_types=change_types,
                    timestamp=issue.closed_at,
                    references=(Reference(text=f"#{issue.number}", url=issue.url),),
                )
            )
        # Stable: ties keep the order GitHub returned.
        summaries.sort(key=lambda summary: summary.timestamp)
        log_debug(
            f"summarized {len(summaries)} of {len(all_closed)} closed issues "
            f"between {since_ref} and {until_ref or 'HEAD'}"
        )
        return summaries
