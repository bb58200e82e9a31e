"""Composable predicates over closed issues."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable

from .client import Issue

IssueFilter = Callable[[Issue], bool]


def filter_issues(issues: Iterable[Issue], *filters: IssueFilter) -> list[Issue]:
    """Keep the issues every filter accepts, preserving their order."""
    return [issue for issue in issues if all(keep(issue) for keep in filters)]


def issues_closed() -> IssueFilter:
    def keep(issue: Issue) -> bool:
        return issue.state == "closed"

    return keep


def issues_after(since: datetime) -> IssueFilter:
    """Accept issues closed strictly after ``since``."""

    def keep(issue: Issue) -> bool:
        return issue.closed_at is not None and issue.closed_at > since

    return keep


def issues_before(until: datetime) -> IssueFilter:
    """Accept issues closed at or before ``until``."""

    def keep(issue: Issue) -> bool:
        return issue.closed_at is not None and issue.closed_at <= until

    return keep


def issues_with_label(*labels: str) -> IssueFilter:
    """Accept issues carrying at least one of ``labels``."""
    wanted = frozenset(labels)

    def keep(issue: Issue) -> bool:
        return not wanted.isdisjoint(issue.labels)

    return keep
