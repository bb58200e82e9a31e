"""Tests for the issue filter pipeline."""

from __future__ import annotations

from datetime import datetime, timezone

from chronicle.github.client import Issue
from chronicle.github.filters import (
    filter_issues,
    issues_after,
    issues_before,
    issues_closed,
    issues_with_label,
)

SINCE = datetime(2024, 1, 10, tzinfo=timezone.utc)
UNTIL = datetime(2024, 1, 20, tzinfo=timezone.utc)


def _issue(number: int, closed_at: datetime | None, *labels: str, state: str = "closed") -> Issue:
    return Issue(
        number=number,
        title=f"Issue {number}",
        url=f"https://github.com/acme/widgets/issues/{number}",
        labels=labels,
        closed_at=closed_at,
        state=state,
    )


def test_issues_after_excludes_the_boundary() -> None:
    at_boundary = _issue(1, SINCE, "bug")
    later = _issue(2, datetime(2024, 1, 11, tzinfo=timezone.utc), "bug")

    assert filter_issues([at_boundary, later], issues_after(SINCE)) == [later]


def test_issues_before_includes_the_boundary() -> None:
    at_boundary = _issue(1, UNTIL, "bug")
    later = _issue(2, datetime(2024, 1, 21, tzinfo=timezone.utc), "bug")

    assert filter_issues([at_boundary, later], issues_before(UNTIL)) == [at_boundary]


def test_time_filters_reject_issues_without_close_time() -> None:
    issue = _issue(1, None, "bug")

    assert filter_issues([issue], issues_after(SINCE)) == []
    assert filter_issues([issue], issues_before(UNTIL)) == []


def test_issues_with_label_requires_an_intersection() -> None:
    bug = _issue(1, UNTIL, "bug", "ui")
    question = _issue(2, UNTIL, "question")
    unlabeled = _issue(3, UNTIL)

    kept = filter_issues([bug, question, unlabeled], issues_with_label("bug", "enhancement"))

    assert kept == [bug]


def test_issues_closed_skips_open_items() -> None:
    closed = _issue(1, UNTIL, "bug")
    still_open = _issue(2, None, "bug", state="open")

    assert filter_issues([closed, still_open], issues_closed()) == [closed]


def test_filter_issues_without_filters_passes_everything_through() -> None:
    issues = [_issue(1, SINCE), _issue(2, None, state="open")]

    assert filter_issues(issues) == issues


def test_filter_order_does_not_matter_and_issue_order_is_kept() -> None:
    issues = [
        _issue(5, datetime(2024, 1, 15, tzinfo=timezone.utc), "bug"),
        _issue(1, datetime(2024, 1, 5, tzinfo=timezone.utc), "bug"),
        _issue(3, datetime(2024, 1, 12, tzinfo=timezone.utc), "enhancement"),
        _issue(4, datetime(2024, 1, 18, tzinfo=timezone.utc), "wontfix"),
        _issue(2, datetime(2024, 1, 11, tzinfo=timezone.utc), "bug"),
    ]
    filters = [issues_after(SINCE), issues_before(UNTIL), issues_with_label("bug", "enhancement")]

    forward = filter_issues(issues, *filters)
    backward = filter_issues(issues, *reversed(filters))

    assert forward == backward
    assert [issue.number for issue in forward] == [5, 3, 2]
