"""GitHub access through the ``gh`` CLI."""

from __future__ import annotations

import json
import shutil
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional
from urllib.parse import quote

from ..errors import NotFoundError, UpstreamFetchError
from ..utils import coerce_datetime, log_debug
from .remote import DEFAULT_HOST, RepoCoordinates

PAGE_SIZE = 100


@dataclass(frozen=True)
class Issue:
    """A closed issue or pull request as reported by GitHub."""

    number: int
    title: str
    url: str
    labels: tuple[str, ...] = field(default_factory=tuple)
    closed_at: Optional[datetime] = None
    state: str = "closed"


@dataclass(frozen=True)
class GithubRelease:
    """A GitHub release, including drafts."""

    tag: str
    date: datetime
    draft: bool = False


class _HTTPNotFound(Exception):
    pass


def _find_gh_executable() -> str:
    gh_path = shutil.which("gh")
    if gh_path is None:
        raise FileNotFoundError("gh")
    return gh_path


def _gh_api(
    coords: RepoCoordinates, endpoint: str, *, paginate: bool
) -> list[Mapping[str, Any]]:
    """Call ``gh api`` and return the decoded objects.

    Paginated endpoints are flattened with ``--jq '.[]'`` so every output
    line holds one JSON object.
    """
    command = [_find_gh_executable(), "api"]
    if coords.host != DEFAULT_HOST:
        command.extend(["--hostname", coords.host])
    if paginate:
        command.extend(["--paginate", "--jq", ".[]"])
    command.append(endpoint)
    log_debug(f"running {' '.join(command)}")
    result = subprocess.run(command, check=False, capture_output=True, text=True)
    if result.returncode != 0:
        stderr = result.stderr.strip()
        if "HTTP 404" in stderr or "Not Found" in stderr:
            raise _HTTPNotFound(stderr)
        raise subprocess.CalledProcessError(
            result.returncode, command, output=result.stdout, stderr=stderr
        )
    if not paginate:
        payload = json.loads(result.stdout or "null")
        return [payload] if isinstance(payload, Mapping) else []
    objects: list[Mapping[str, Any]] = []
    for line in result.stdout.splitlines():
        line = line.strip()
        if not line:
            continue
        value = json.loads(line)
        if isinstance(value, Mapping):
            objects.append(value)
    return objects


def _call(
    coords: RepoCoordinates,
    endpoint: str,
    *,
    paginate: bool,
    operation: str,
    missing: Optional[str] = None,
) -> list[Mapping[str, Any]]:
    try:
        return _gh_api(coords, endpoint, paginate=paginate)
    except _HTTPNotFound as exc:
        if missing is not None:
            raise NotFoundError(missing) from exc
        raise UpstreamFetchError(operation, coords.slug, str(exc)) from exc
    except FileNotFoundError as exc:
        raise UpstreamFetchError(
            operation, coords.slug, "the 'gh' CLI is required but was not found in PATH."
        ) from exc
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip() or f"gh exited with status {exc.returncode}"
        raise UpstreamFetchError(operation, coords.slug, detail) from exc
    except json.JSONDecodeError as exc:
        raise UpstreamFetchError(operation, coords.slug, f"invalid JSON from gh: {exc}") from exc


def parse_issue(payload: Mapping[str, Any]) -> Issue:
    """Build an Issue from a REST ``issues`` payload."""
    labels = tuple(
        str(label.get("name"))
        for label in payload.get("labels") or []
        if isinstance(label, Mapping) and label.get("name")
    )
    return Issue(
        number=int(payload["number"]),
        title=str(payload.get("title") or ""),
        url=str(payload.get("html_url") or payload.get("url") or ""),
        labels=labels,
        closed_at=coerce_datetime(payload.get("closed_at")),
        state=str(payload.get("state") or "").lower(),
    )


def parse_release(payload: Mapping[str, Any]) -> GithubRelease:
    """Build a GithubRelease from a REST ``releases`` payload."""
    date = coerce_datetime(payload.get("published_at")) or coerce_datetime(
        payload.get("created_at")
    )
    if date is None:
        raise ValueError(f"release {payload.get('tag_name')!r} has no date")
    return GithubRelease(
        tag=str(payload.get("tag_name") or ""),
        date=date,
        draft=bool(payload.get("draft", False)),
    )


def fetch_closed_issues(coords: RepoCoordinates) -> list[Issue]:
    """Return every closed issue and pull request of the repository."""
    endpoint = f"repos/{coords.owner}/{coords.name}/issues?state=closed&per_page={PAGE_SIZE}"
    payloads = _call(coords, endpoint, paginate=True, operation="fetch closed issues")
    try:
        issues = [parse_issue(payload) for payload in payloads]
    except (KeyError, TypeError, ValueError) as exc:
        raise UpstreamFetchError(
            "fetch closed issues", coords.slug, f"malformed issue: {exc}"
        ) from exc
    closed = [issue for issue in issues if issue.state == "closed"]
    log_debug(f"fetched {len(closed)} closed issues from {coords.slug}")
    return closed


def fetch_all_releases(coords: RepoCoordinates) -> list[GithubRelease]:
    """Return all releases, in the order GitHub lists them (newest first)."""
    endpoint = f"repos/{coords.owner}/{coords.name}/releases?per_page={PAGE_SIZE}"
    payloads = _call(coords, endpoint, paginate=True, operation="fetch all releases")
    try:
        releases = [parse_release(payload) for payload in payloads]
    except ValueError as exc:
        raise UpstreamFetchError("fetch all releases", coords.slug, str(exc)) from exc
    log_debug(f"fetched {len(releases)} releases from {coords.slug}")
    return releases


def fetch_release(coords: RepoCoordinates, ref: str) -> GithubRelease:
    """Return the release published for tag ``ref``."""
    endpoint = f"repos/{coords.owner}/{coords.name}/releases/tags/{quote(ref, safe='')}"
    missing = f"release '{ref}' not found in {coords.slug}"
    payloads = _call(
        coords, endpoint, paginate=False, operation=f"fetch release '{ref}'", missing=missing
    )
    if not payloads:
        raise NotFoundError(missing)
    try:
        return parse_release(payloads[0])
    except ValueError as exc:
        raise UpstreamFetchError(f"fetch release '{ref}'", coords.slug, str(exc)) from exc
