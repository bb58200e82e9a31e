"""Local git access: remote lookup and tag resolution."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Sequence

from .errors import ConfigurationError, NotFoundError, UpstreamFetchError
from .utils import coerce_datetime, log_debug


@dataclass(frozen=True)
class Tag:
    """A git tag and the commit time of the commit it points to."""

    name: str
    timestamp: datetime


def _run_git(path: Path, args: Sequence[str], *, operation: str) -> subprocess.CompletedProcess[str]:
    command = ["git", *args]
    log_debug(f"running {' '.join(command)} in {path}")
    try:
        return subprocess.run(
            command,
            cwd=str(path),
            check=False,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as exc:
        raise UpstreamFetchError(
            operation, str(path), "git is required but was not found in PATH."
        ) from exc


def remote_url(path: Path, remote: str = "origin") -> str:
    """Return the URL configured for ``remote`` in the repository at ``path``."""
    result = _run_git(path, ["remote", "get-url", remote], operation="read the remote URL")
    url = result.stdout.strip()
    if result.returncode != 0 or not url:
        raise ConfigurationError(
            f"no git remote '{remote}' configured for repository at {path}"
        )
    return url


def _commit_timestamp(path: Path, ref: str) -> datetime:
    result = _run_git(
        path,
        ["log", "-1", "--format=%cI", f"{ref}^{{commit}}"],
        operation=f"read the commit time of '{ref}'",
    )
    if result.returncode != 0:
        raise UpstreamFetchError(
            f"read the commit time of '{ref}'", str(path), result.stderr.strip()
        )
    timestamp = coerce_datetime(result.stdout.strip())
    if timestamp is None:
        raise UpstreamFetchError(
            f"read the commit time of '{ref}'",
            str(path),
            f"unparsable timestamp {result.stdout.strip()!r}",
        )
    return timestamp


def search_for_tag(path: Path, ref: str) -> Tag:
    """Resolve a tag name to the commit time of the commit it points to."""
    if not ref:
        raise NotFoundError("no tag given")
    result = _run_git(
        path,
        ["rev-parse", "--verify", "--quiet", f"refs/tags/{ref}"],
        operation=f"look up tag '{ref}'",
    )
    if result.returncode != 0:
        raise NotFoundError(f"tag '{ref}' not found in repository at {path}")
    return Tag(name=ref, timestamp=_commit_timestamp(path, f"refs/tags/{ref}"))


def list_tags(path: Path) -> list[Tag]:
    """Return all tags in the repository, oldest commit first."""
    result = _run_git(
        path,
        [
            "for-each-ref",
            "--format=%(refname:short)%09%(*committerdate:iso-strict)%09%(committerdate:iso-strict)",
            "refs/tags",
        ],
        operation="list tags",
    )
    if result.returncode != 0:
        raise UpstreamFetchError("list tags", str(path), result.stderr.strip())
    tags: list[Tag] = []
    for line in result.stdout.splitlines():
        name, _, remainder = line.partition("\t")
        peeled, _, direct = remainder.partition("\t")
        # Annotated tags carry the commit date on the peeled object.
        timestamp = coerce_datetime(peeled) or coerce_datetime(direct)
        if not name or timestamp is None:
            continue
        tags.append(Tag(name=name, timestamp=timestamp))
    tags.sort(key=lambda tag: tag.timestamp)
    return tags
