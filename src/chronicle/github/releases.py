"""Resolve range boundaries and the latest published release."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from .. import git
from ..git import Tag
from .client import GithubRelease


def resolve_tag(repo_path: Path, ref: str) -> Tag:
    """Return the tag called ``ref``; raises NotFoundError when unknown."""
    return git.search_for_tag(repo_path, ref)


def latest_non_draft_release(releases: Iterable[GithubRelease]) -> Optional[GithubRelease]:
    """Return the first non-draft release in API order, if any."""
    for candidate in releases:
        if not candidate.draft:
            return candidate
    return None
