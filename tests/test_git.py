from __future__ import annotations

import os
import shutil
import subprocess
from datetime import datetime, timezone
from pathlib import Path

import pytest

from chronicle import git
from chronicle.errors import ConfigurationError, NotFoundError

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def _git(repo: Path, *args: str, date: str | None = None) -> None:
    env = dict(os.environ)
    if date is not None:
        env["GIT_COMMITTER_DATE"] = date
        env["GIT_AUTHOR_DATE"] = date
    subprocess.run(
        [
            "git",
            "-c",
            "user.name=Chronicle Tests",
            "-c",
            "user.email=tests@example.com",
            "-c",
            "commit.gpgsign=false",
            "-c",
            "tag.gpgsign=false",
            *args,
        ],
        cwd=repo,
        check=True,
        capture_output=True,
        env=env,
    )


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    path = tmp_path / "repo"
    path.mkdir()
    _git(path, "init", "--quiet")
    _git(path, "commit", "--allow-empty", "-m", "initial", date="2024-01-01T10:00:00+00:00")
    _git(path, "tag", "v1.0.0")
    _git(path, "commit", "--allow-empty", "-m", "second", date="2024-02-01T10:00:00+00:00")
    _git(path, "tag", "-a", "v1.1.0", "-m", "release 1.1.0", date="2024-02-05T10:00:00+00:00")
    return path


def test_search_for_tag_uses_commit_time(repo: Path) -> None:
    tag = git.search_for_tag(repo, "v1.0.0")

    assert tag.name == "v1.0.0"
    assert tag.timestamp == datetime(2024, 1, 1, 10, tzinfo=timezone.utc)


def test_annotated_tags_resolve_to_the_tagged_commit(repo: Path) -> None:
    tag = git.search_for_tag(repo, "v1.1.0")

    assert tag.timestamp == datetime(2024, 2, 1, 10, tzinfo=timezone.utc)


def test_search_for_tag_reports_unknown_tags(repo: Path) -> None:
    with pytest.raises(NotFoundError, match="v9.9.9"):
        git.search_for_tag(repo, "v9.9.9")


def test_search_for_tag_requires_a_name(repo: Path) -> None:
    with pytest.raises(NotFoundError):
        git.search_for_tag(repo, "")


def test_list_tags_orders_by_commit_time(repo: Path) -> None:
    assert [tag.name for tag in git.list_tags(repo)] == ["v1.0.0", "v1.1.0"]


def test_remote_url(repo: Path) -> None:
    _git(repo, "remote", "add", "origin", "git@github.com:acme/widgets.git")

    assert git.remote_url(repo) == "git@github.com:acme/widgets.git"


def test_missing_remote_is_a_configuration_error(repo: Path) -> None:
    with pytest.raises(ConfigurationError, match="no git remote 'upstream'"):
        git.remote_url(repo, "upstream")
