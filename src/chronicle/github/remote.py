"""Extract repository coordinates from git remote URLs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ..errors import ConfigurationError

DEFAULT_HOST = "github.com"


@dataclass(frozen=True)
class RepoCoordinates:
    """Where a repository lives on its hosting service."""

    host: str
    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"


RemoteParser = Callable[[str], Optional[RepoCoordinates]]

_SCP_PATTERN = re.compile(r"^[\w.-]+@(?P<host>[^:/]+):(?P<path>[^:]+)$")
_SSH_PATTERN = re.compile(r"^ssh://(?:[\w.-]+@)?(?P<host>[^/:]+)(?::\d+)?/(?P<path>.+)$")
_HTTPS_PATTERN = re.compile(
    r"^https?://(?:[^@/]+@)?(?P<host>[^/:]+(?::\d+)?)/(?P<path>.+)$"
)


def _split_path(host: str, path: str) -> Optional[RepoCoordinates]:
    path = path.strip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    parts = path.split("/")
    if len(parts) != 2:
        return None
    return RepoCoordinates(host=host, owner=parts[0], name=parts[1])


def parse_scp_url(url: str) -> Optional[RepoCoordinates]:
    """Parse the scp-like SSH form, e.g. ``git@github.com:owner/repo.git``."""
    match = _SCP_PATTERN.match(url)
    if match is None:
        return None
    return _split_path(match.group("host"), match.group("path"))


def parse_ssh_url(url: str) -> Optional[RepoCoordinates]:
    """Parse ``ssh://git@github.com/owner/repo.git``.

    An SSH port only applies to the git transport and is dropped.
    """
    match = _SSH_PATTERN.match(url)
    if match is None:
        return None
    return _split_path(match.group("host"), match.group("path"))


def parse_https_url(url: str) -> Optional[RepoCoordinates]:
    """Parse ``https://github.com/owner/repo(.git)``.

    A port stays part of the host, since the web UI and API are served there.
    """
    match = _HTTPS_PATTERN.match(url)
    if match is None:
        return None
    return _split_path(match.group("host"), match.group("path"))


REMOTE_PARSERS: tuple[RemoteParser, ...] = (
    parse_scp_url,
    parse_ssh_url,
    parse_https_url,
)


def parse_remote_url(
    url: str, parsers: Sequence[RemoteParser] = REMOTE_PARSERS
) -> RepoCoordinates:
    """Return the coordinates of ``url`` using the first parser that accepts it."""
    stripped = url.strip()
    for parser in parsers:
        coordinates = parser(stripped)
        if coordinates is None:
            continue
        if not coordinates.owner or not coordinates.name:
            raise ConfigurationError(
                f"failed to parse repo={url!r} URL: empty owner or repository name"
            )
        return coordinates
    raise ConfigurationError(f"failed to parse repo={url!r} URL: unsupported remote format")
