"""Error types raised by chronicle."""

from __future__ import annotations


class ChronicleError(Exception):
    """Base class for all chronicle failures."""


class ConfigurationError(ChronicleError):
    """Raised for malformed remotes, coordinates, or configuration values."""


class NotFoundError(ChronicleError):
    """Raised when a tag, release, or latest release cannot be located."""


class UpstreamFetchError(ChronicleError):
    """Raised when a git or GitHub call fails.

    The message names the operation and the repository involved; the
    original failure is chained as ``__cause__``.
    """

    def __init__(self, operation: str, repository: str, detail: str = "") -> None:
        self.operation = operation
        self.repository = repository
        self.detail = detail
        message = f"failed to {operation} for {repository}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
