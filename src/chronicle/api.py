"""Python-friendly facade for invoking chronicle functionality."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .change import ChangeSummary
from .cli import CLIContext, create_cli_context, create_summarizer, run_create, run_next_version
from .presenter import OutputFormat
from .release import Description, Release


class Chronicle:
    """High-level helper that mirrors the CLI commands for Python callers."""

    def __init__(
        self,
        *,
        root: Path | str = ".",
        config: Path | str | None = None,
        verbosity: int = 0,
    ) -> None:
        self._root = Path(root)
        resolved_config = Path(config) if config is not None else None
        self._ctx = create_cli_context(config=resolved_config, verbosity=verbosity)

    @property
    def context(self) -> CLIContext:
        """Expose the underlying CLIContext for advanced scenarios."""

        return self._ctx

    @property
    def root(self) -> Path:
        return self._root

    def last_release(self) -> Release:
        """Return the newest published (non-draft) release."""

        return create_summarizer(self._root, self._ctx.ensure_config()).last_release()

    def changes(self, since_ref: str, until_ref: str = "") -> list[ChangeSummary]:
        """Return the labeled changes closed after ``since_ref`` up to ``until_ref``."""

        return create_summarizer(self._root, self._ctx.ensure_config()).changes(
            since_ref, until_ref
        )

    def create(
        self,
        *,
        since_tag: Optional[str] = None,
        until_tag: Optional[str] = None,
        speculate_next_version: Optional[bool] = None,
        enforce_v0: Optional[bool] = None,
        title: Optional[str] = None,
        version_file: Optional[str] = None,
        output: Optional[OutputFormat] = None,
    ) -> Description:
        """Render the changelog like ``chronicle create`` and return its description."""

        return run_create(
            self._ctx,
            self._root,
            since_tag=since_tag,
            until_tag=until_tag,
            speculate_next_version=speculate_next_version,
            enforce_v0=enforce_v0,
            title=title,
            version_file=version_file,
            output=output,
        )

    def next_version(
        self, *, since_tag: Optional[str] = None, enforce_v0: Optional[bool] = None
    ) -> str:
        """Return the speculated next version like ``chronicle next-version``."""

        return run_next_version(self._ctx, self._root, since_tag=since_tag, enforce_v0=enforce_v0)
