"""Core package exports for chronicle."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as metadata_version
from typing import TYPE_CHECKING, Any

__all__ = ["__version__", "Chronicle", "ChangeSummarizer"]

try:
    __version__ = metadata_version("chronicle")
except PackageNotFoundError:  # pragma: no cover - fallback for editable installs
    __version__ = "0.0.0"

if TYPE_CHECKING:  # pragma: no cover
    from .api import Chronicle
    from .github import ChangeSummarizer


def __getattr__(name: str) -> Any:  # pragma: no cover - simple delegation
    if name == "Chronicle":
        from .api import Chronicle as _Chronicle

        return _Chronicle
    if name == "ChangeSummarizer":
        from .github import ChangeSummarizer as _ChangeSummarizer

        return _ChangeSummarizer
    raise AttributeError(f"module 'chronicle' has no attribute {name!r}")
