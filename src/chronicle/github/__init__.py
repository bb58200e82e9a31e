"""GitHub-backed release summarization."""

from __future__ import annotations

from .labels import DEFAULT_LABELS, LabelTable
from .remote import RepoCoordinates, parse_remote_url
from .summarizer import ChangeSummarizer

__all__ = [
    "ChangeSummarizer",
    "DEFAULT_LABELS",
    "LabelTable",
    "RepoCoordinates",
    "parse_remote_url",
]
