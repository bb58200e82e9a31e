"""Build a release description from a summarizer and a tag range."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from .release import Description, Release, Summarizer
from .speculate import find_next_version
from .utils import log_debug, log_info, log_warning

UNRELEASED_VERSION = "(Unreleased)"
UNRELEASED_REF = "HEAD"


def resolve_since_release(summarizer: Summarizer, since_tag: str) -> Release:
    """Return the release the changelog starts from."""
    if since_tag:
        return summarizer.release(since_tag)
    release = summarizer.last_release()
    log_info(f"since tag not given, using latest release {release.version}")
    return release


def describe_release(
    summarizer: Summarizer,
    *,
    since_tag: str = "",
    until_tag: str = "",
    speculate_next: bool = False,
    enforce_v0: bool = False,
    now: Optional[datetime] = None,
) -> Description:
    """Collect the release, links, and changes for the range ``since_tag..until_tag``.

    Without ``until_tag`` the description covers everything after the since
    release and is labelled unreleased, unless ``speculate_next`` turns the
    pending changes into a version number.
    """
    since = resolve_since_release(summarizer, since_tag)
    changes = summarizer.changes(since.version, until_tag)
    supported = summarizer.supported_changes()
    log_debug(f"found {len(changes)} changes since {since.version}")

    notice = ""
    if until_tag:
        until = summarizer.release(until_tag)
        reference_url = summarizer.tag_url(until.version)
        changes_url = summarizer.changes_url(since.version, until.version)
    else:
        version = UNRELEASED_VERSION
        reference_ref = UNRELEASED_REF
        if speculate_next:
            speculated = find_next_version(
                since.version, changes, supported, enforce_v0=enforce_v0
            )
            if speculated is None:
                log_warning(
                    f"no changes since {since.version} affect the version; leaving release unversioned"
                )
            else:
                log_info(f"speculated next version {speculated}")
                version = speculated
                reference_ref = speculated
                notice = f"This version was speculated from the changes since {since.version}."
        until = Release(version=version, date=now or datetime.now(timezone.utc))
        reference_url = summarizer.tag_url(reference_ref)
        changes_url = summarizer.changes_url(since.version, UNRELEASED_REF)

    return Description(
        release=until,
        vcs_reference_url=reference_url,
        vcs_changes_url=changes_url,
        changes=changes,
        supported_changes=supported,
        notice=notice,
    )
