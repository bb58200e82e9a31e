"""Render release descriptions as Markdown, JSON, or a terminal table."""

from __future__ import annotations

import json
from typing import Literal

from rich.table import Table

from .change import ChangeSummary
from .release import Description
from .utils import render_to_text

OutputFormat = Literal["md", "json", "table"]
OUTPUT_FORMATS: tuple[OutputFormat, ...] = ("md", "json", "table")
DEFAULT_TITLE = "Changelog"


def _format_references(change: ChangeSummary) -> str:
    links = [f"[{reference.text}]({reference.url})" for reference in change.references]
    if not links:
        return ""
    return f" [{', '.join(links)}]"


def render_markdown(description: Description, *, title: str = DEFAULT_TITLE) -> str:
    """Render a description as a Markdown document."""
    release = description.release
    lines: list[str] = []
    if title:
        lines.append(f"# {title}")
        lines.append("")
    lines.append(
        f"## [{release.version}]({description.vcs_reference_url}) "
        f"({release.date.date().isoformat()})"
    )
    lines.append("")
    lines.append(f"[Full Changelog]({description.vcs_changes_url})")
    lines.append("")
    if description.notice:
        lines.append(description.notice)
        lines.append("")

    sections: list[str] = []
    for change_type in description.supported_changes:
        matching = [
            change for change in description.changes if change_type.name in change.change_types
        ]
        if not matching:
            continue
        section = [f"### {change_type.title}", ""]
        section.extend(f"- {change.text}{_format_references(change)}" for change in matching)
        sections.append("\n".join(section))

    if sections:
        lines.append("\n\n".join(sections))
    else:
        lines.append("**No changes.**")
    return "\n".join(lines).strip() + "\n"


def description_to_dict(description: Description) -> dict[str, object]:
    return {
        "release": {
            "version": description.release.version,
            "date": description.release.date.isoformat(),
        },
        "vcsReferenceURL": description.vcs_reference_url,
        "vcsChangesURL": description.vcs_changes_url,
        "changes": [
            {
                "text": change.text,
                "changeTypes": list(change.change_types),
                "timestamp": change.timestamp.isoformat(),
                "references": [
                    {"text": reference.text, "url": reference.url}
                    for reference in change.references
                ],
            }
            for change in description.changes
        ],
        "notice": description.notice,
    }


def render_json(description: Description) -> str:
    return json.dumps(description_to_dict(description), indent=2) + "\n"


def render_table(description: Description, *, title: str = DEFAULT_TITLE) -> str:
    """Render the changes as a plain-text table for terminal review."""
    titles = {change_type.name: change_type.title for change_type in description.supported_changes}
    table = Table(
        title=f"{title} {description.release.version}".strip(),
        box=None,
        padding=(0, 2, 0, 0),
        show_header=True,
    )
    table.add_column("TYPE", style="cyan", no_wrap=True)
    table.add_column("TITLE")
    table.add_column("REF", no_wrap=True)
    table.add_column("CLOSED", style="dim", no_wrap=True)
    for change in description.changes:
        table.add_row(
            ", ".join(titles.get(name, name) for name in change.change_types),
            change.text,
            " ".join(reference.text for reference in change.references),
            change.timestamp.date().isoformat(),
        )
    return render_to_text(table)


def render(description: Description, output: OutputFormat, *, title: str = DEFAULT_TITLE) -> str:
    if output == "json":
        return render_json(description)
    if output == "table":
        return render_table(description, title=title)
    return render_markdown(description, title=title)
