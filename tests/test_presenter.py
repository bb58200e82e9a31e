from __future__ import annotations

import json

from chronicle.change import DEFAULT_CHANGE_TYPES, ChangeSummary
from chronicle.presenter import render, render_json, render_markdown, render_table
from chronicle.release import Description, Release

from conftest import utc


def _description(changes: list[ChangeSummary], notice: str = "") -> Description:
    return Description(
        release=Release(version="v1.1.0", date=utc(2024, 3, 1)),
        vcs_reference_url="https://github.com/acme/widgets/tree/v1.1.0",
        vcs_changes_url="https://github.com/acme/widgets/compare/v1.0.0...v1.1.0",
        changes=changes,
        supported_changes=list(DEFAULT_CHANGE_TYPES),
        notice=notice,
    )


def test_render_markdown_groups_changes_by_type(sample_changes: list[ChangeSummary]) -> None:
    rendered = render_markdown(_description(sample_changes), title="Widgets")

    assert rendered == (
        "# Widgets\n"
        "\n"
        "## [v1.1.0](https://github.com/acme/widgets/tree/v1.1.0) (2024-03-01)\n"
        "\n"
        "[Full Changelog](https://github.com/acme/widgets/compare/v1.0.0...v1.1.0)\n"
        "\n"
        "### Added Features\n"
        "\n"
        "- Add widget export [[#3](https://github.com/acme/widgets/issues/3)]\n"
        "\n"
        "### Bug Fixes\n"
        "\n"
        "- Fix crash on empty input [[#4](https://github.com/acme/widgets/pull/4)]\n"
    )


def test_render_markdown_without_changes() -> None:
    rendered = render_markdown(_description([]))

    assert rendered.startswith("# Changelog\n")
    assert rendered.endswith("**No changes.**\n")
    assert "###" not in rendered


def test_render_markdown_includes_notice(sample_changes: list[ChangeSummary]) -> None:
    notice = "This version was speculated from the changes since v1.0.0."

    rendered = render_markdown(_description(sample_changes, notice=notice))

    assert f"\n{notice}\n" in rendered
    assert rendered.index(notice) < rendered.index("### Added Features")


def test_change_with_several_types_appears_in_each_section() -> None:
    change = ChangeSummary(
        text="Rework auth",
        change_types=("breaking-change", "security-fixes"),
        timestamp=utc(2024, 2, 1),
    )

    rendered = render_markdown(_description([change]))

    assert rendered.count("- Rework auth") == 2
    assert "### Breaking Changes" in rendered
    assert "### Security Fixes" in rendered


def test_render_json_document_shape(sample_changes: list[ChangeSummary]) -> None:
    document = json.loads(render_json(_description(sample_changes)))

    assert document["release"] == {"version": "v1.1.0", "date": "2024-03-01T00:00:00+00:00"}
    assert document["vcsReferenceURL"] == "https://github.com/acme/widgets/tree/v1.1.0"
    assert document["vcsChangesURL"].endswith("/compare/v1.0.0...v1.1.0")
    assert document["changes"][0] == {
        "text": "Add widget export",
        "changeTypes": ["added-feature"],
        "timestamp": "2024-02-01T00:00:00+00:00",
        "references": [{"text": "#3", "url": "https://github.com/acme/widgets/issues/3"}],
    }
    assert document["notice"] == ""


def test_render_table_lists_every_change(sample_changes: list[ChangeSummary]) -> None:
    rendered = render_table(_description(sample_changes), title="Widgets")

    assert "Widgets v1.1.0" in rendered
    assert "TYPE" in rendered
    assert "Add widget export" in rendered
    assert "#4" in rendered
    assert "Bug Fixes" in rendered


def test_render_dispatches_on_format(sample_changes: list[ChangeSummary]) -> None:
    description = _description(sample_changes)

    assert render(description, "md").startswith("# Changelog")
    assert json.loads(render(description, "json"))["release"]["version"] == "v1.1.0"
    assert "CLOSED" in render(description, "table")
