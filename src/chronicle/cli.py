"""Command-line interface for chronicle."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, replace
from importlib.metadata import PackageNotFoundError, version as metadata_version
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, TypeVar, cast

import click

from . import __version__ as package_version
from . import git
from .config import Config, format_config, load_application_config
from .describe import describe_release, resolve_since_release
from .errors import ChronicleError, ConfigurationError, NotFoundError
from .github import ChangeSummarizer, LabelTable
from .presenter import OUTPUT_FORMATS, OutputFormat, render
from .release import Description
from .speculate import find_next_version
from .utils import (
    abort_on_user_interrupt,
    configure_logging,
    emit_output,
    format_bold,
    log_debug,
    log_info,
    log_success,
    log_warning,
    resolve_log_level,
)

F = TypeVar("F", bound=Callable[..., Any])

__all__ = [
    "cli",
    "main",
    "CLIContext",
    "create_cli_context",
    "create_summarizer",
    "run_create",
    "run_next_version",
]

VERSION_FLAGS = {"--version", "-V"}
HELP_FLAGS = {"--help", "-h"}
DEFAULT_COMMAND = "create"
_GROUP_FLAGS = {"-q", "--quiet", "--verbose", "-v", "-vv", "-vvv"}
_GROUP_OPTIONS_WITH_VALUE = {"--config", "-c"}


def _resolve_cli_version() -> str:
    try:
        return metadata_version("chronicle")
    except PackageNotFoundError:
        return package_version


def _log_level_for(config: Config, verbosity: int) -> int:
    if config.quiet:
        return logging.ERROR
    if verbosity == 1:
        return logging.INFO
    if verbosity >= 2:
        return logging.DEBUG
    return resolve_log_level(config.log.level)


@dataclass
class CLIContext:
    """Shared command context."""

    config_path: Optional[Path] = None
    verbosity: int = 0
    quiet: bool = False
    _config: Optional[Config] = None

    def ensure_config(self) -> Config:
        if self._config is None:
            try:
                config = load_application_config(self.config_path)
                if self.quiet:
                    config.quiet = True
                config.log.validate()
            except ConfigurationError as error:
                raise click.ClickException(str(error)) from error
            self._config = config
        return self._config

    def reset_config(self, config: Config) -> None:
        self._config = config


def create_cli_context(
    *,
    config: Optional[Path] = None,
    verbosity: int = 0,
    quiet: bool = False,
) -> CLIContext:
    """Return a CLIContext with logging configured from config and flags."""

    ctx = CLIContext(config_path=config, verbosity=verbosity, quiet=quiet)
    loaded = ctx.ensure_config()
    log_file = Path(loaded.log.file) if loaded.log.file else None
    configure_logging(
        _log_level_for(loaded, verbosity),
        structured=loaded.log.structured,
        log_file=log_file,
    )
    if loaded.config_path is not None:
        log_debug(f"using config file: {loaded.config_path}")
    return ctx


def create_summarizer(repo_path: Path, config: Config) -> ChangeSummarizer:
    """Construct the GitHub summarizer for the repository at ``repo_path``."""
    label_table = LabelTable.default().with_overrides(config.github.labels)
    return ChangeSummarizer.from_path(
        repo_path,
        label_table=label_table,
        change_types=config.github.changes,
        remote=config.github.remote,
    )


def _report_available_tags(repo_path: Path) -> None:
    try:
        tags = git.list_tags(repo_path)
    except ChronicleError:
        return
    if tags:
        recent = ", ".join(tag.name for tag in tags[-5:])
        log_warning(f"most recent tags: {recent}")


def _merge_options(config: Config, **overrides: Any) -> Config:
    merged = replace(config, **{key: value for key, value in overrides.items() if value is not None})
    try:
        merged.validate()
    except ConfigurationError as error:
        raise click.ClickException(str(error)) from error
    return merged


def run_create(
    ctx: CLIContext,
    repo_path: Path,
    *,
    since_tag: Optional[str] = None,
    until_tag: Optional[str] = None,
    speculate_next_version: Optional[bool] = None,
    enforce_v0: Optional[bool] = None,
    title: Optional[str] = None,
    version_file: Optional[str] = None,
    output: Optional[str] = None,
) -> Description:
    """Describe the release range and print it in the configured format."""
    config = _merge_options(
        ctx.ensure_config(),
        since_tag=since_tag,
        until_tag=until_tag,
        speculate_next_version=speculate_next_version,
        enforce_v0=enforce_v0,
        title=title,
        version_file=version_file,
        output=output,
    )
    try:
        summarizer = create_summarizer(repo_path, config)
        description = describe_release(
            summarizer,
            since_tag=config.since_tag,
            until_tag=config.until_tag,
            speculate_next=config.speculate_next_version,
            enforce_v0=config.enforce_v0,
        )
    except NotFoundError as error:
        _report_available_tags(repo_path)
        raise click.ClickException(str(error)) from error
    except ChronicleError as error:
        raise click.ClickException(str(error)) from error

    if config.version_file:
        version_path = Path(config.version_file)
        version_path.write_text(description.release.version, encoding="utf-8")
        log_success(f"wrote release version to {version_path}")

    rendered = render(description, cast(OutputFormat, config.output), title=config.title)
    emit_output(rendered, newline=False)
    return description


def run_next_version(
    ctx: CLIContext,
    repo_path: Path,
    *,
    since_tag: Optional[str] = None,
    enforce_v0: Optional[bool] = None,
) -> str:
    """Print the version the pending changes would produce."""
    config = _merge_options(ctx.ensure_config(), since_tag=since_tag, enforce_v0=enforce_v0)
    try:
        summarizer = create_summarizer(repo_path, config)
        since = resolve_since_release(summarizer, config.since_tag)
        changes = summarizer.changes(since.version, "")
        speculated = find_next_version(
            since.version,
            changes,
            summarizer.supported_changes(),
            enforce_v0=config.enforce_v0,
        )
    except NotFoundError as error:
        _report_available_tags(repo_path)
        raise click.ClickException(str(error)) from error
    except ChronicleError as error:
        raise click.ClickException(str(error)) from error
    if speculated is None:
        raise click.ClickException(
            f"unable to speculate the next version: no versioned changes since {since.version}"
        )
    log_info(f"next version after {format_bold(since.version)} is {format_bold(speculated)}")
    emit_output(speculated)
    return speculated


def since_tag_option() -> Callable[[F], F]:
    """Shared --since-tag option."""

    def decorator(f: F) -> F:
        return click.option(
            "--since-tag",
            "-s",
            default=None,
            help="Tag to start the changelog from (default: latest release).",
        )(f)

    return decorator


def enforce_v0_option() -> Callable[[F], F]:
    """Shared --enforce-v0 flag."""

    def decorator(f: F) -> F:
        return click.option(
            "--enforce-v0",
            is_flag=True,
            default=None,
            help="Bump the minor instead of the major version while below 1.0.0.",
        )(f)

    return decorator


_repo_path_argument = click.argument(
    "path",
    required=False,
    default=".",
    type=click.Path(path_type=Path, exists=True, file_okay=False),
)


@click.command("create")
@_repo_path_argument
@since_tag_option()
@click.option("--until-tag", "-u", default=None, help="Tag to end the changelog at.")
@click.option(
    "--speculate-next-version",
    "-n",
    is_flag=True,
    default=None,
    help="Guess the next version from the labels of pending changes.",
)
@enforce_v0_option()
@click.option("--title", "-t", default=None, help="Title of the changelog document.")
@click.option(
    "--version-file",
    default=None,
    help="Write the release version to this file.",
)
@click.option(
    "--output",
    "-o",
    type=click.Choice(OUTPUT_FORMATS),
    default=None,
    help="Output format.",
)
@click.pass_obj
def create_cmd(
    ctx: CLIContext,
    path: Path,
    since_tag: Optional[str],
    until_tag: Optional[str],
    speculate_next_version: Optional[bool],
    enforce_v0: Optional[bool],
    title: Optional[str],
    version_file: Optional[str],
    output: Optional[str],
) -> None:
    """Generate a changelog from GitHub issues and PRs."""

    run_create(
        ctx,
        path,
        since_tag=since_tag,
        until_tag=until_tag,
        speculate_next_version=speculate_next_version,
        enforce_v0=enforce_v0,
        title=title,
        version_file=version_file,
        output=output,
    )


@click.command("next-version")
@_repo_path_argument
@since_tag_option()
@enforce_v0_option()
@click.pass_obj
def next_version_cmd(
    ctx: CLIContext,
    path: Path,
    since_tag: Optional[str],
    enforce_v0: Optional[bool],
) -> None:
    """Guess the next release version from pending changes."""

    run_next_version(ctx, path, since_tag=since_tag, enforce_v0=enforce_v0)


@click.command("config")
@click.pass_obj
def config_cmd(ctx: CLIContext) -> None:
    """Print the effective configuration."""

    emit_output(format_config(ctx.ensure_config()), newline=False)


def _create_cli_group() -> click.Group:
    @click.group(
        invoke_without_command=True, context_settings={"help_option_names": ["-h", "--help"]}
    )
    @click.option(
        "--config",
        "-c",
        type=click.Path(path_type=Path, dir_okay=False),
        help="Path to an explicit application config YAML file.",
    )
    @click.option("--verbose", "-v", count=True, help="Increase verbosity (-v info, -vv debug).")
    @click.option("--quiet", "-q", is_flag=True, help="Only report errors.")
    @click.pass_context
    def _cli(
        ctx: click.Context,
        config: Optional[Path],
        verbose: int,
        quiet: bool,
    ) -> None:
        """Generate changelogs from git tags and labeled GitHub issues."""

        ctx.obj = create_cli_context(config=config, verbosity=verbose, quiet=quiet)

        if ctx.invoked_subcommand is None:
            ctx.invoke(create_cmd)

    group = click.version_option(version=_resolve_cli_version())(_cli)
    group.add_command(create_cmd)
    group.add_command(next_version_cmd)
    group.add_command(config_cmd)
    return group


cli = _create_cli_group()


def _inject_default_command(args: Sequence[str]) -> list[str]:
    """Insert the default command after the group options when none is given."""
    result = list(args)
    if any(arg in cli.commands for arg in result) or any(arg in HELP_FLAGS for arg in result):
        return result
    index = 0
    while index < len(result):
        arg = result[index]
        if arg in _GROUP_OPTIONS_WITH_VALUE:
            index += 2
        elif arg.startswith("--config=") or arg in _GROUP_FLAGS:
            index += 1
        else:
            break
    result.insert(min(index, len(result)), DEFAULT_COMMAND)
    return result


def main(argv: list[str] | None = None) -> int:
    """Entry point for console_scripts."""
    args = list(argv) if argv is not None else list(sys.argv[1:])

    if any(flag in args for flag in VERSION_FLAGS):
        click.echo(_resolve_cli_version())
        return 0

    args = _inject_default_command(args)

    try:
        cli.main(args=args, prog_name="chronicle", standalone_mode=False)
    except click.ClickException as exc:
        exc.show(file=sys.stderr)
        exit_code = getattr(exc, "exit_code", 1)
        return exit_code if isinstance(exit_code, int) else 1
    except click.exceptions.Exit as exc:
        return exc.exit_code if isinstance(exc.exit_code, int) else 0
    except KeyboardInterrupt as exc:
        try:
            abort_on_user_interrupt(exc)
        except click.exceptions.Exit as exit_exc:
            exit_code = getattr(exit_exc, "exit_code", 130)
            return exit_code if isinstance(exit_code, int) else 130
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 0
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
