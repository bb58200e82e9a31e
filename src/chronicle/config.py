"""Application configuration: discovery, parsing, and validation."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, MutableMapping, Optional

import yaml

from .change import DEFAULT_CHANGE_TYPES, ChangeType, SemVerKind
from .errors import ConfigurationError
from .presenter import DEFAULT_TITLE, OUTPUT_FORMATS
from .utils import LOG_LEVELS

APPLICATION_NAME = "chronicle"
ENV_PREFIX = "CHRONICLE_"
TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass
class LogConfig:
    """Logging options."""

    level: str = "warning"
    structured: bool = False
    file: Optional[str] = None

    def validate(self) -> None:
        if self.level.strip().lower() not in LOG_LEVELS:
            allowed = ", ".join(sorted(LOG_LEVELS))
            raise ConfigurationError(
                f"bad log level configured ({self.level!r}). Allowed levels: {allowed}"
            )


@dataclass
class GithubConfig:
    """Options for the GitHub summarizer."""

    remote: str = "origin"
    labels: dict[str, list[str]] = field(default_factory=dict)
    changes: list[ChangeType] = field(default_factory=lambda: list(DEFAULT_CHANGE_TYPES))

    def validate(self) -> None:
        if not self.remote.strip():
            raise ConfigurationError("Config option 'github.remote' must not be empty.")
        names = [change.name for change in self.changes]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ConfigurationError(
                f"Config option 'github.changes' defines duplicate types: {', '.join(duplicates)}"
            )


@dataclass
class Config:
    """Structured representation of the application config."""

    config_path: Optional[Path] = None
    output: str = "md"
    quiet: bool = False
    speculate_next_version: bool = False
    version_file: Optional[str] = None
    since_tag: str = ""
    until_tag: str = ""
    enforce_v0: bool = False
    title: str = DEFAULT_TITLE
    log: LogConfig = field(default_factory=LogConfig)
    github: GithubConfig = field(default_factory=GithubConfig)

    def validate(self) -> None:
        if self.speculate_next_version and self.until_tag:
            raise ConfigurationError(
                "cannot specify both --speculate-next-version and --until-tag"
            )
        if self.output not in OUTPUT_FORMATS:
            allowed = ", ".join(OUTPUT_FORMATS)
            raise ConfigurationError(f"Config option 'output' must be one of: {allowed}")
        for _, section in self.sections():
            section.validate()

    def sections(self) -> list[tuple[str, Any]]:
        return [(name, getattr(self, name)) for name in SECTION_NAMES]


def _require_bool(value: object, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
    raise ConfigurationError(f"Config option '{key}' must be a boolean.")


def _optional_str(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_log(raw: object) -> LogConfig:
    if raw is None:
        return LogConfig()
    if not isinstance(raw, Mapping):
        raise ConfigurationError("Config option 'log' must be a mapping.")
    config = LogConfig()
    if raw.get("level") is not None:
        config.level = str(raw["level"]).strip().lower()
    if raw.get("structured") is not None:
        config.structured = _require_bool(raw["structured"], "log.structured")
    config.file = _optional_str(raw.get("file"))
    return config


def _parse_label_overrides(raw: object) -> dict[str, list[str]]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ConfigurationError("Config option 'github.labels' must be a mapping.")
    overrides: dict[str, list[str]] = {}
    for label, value in raw.items():
        name = str(label).strip()
        if not name:
            continue
        if value is None:
            overrides[name] = []
        elif isinstance(value, str):
            overrides[name] = [value.strip()] if value.strip() else []
        elif isinstance(value, list):
            overrides[name] = [str(item).strip() for item in value if str(item).strip()]
        else:
            raise ConfigurationError(
                f"Config option 'github.labels.{name}' must be a string or a list of strings."
            )
    return overrides


def _parse_change_types(raw: object) -> list[ChangeType]:
    if raw is None:
        return list(DEFAULT_CHANGE_TYPES)
    if not isinstance(raw, list):
        raise ConfigurationError("Config option 'github.changes' must be a list.")
    change_types: list[ChangeType] = []
    for item in raw:
        if not isinstance(item, Mapping):
            raise ConfigurationError("Entries of 'github.changes' must be mappings.")
        name = str(item.get("name", item.get("type", "")) or "").strip()
        if not name:
            raise ConfigurationError("Entries of 'github.changes' require a 'name'.")
        title = str(item.get("title") or name.replace("-", " ").title())
        try:
            kind = SemVerKind.parse(str(item.get("semver-field") or "unknown"))
        except ValueError as exc:
            raise ConfigurationError(f"github.changes '{name}': {exc}") from exc
        change_types.append(ChangeType(name=name, title=title, kind=kind))
    return change_types


def _parse_github(raw: object) -> GithubConfig:
    if raw is None:
        return GithubConfig()
    if not isinstance(raw, Mapping):
        raise ConfigurationError("Config option 'github' must be a mapping.")
    config = GithubConfig()
    if raw.get("remote") is not None:
        config.remote = str(raw["remote"]).strip()
    config.labels = _parse_label_overrides(raw.get("labels"))
    config.changes = _parse_change_types(raw.get("changes"))
    return config


SECTION_PARSERS: tuple[tuple[str, Callable[[object], Any]], ...] = (
    ("log", _parse_log),
    ("github", _parse_github),
)
SECTION_NAMES = tuple(name for name, _ in SECTION_PARSERS)


def config_from_mapping(raw: Mapping[str, Any], *, path: Optional[Path] = None) -> Config:
    """Build a Config from a parsed YAML mapping."""
    config = Config(config_path=path)

    output_raw = raw.get("output")
    if output_raw is not None:
        config.output = str(output_raw).strip().lower()
    for key, attribute in (
        ("quiet", "quiet"),
        ("speculate-next-version", "speculate_next_version"),
        ("enforce-v0", "enforce_v0"),
    ):
        if raw.get(key) is not None:
            setattr(config, attribute, _require_bool(raw[key], key))
    config.version_file = _optional_str(raw.get("version-file"))
    config.since_tag = _optional_str(raw.get("since-tag")) or ""
    config.until_tag = _optional_str(raw.get("until-tag")) or ""
    if raw.get("title") is not None:
        config.title = str(raw["title"])

    for name, parse in SECTION_PARSERS:
        setattr(config, name, parse(raw.get(name)))
    return config


def load_config(path: Path) -> Config:
    """Load the configuration from disk."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except OSError as exc:
        raise ConfigurationError(f"unable to read application config={str(path)!r}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"unable to parse config={str(path)!r}: {exc}") from exc
    if not isinstance(raw, MutableMapping):
        raise ConfigurationError("Config root must be a mapping")
    return config_from_mapping(raw, path=path)


def candidate_config_paths(
    cwd: Path, *, env: Optional[Mapping[str, str]] = None, home: Optional[Path] = None
) -> list[Path]:
    """Return config locations in search order."""
    env_mapping = env if env is not None else os.environ
    home_dir = home if home is not None else Path.home()
    candidates = [
        cwd / f".{APPLICATION_NAME}.yaml",
        cwd / f".{APPLICATION_NAME}" / "config.yaml",
        home_dir / f".{APPLICATION_NAME}.yaml",
    ]
    config_home = env_mapping.get("XDG_CONFIG_HOME") or str(home_dir / ".config")
    candidates.append(Path(config_home) / APPLICATION_NAME / "config.yaml")
    config_dirs = env_mapping.get("XDG_CONFIG_DIRS") or "/etc/xdg"
    for directory in config_dirs.split(os.pathsep):
        if directory:
            candidates.append(Path(directory) / APPLICATION_NAME / "config.yaml")
    return candidates


def discover_config_path(
    cwd: Path, *, env: Optional[Mapping[str, str]] = None, home: Optional[Path] = None
) -> Optional[Path]:
    for candidate in candidate_config_paths(cwd, env=env, home=home):
        if candidate.is_file():
            return candidate
    return None


def apply_environment(config: Config, env: Mapping[str, str]) -> Config:
    """Override config values from CHRONICLE_* environment variables."""
    scalars: dict[str, str] = {
        "OUTPUT": "output",
        "VERSION_FILE": "version_file",
        "SINCE_TAG": "since_tag",
        "UNTIL_TAG": "until_tag",
        "TITLE": "title",
    }
    for suffix, attribute in scalars.items():
        value = env.get(f"{ENV_PREFIX}{suffix}")
        if value is not None:
            setattr(config, attribute, value.strip().lower() if attribute == "output" else value)
    flags: dict[str, str] = {
        "QUIET": "quiet",
        "SPECULATE_NEXT_VERSION": "speculate_next_version",
        "ENFORCE_V0": "enforce_v0",
    }
    for suffix, attribute in flags.items():
        value = env.get(f"{ENV_PREFIX}{suffix}")
        if value is not None:
            setattr(config, attribute, _require_bool(value, f"{ENV_PREFIX}{suffix}"))
    level = env.get(f"{ENV_PREFIX}LOG_LEVEL")
    if level is not None:
        config.log.level = level.strip().lower()
    log_file = env.get(f"{ENV_PREFIX}LOG_FILE")
    if log_file is not None:
        config.log.file = _optional_str(log_file)
    structured = env.get(f"{ENV_PREFIX}LOG_STRUCTURED")
    if structured is not None:
        config.log.structured = _require_bool(structured, f"{ENV_PREFIX}LOG_STRUCTURED")
    return config


def load_application_config(
    config_path: Optional[Path] = None,
    *,
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Config:
    """Load config from an explicit path or the first discovered location.

    A missing config is fine; defaults apply. Environment overrides are
    applied on top; validation runs after CLI flags are merged by the caller.
    """
    env_mapping = env if env is not None else os.environ
    if config_path is not None:
        config = load_config(config_path)
    else:
        discovered = discover_config_path(cwd or Path.cwd(), env=env_mapping, home=home)
        config = load_config(discovered) if discovered is not None else Config()
    return apply_environment(config, env_mapping)


def dump_config(config: Config) -> dict[str, Any]:
    """Convert a Config into a plain dictionary suitable for YAML output."""
    data: dict[str, Any] = {
        "output": config.output,
        "quiet": config.quiet,
        "speculate-next-version": config.speculate_next_version,
        "enforce-v0": config.enforce_v0,
        "title": config.title,
    }
    if config.version_file:
        data["version-file"] = config.version_file
    if config.since_tag:
        data["since-tag"] = config.since_tag
    if config.until_tag:
        data["until-tag"] = config.until_tag
    log: dict[str, Any] = {"level": config.log.level, "structured": config.log.structured}
    if config.log.file:
        log["file"] = config.log.file
    data["log"] = log
    github: dict[str, Any] = {"remote": config.github.remote}
    if config.github.labels:
        github["labels"] = dict(config.github.labels)
    github["changes"] = [
        {"name": change.name, "title": change.title, "semver-field": change.kind.value}
        for change in config.github.changes
    ]
    data["github"] = github
    return data


def format_config(config: Config) -> str:
    return yaml.safe_dump(dump_config(config), sort_keys=False)
