"""Application configuration loaded from a TOML file over built-in defaults."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any


class ConfigError(Exception):
    """Raised when the configuration file cannot be read or parsed."""


@dataclass
class DefaultsConfig:
    permission_mode: str = "default"


@dataclass
class DiscoveryConfig:
    # Filenames that mark project directories inside repositories; empty
    # means the repository root only.
    project_markers: list[str] = field(default_factory=list)
    # Directory names skipped while searching.
    excludes: list[str] = field(
        default_factory=lambda: ["Library", ".cache", "node_modules", ".git"]
    )


@dataclass
class ProjectConfig:
    workspace_symlinks: list[str] = field(default_factory=list)
    # Extra directories passed as --add-dir; relative ones are resolved
    # against the repository root.
    add_dirs: list[str] = field(default_factory=list)


@dataclass
class ThemeConfig:
    primary: str = "#7C3AED"
    secondary: str = "#06B6D4"
    success: str = "#10B981"
    warning: str = "#F59E0B"
    danger: str = "#EF4444"
    bg_selected: str = "#313244"
    border: str = "#45475A"
    border_focus: str = "#7C3AED"
    text: str = "#CDD6F4"
    text_dim: str = "#6C7086"
    status_idle: str = "#808898"
    status_attention: str = "#C08552"
    status_done: str = "#333346"
    diff_add: str = "#A6E3A1"
    diff_del: str = "#F38BA8"


@dataclass
class CommandsConfig:
    claude: str = "claude"
    jj: str = "jj"


@dataclass
class SessionConfig:
    max_sessions: int = 30
    max_log_lines: int = 1000
    max_scrollback: int = 2000
    max_jsonl_entries: int = 500
    discovery_days: int = 14
    refresh_interval: str = "5s"


@dataclass
class PricingConfig:
    """Token prices in USD per million tokens."""

    input_per_mtok: float = 15.0
    output_per_mtok: float = 75.0
    cache_write_per_mtok: float = 18.75
    cache_read_per_mtok: float = 1.50


@dataclass
class GhosttyConfig:
    command: str = "ghostty"


@dataclass
class KeybindConfig:
    new_session: str = "n"
    approve: str = "a"
    deny: str = "d"
    reply: str = "r"
    prompt: str = "p"
    open_term: str = "t"
    fork: str = "f"
    kill: str = "x"
    quit: str = "q"
    help: str = "?"


def default_config_dir() -> str:
    """Return the default configuration directory."""
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg:
        return os.path.join(xdg, "claude-deck")
    return os.path.join(str(Path.home()), ".config", "claude-deck")


def default_data_dir() -> str:
    """Return the default data directory."""
    xdg = os.environ.get("XDG_DATA_HOME", "")
    if xdg:
        return os.path.join(xdg, "claude-deck")
    return os.path.join(str(Path.home()), ".local", "share", "claude-deck")


@dataclass
class Config:
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    ghostty: GhosttyConfig = field(default_factory=GhosttyConfig)
    keybinds: KeybindConfig = field(default_factory=KeybindConfig)
    theme: ThemeConfig = field(default_factory=ThemeConfig)
    commands: CommandsConfig = field(default_factory=CommandsConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    pricing: PricingConfig = field(default_factory=PricingConfig)
    projects: dict[str, ProjectConfig] = field(default_factory=dict)
    data_dir: str = field(default_factory=default_data_dir)

    def workspace_symlinks(self, repo_path: str) -> list[str]:
        """Return extra symlink paths configured for a repository."""
        project = self.projects.get(repo_path)
        if project is None:
            return []
        return list(project.workspace_symlinks)

    def resolved_add_dirs(self, repo_path: str) -> list[str]:
        """Return --add-dir paths for a repository, relative ones resolved."""
        project = self.projects.get(repo_path)
        if project is None:
            return []
        return [
            d if os.path.isabs(d) else os.path.normpath(os.path.join(repo_path, d))
            for d in project.add_dirs
        ]

    def ensure_data_dir(self) -> None:
        """Create the data directory if it does not exist."""
        os.makedirs(self.data_dir, mode=0o755, exist_ok=True)


def default_config() -> Config:
    """Return the built-in default configuration."""
    return Config()


def _coerce(current: Any, value: Any, key: str) -> Any:
    if isinstance(current, str):
        if isinstance(value, str):
            return value
    elif isinstance(current, bool):
        if isinstance(value, bool):
            return value
    elif isinstance(current, int):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    elif isinstance(current, float):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif isinstance(current, list):
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return list(value)
    raise ConfigError(f"parsing config: invalid value for {key!r}: {value!r}")


def _merge(target: Any, table: Any, where: str) -> None:
    if not isinstance(table, dict):
        raise ConfigError(f"parsing config: {where!r} must be a table")
    for f in fields(target):
        if f.name not in table:
            continue
        key = f"{where}.{f.name}" if where else f.name
        value = table[f.name]
        current = getattr(target, f.name)
        if f.name == "projects" and isinstance(target, Config):
            target.projects = _parse_projects(value)
        elif is_dataclass(current):
            _merge(current, value, key)
        else:
            setattr(target, f.name, _coerce(current, value, key))


def _parse_projects(value: Any) -> dict[str, ProjectConfig]:
    if not isinstance(value, dict):
        raise ConfigError("parsing config: 'projects' must be a table")
    projects: dict[str, ProjectConfig] = {}
    for repo_path, table in value.items():
        project = ProjectConfig()
        _merge(project, table, f"projects.{repo_path}")
        projects[repo_path] = project
    return projects


def load_from(path: str | os.PathLike[str]) -> Config:
    """Read configuration from ``path``; a missing file yields the defaults."""
    cfg = default_config()
    try:
        data = Path(path).read_bytes()
    except FileNotFoundError:
        return cfg
    except OSError as exc:
        raise ConfigError(f"reading config: {exc}") from exc

    try:
        document = tomllib.loads(data.decode("utf-8"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise ConfigError(f"parsing config: {exc}") from exc

    _merge(cfg, document, "")

    if not cfg.data_dir:
        cfg.data_dir = default_data_dir()
    return cfg


def load() -> Config:
    """Read configuration from the default config file."""
    return load_from(os.path.join(default_config_dir(), "config.toml"))