"""Typed configuration loading and access.

This module provides dataclasses for the config.toml structure:

    [cauldron]
    repository = "git@github.com:org/cauldron.git"
    branch = "master"
    remote = "upstream"
    path = "cauldron"
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_table

__all__ = [
    "CauldronConfig",
    "Config",
    "ConfigError",
    "DEFAULT_BRANCH",
    "DEFAULT_REMOTE",
    "DEFAULT_WORKING_COPY",
    "load_config",
    "load_config_or_default",
]

DEFAULT_BRANCH = "master"
DEFAULT_REMOTE = "upstream"
DEFAULT_WORKING_COPY = "cauldron"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None

    def pretty(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


@dataclass(frozen=True, slots=True)
class CauldronConfig:
    """Which Cauldron repository is in use and where it is checked out."""

    repository: str | None = None
    branch: str = DEFAULT_BRANCH
    remote: str = DEFAULT_REMOTE
    path: str = DEFAULT_WORKING_COPY

    @property
    def is_active(self) -> bool:
        """True when a remote repository has been configured."""
        return self.repository is not None

    def working_copy(self, ern_home: Path) -> Path:
        """Absolute working copy path (relative paths resolve under ern home)."""
        p = Path(self.path).expanduser()
        if p.is_absolute():
            return p
        return ern_home / p


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    cauldron: CauldronConfig = field(default_factory=CauldronConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        cauldron: StrDict = get_table(data, "cauldron") or {}

        return cls(
            cauldron=CauldronConfig(
                repository=get_str(cauldron, "repository"),
                branch=get_str(cauldron, "branch") or DEFAULT_BRANCH,
                remote=get_str(cauldron, "remote") or DEFAULT_REMOTE,
                path=get_str(cauldron, "path") or DEFAULT_WORKING_COPY,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling import and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to config.toml file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Config:
    """Load config from file, or return default config if it cannot be read."""
    result = load_config(path)
    if isinstance(result, Ok):
        return result.value
    return Config()
