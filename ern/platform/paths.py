"""User-level path utilities.

The ern home directory holds the global config.toml and the local Cauldron
working copy. Store-specific paths are derived from the config in
core/config.py.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

__all__ = [
    "ern_home",
    "home",
    "user_config_path",
]

APP_DIR_NAME = ".ern"


@lru_cache(maxsize=1)
def home() -> Path:
    """Get user's home directory, honoring HOME for CI/container scenarios."""
    home_env = os.environ.get("HOME") or os.environ.get("USERPROFILE")
    if home_env:
        return Path(home_env)
    return Path.home()


@lru_cache(maxsize=1)
def ern_home() -> Path:
    """Root directory for ern state.

    Location: $ERN_HOME if set, else ~/.ern
    """
    override = os.environ.get("ERN_HOME")
    if override:
        return Path(override).expanduser()
    return home() / APP_DIR_NAME


def user_config_path() -> Path:
    return ern_home() / "config.toml"


def clear_caches() -> None:
    """Clear cached paths (tests change HOME / ERN_HOME)."""
    home.cache_clear()
    ern_home.cache_clear()
