"""Platform abstraction layer."""

from .files import atomic_write_text, remove_tree
from .paths import (
    ern_home,
    home,
    user_config_path,
)
from .process import (
    ProcessError,
    run,
)

__all__ = [
    # files
    "atomic_write_text",
    "remove_tree",
    # paths
    "ern_home",
    "home",
    "user_config_path",
    # process
    "ProcessError",
    "run",
]
