# SPDX-License-Identifier: MIT
"""Application services for the ern CLI.

Services coordinate the resolver (resolver/) and the Cauldron store
(cauldron/); the CLI only parses arguments and renders results.
"""

from ern.services.compat_check import (
    CompatibilityReport,
    Incompatibility,
    check_compatibility,
)
from ern.services.container_update import (
    ContainerUpdate,
    ModulesFile,
    ModulesFileError,
    UpdateError,
    load_modules_file,
    update_container_miniapps,
)

__all__ = [
    "CompatibilityReport",
    "ContainerUpdate",
    "Incompatibility",
    "ModulesFile",
    "ModulesFileError",
    "UpdateError",
    "check_compatibility",
    "load_modules_file",
    "update_container_miniapps",
]
