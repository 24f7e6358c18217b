"""Native dependency version resolver.

Usage:
    from ern.resolver import resolve_across_modules, retain_highest_versions

    resolution = resolve_across_modules(module_sets)
    for conflict in resolution.conflicts:
        print(conflict.describe())
    final = retain_highest_versions(resolution.resolved, persisted_dependencies)
"""

from ern.resolver.resolution import (
    Conflict,
    ConflictError,
    ModuleDependencySet,
    Resolution,
    check_conflicts,
    resolve_across_modules,
    retain_highest_versions,
)
from ern.resolver.semver import SemVer, bump_version, compare_versions, parse_version

__all__ = [
    # resolution
    "Conflict",
    "ConflictError",
    "ModuleDependencySet",
    "Resolution",
    "check_conflicts",
    "resolve_across_modules",
    "retain_highest_versions",
    # semver
    "SemVer",
    "bump_version",
    "compare_versions",
    "parse_version",
]
