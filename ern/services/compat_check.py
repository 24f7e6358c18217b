# SPDX-License-Identifier: MIT
"""Compatibility of MiniApps with a native application version.

A MiniApp is compatible when every native dependency it pins is either absent
from the version's container or stored there at the same version. Absent
dependencies would be added by an update; a differing version would need the
container to change under the MiniApps it already ships.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from ern.identity.dependency import Dependency
from ern.identity.package_path import PackagePath
from ern.resolver.resolution import ModuleDependencySet

__all__ = [
    "CompatibilityReport",
    "Incompatibility",
    "check_compatibility",
]


@dataclass(frozen=True, slots=True)
class Incompatibility:
    module: PackagePath
    declared: Dependency
    stored: Dependency

    def describe(self) -> str:
        declared = self.declared
        return f"{self.module}: {declared.base} {declared.version} (stored {self.stored.version})"


@dataclass(frozen=True, slots=True)
class CompatibilityReport:
    """Per-dependency outcome of a compatibility check.

    Attributes:
        incompatible: Pinned dependencies stored at another version.
        missing: Pinned dependencies the container does not have yet.
    """

    incompatible: list[Incompatibility] = field(default_factory=list)
    missing: list[tuple[PackagePath, Dependency]] = field(default_factory=list)

    @property
    def is_compatible(self) -> bool:
        return not self.incompatible


def check_compatibility(
    modules: Sequence[ModuleDependencySet], stored: Sequence[Dependency]
) -> CompatibilityReport:
    """Compare each MiniApp's pinned dependencies with the stored ones."""
    by_identity = {dep.identity: dep for dep in stored}
    report = CompatibilityReport()
    for module in modules:
        for dep in module.dependencies:
            if dep.version is None:
                continue
            current = by_identity.get(dep.identity)
            if current is None:
                report.missing.append((module.module_identity, dep))
            elif current.version != dep.version:
                report.incompatible.append(
                    Incompatibility(module=module.module_identity, declared=dep, stored=current)
                )
    return report
