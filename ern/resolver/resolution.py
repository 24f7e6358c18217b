"""Native dependency version resolution across MiniApps.

Given the native dependencies each MiniApp declares, compute one version per
dependency for the container, report the dependencies the MiniApps disagree
on, and merge the result with what the container already ships.

Whether a conflict is fatal is the caller's decision (check_conflicts with
force=False/True); the functions here only report.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from ern.core.result import Err, Ok, Result
from ern.identity.dependency import Dependency, DependencyIdentity
from ern.identity.package_path import PackagePath
from ern.resolver.semver import compare_versions, version_key

__all__ = [
    "Conflict",
    "ConflictError",
    "ModuleDependencySet",
    "Resolution",
    "check_conflicts",
    "resolve_across_modules",
    "retain_highest_versions",
]


@dataclass(frozen=True, slots=True)
class ModuleDependencySet:
    """The native dependencies one MiniApp declares."""

    module_identity: PackagePath
    dependencies: tuple[Dependency, ...] = ()


@dataclass(frozen=True, slots=True)
class Conflict:
    """Several MiniApps pin the same dependency to different versions.

    Attributes:
        identity: The dependency without version.
        versions: Distinct declared versions, lowest first.
        modules: MiniApps declaring each version (same order as versions).
    """

    identity: Dependency
    versions: tuple[str, ...]
    modules: tuple[tuple[PackagePath, ...], ...] = ()

    def describe(self) -> str:
        if not self.modules:
            return f"{self.identity}: {', '.join(self.versions)}"
        parts = [
            f"{version} ({', '.join(str(m) for m in modules)})"
            for version, modules in zip(self.versions, self.modules, strict=True)
        ]
        return f"{self.identity}: {'; '.join(parts)}"


def _no_conflicts() -> list[Conflict]:
    return []


@dataclass(frozen=True, slots=True)
class Resolution:
    resolved: list[Dependency]
    conflicts: list[Conflict] = field(default_factory=_no_conflicts)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


@dataclass(frozen=True, slots=True)
class ConflictError:
    """Dependency version conflicts under the fatal policy."""

    conflicts: tuple[Conflict, ...]

    @property
    def message(self) -> str:
        count = len(self.conflicts)
        noun = "conflict" if count == 1 else "conflicts"
        return f"{count} native dependency version {noun}"

    @property
    def hint(self) -> str:
        return "Align the MiniApps on one version, or force to keep the highest version."

    def pretty(self) -> str:
        lines = [self.message, *(f"  {c.describe()}" for c in self.conflicts)]
        return "\n".join(lines)


def resolve_across_modules(modules: Iterable[ModuleDependencySet]) -> Resolution:
    """Resolve one version per dependency identity across MiniApps.

    Dependencies are grouped by (name, scope). Unversioned declarations never
    conflict. A group with several distinct versions yields a Conflict and
    resolves to the highest of them, so a merge step always has a value.
    Output keeps the order in which identities were first declared.
    """
    order: list[DependencyIdentity] = []
    bases: dict[DependencyIdentity, Dependency] = {}
    declared: dict[DependencyIdentity, dict[str, list[PackagePath]]] = {}

    for module in modules:
        for dep in module.dependencies:
            ident = dep.identity
            if ident not in bases:
                order.append(ident)
                bases[ident] = dep.without_version()
                declared[ident] = {}
            if dep.version is None:
                continue
            by_module = declared[ident].setdefault(dep.version, [])
            if module.module_identity not in by_module:
                by_module.append(module.module_identity)

    resolved: list[Dependency] = []
    conflicts: list[Conflict] = []
    for ident in order:
        base = bases[ident]
        versions = declared[ident]
        if not versions:
            resolved.append(base)
            continue
        if len(versions) == 1:
            resolved.append(base.with_version(next(iter(versions))))
            continue

        ordered = sorted(versions, key=version_key)
        conflicts.append(
            Conflict(
                identity=base,
                versions=tuple(ordered),
                modules=tuple(tuple(versions[v]) for v in ordered),
            )
        )
        resolved.append(base.with_version(ordered[-1]))

    return Resolution(resolved=resolved, conflicts=conflicts)


def _pick(current: Dependency, candidate: Dependency) -> Dependency:
    if candidate.version is None:
        return current
    if current.version is None:
        return candidate
    if compare_versions(candidate.version, current.version) > 0:
        return candidate
    return current


def retain_highest_versions(
    resolved: Sequence[Dependency],
    existing: Sequence[Dependency],
) -> list[Dependency]:
    """Merge two dependency sets keeping the highest version of each identity.

    Identities found in only one list pass through. No identity is ever
    dropped and no version lower than an input's is ever selected, so the
    merge is monotonic and idempotent. Identities of `resolved` come first,
    then those only in `existing`.
    """
    merged: dict[DependencyIdentity, Dependency] = {}
    for dep in [*resolved, *existing]:
        current = merged.get(dep.identity)
        merged[dep.identity] = dep if current is None else _pick(current, dep)
    return list(merged.values())


def check_conflicts(resolution: Resolution, *, force: bool) -> Result[Resolution, ConflictError]:
    """Apply the caller's conflict policy.

    With force the resolution passes through and conflicts stay advisory.
    """
    if resolution.has_conflicts and not force:
        return Err(ConflictError(conflicts=tuple(resolution.conflicts)))
    return Ok(resolution)
