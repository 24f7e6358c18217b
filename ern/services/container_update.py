# SPDX-License-Identifier: MIT
"""Update the MiniApps of a native application version.

The update is planned from the current Cauldron state:
- every updated MiniApp must already be in the container, at another version
- the updated MiniApps are resolved together with the MiniApps the container
  keeps, so a kept MiniApp's native dependencies still count
- conflicts are advisory with force, fatal otherwise
- the resolved set is merged with the persisted native dependencies, never
  lowering a version
- the container version is the explicit one (must be newer) or a patch bump

and then committed as one transaction. The merge runs again inside the
transaction against the freshly synced document, so a concurrent dependency
bump is not lost.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from ern.cauldron.errors import DocumentError, TransactionError
from ern.cauldron.model import CauldronDocument
from ern.cauldron.transaction import TransactionEngine, TransactionRequest
from ern.core.result import Err, Ok, Result
from ern.core.structured import as_obj_list, as_str_dict, get_list, get_str
from ern.identity.dependency import Dependency, parse_dependency
from ern.identity.descriptor import NativeApplicationDescriptor
from ern.identity.package_path import PackagePath, parse_package_path
from ern.output.console import ConsoleProtocol, Style
from ern.resolver.resolution import (
    ConflictError,
    ModuleDependencySet,
    Resolution,
    check_conflicts,
    resolve_across_modules,
    retain_highest_versions,
)
from ern.resolver.semver import bump_version, compare_versions, parse_version

__all__ = [
    "ContainerUpdate",
    "ModulesFile",
    "ModulesFileError",
    "UpdateError",
    "load_modules_file",
    "update_container_miniapps",
]

type UpdateError = TransactionError | DocumentError | ConflictError


@dataclass(frozen=True, slots=True)
class ContainerUpdate:
    """Outcome of a committed MiniApps update."""

    resolution: Resolution
    dependencies: list[Dependency]
    container_version: str
    document: CauldronDocument


def _pinned(deps: Sequence[Dependency], console: ConsoleProtocol) -> list[Dependency]:
    out: list[Dependency] = []
    for dep in deps:
        if dep.version is None:
            console.warning(f"{dep} is not pinned by any MiniApp, not stored")
            continue
        out.append(dep)
    return out


def _kept_module_sets(
    current: Sequence[PackagePath],
    updated: Sequence[ModuleDependencySet],
    known: Sequence[ModuleDependencySet],
    console: ConsoleProtocol,
) -> list[ModuleDependencySet]:
    """Dependency sets of the MiniApps the container keeps as they are."""
    kept: list[ModuleDependencySet] = []
    for miniapp in current:
        if any(m.module_identity.same_identity(miniapp) for m in updated):
            continue
        described = next((k for k in known if k.module_identity.same_identity(miniapp)), None)
        if described is None:
            console.print(f"no dependency data for {miniapp}, kept as is", Style.DIM)
            continue
        kept.append(described)
    return kept


def _check_updatable(
    descriptor: NativeApplicationDescriptor,
    current: Sequence[PackagePath],
    updated: Sequence[ModuleDependencySet],
) -> Result[None, DocumentError]:
    for module in updated:
        path = module.module_identity
        shipped = next((m for m in current if m.same_identity(path)), None)
        if shipped is None:
            return Err(
                DocumentError(
                    kind="not_found",
                    message=f"{path.base_path} is not in the container of {descriptor}",
                    hint="Only MiniApps already in the container can be updated",
                )
            )
        if shipped.version == path.version:
            return Err(
                DocumentError(
                    kind="invalid",
                    message=f"{shipped} is already in the container of {descriptor}",
                )
            )
    return Ok(None)


def _next_container_version(
    current: str, requested: str | None
) -> Result[str, DocumentError]:
    if requested is None:
        bumped = bump_version(current)
        if bumped is None:
            return Err(
                DocumentError(
                    kind="invalid",
                    message=f"current container version {current!r} cannot be bumped",
                    hint="Pass an explicit container version",
                )
            )
        return Ok(bumped)

    if parse_version(requested) is None:
        return Err(DocumentError(kind="invalid", message=f"invalid container version: {requested}"))
    if compare_versions(requested, current) <= 0:
        return Err(
            DocumentError(
                kind="invalid",
                message=f"container version {requested} is not newer than {current}",
            )
        )
    return Ok(requested)


def _commit_message(
    descriptor: NativeApplicationDescriptor,
    modules: Sequence[ModuleDependencySet],
    container_version: str,
) -> list[str]:
    return [
        f"Update MiniApps of {descriptor} (container {container_version})",
        "",
        *(f"- {m.module_identity}" for m in modules),
    ]


def update_container_miniapps(
    engine: TransactionEngine,
    descriptor: NativeApplicationDescriptor,
    modules: Sequence[ModuleDependencySet],
    *,
    known: Sequence[ModuleDependencySet] = (),
    force: bool = False,
    container_version: str | None = None,
    console: ConsoleProtocol,
) -> Result[ContainerUpdate, UpdateError]:
    """Update MiniApps of a version's container and sync its native dependencies.

    Args:
        engine: Transaction engine of the target Cauldron.
        descriptor: Complete, unreleased native application version.
        modules: MiniApps to update, with their native dependencies.
        known: Dependency sets of MiniApps already in the container.
        force: Keep the highest version of conflicting dependencies instead of failing.
        container_version: Explicit new container version.
        console: Where conflicts and progress are reported.
    """
    read = engine.read()
    if isinstance(read, Err):
        return read
    doc = read.value

    version = doc.require_version(descriptor)
    if isinstance(version, Err):
        return version
    current = version.value
    if current.released:
        return Err(
            DocumentError(
                kind="released",
                message=f"{descriptor} is released and can no longer be modified",
                hint="Create a new native application version instead",
            )
        )

    updatable = _check_updatable(descriptor, current.miniapps, modules)
    if isinstance(updatable, Err):
        return updatable

    kept = _kept_module_sets(current.miniapps, modules, known, console)
    resolution = resolve_across_modules([*modules, *kept])
    for conflict in resolution.conflicts:
        console.warning(f"version conflict: {conflict.describe()}")
    checked = check_conflicts(resolution, force=force)
    if isinstance(checked, Err):
        return checked

    next_version = _next_container_version(current.container_version, container_version)
    if isinstance(next_version, Err):
        return next_version

    resolved = resolution.resolved
    final: list[Dependency] = []

    def mutate(fresh: CauldronDocument) -> Result[None, DocumentError]:
        existing = fresh.native_dependencies(descriptor)
        if isinstance(existing, Err):
            return existing
        final[:] = _pinned(retain_highest_versions(resolved, existing.value), console)
        synced = fresh.sync_miniapps(descriptor, [m.module_identity for m in modules])
        if isinstance(synced, Err):
            return synced
        return fresh.sync_native_dependencies(descriptor, final)

    committed = engine.run(
        TransactionRequest(
            mutate=mutate,
            commit_message=_commit_message(descriptor, modules, next_version.value),
            descriptor=descriptor,
            container_version=next_version.value,
        )
    )
    if isinstance(committed, Err):
        return committed

    console.success(f"{descriptor} container updated to {next_version.value}")
    return Ok(
        ContainerUpdate(
            resolution=resolution,
            dependencies=list(final),
            container_version=next_version.value,
            document=committed.value,
        )
    )


# -----------------------------------------------------------------------------
# Modules file
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ModulesFileError:
    message: str
    path: Path

    def pretty(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass(frozen=True, slots=True)
class ModulesFile:
    """MiniApps to update, plus what is known of the MiniApps already shipped.

    Attributes:
        modules: MiniApps to add or update.
        container: Dependency sets of MiniApps already in the container.
    """

    modules: list[ModuleDependencySet]
    container: list[ModuleDependencySet]


def _parse_module_sets(
    items: list[object], path: Path, section: str
) -> Result[list[ModuleDependencySet], ModulesFileError]:
    out: list[ModuleDependencySet] = []
    for i, item in enumerate(items):
        where = f"{section}[{i}]"
        entry = as_str_dict(item)
        module = get_str(entry, "module") if entry is not None else None
        if entry is None or module is None:
            return Err(ModulesFileError(f"{where}: expected an object with a 'module' string", path))

        parsed_path = parse_package_path(module)
        if isinstance(parsed_path, Err):
            return Err(ModulesFileError(f"{where}: {parsed_path.error.pretty()}", path))

        deps: list[Dependency] = []
        for raw in get_list(entry, "dependencies") or []:
            if not isinstance(raw, str):
                return Err(ModulesFileError(f"{where}: dependencies must be strings", path))
            parsed_dep = parse_dependency(raw)
            if isinstance(parsed_dep, Err):
                return Err(ModulesFileError(f"{where}: {parsed_dep.error.pretty()}", path))
            deps.append(parsed_dep.value)

        out.append(ModuleDependencySet(module_identity=parsed_path.value, dependencies=tuple(deps)))
    return Ok(out)


def load_modules_file(path: Path) -> Result[ModulesFile, ModulesFileError]:
    """Read a modules file.

    Either a list of `{"module": "<package path>", "dependencies": ["<dep>", ...]}`
    objects (the MiniApps to update), or an object with a `modules` list and an
    optional `container` list describing the MiniApps already shipped.
    """
    try:
        raw: object = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ModulesFileError("file not found", path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ModulesFileError(f"cannot read file: {e}", path))
    except json.JSONDecodeError as e:
        return Err(ModulesFileError(f"invalid JSON: {e}", path))

    modules_raw = as_obj_list(raw)
    container_raw: list[object] = []
    if modules_raw is None:
        table = as_str_dict(raw)
        if table is None:
            return Err(ModulesFileError("expected a list or an object", path))
        modules_raw = get_list(table, "modules")
        if modules_raw is None:
            return Err(ModulesFileError("missing 'modules' list", path))
        container_raw = get_list(table, "container") or []

    modules = _parse_module_sets(modules_raw, path, "modules")
    if isinstance(modules, Err):
        return modules
    container = _parse_module_sets(container_raw, path, "container")
    if isinstance(container, Err):
        return container
    return Ok(ModulesFile(modules=modules.value, container=container.value))
