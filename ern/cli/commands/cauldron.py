from __future__ import annotations

from pathlib import Path

import typer

from ern.cauldron.model import DEFAULT_CONTAINER_VERSION
from ern.cli.commands._helpers import (
    dependency_args,
    descriptor_arg,
    exit_on_error,
    exit_with_code,
)
from ern.cli.context import build_context
from ern.core.errors import ErrorCode
from ern.output.console import Style
from ern.services.container_update import load_modules_file, update_container_miniapps

cauldron_app = typer.Typer(add_completion=False, no_args_is_help=True)
get_app = typer.Typer(add_completion=False, no_args_is_help=True)
add_app = typer.Typer(add_completion=False, no_args_is_help=True)
update_app = typer.Typer(add_completion=False, no_args_is_help=True)
repo_app = typer.Typer(add_completion=False, no_args_is_help=True)

cauldron_app.add_typer(get_app, name="get", help="Query the Cauldron.")
cauldron_app.add_typer(add_app, name="add", help="Add versions and dependencies.")
cauldron_app.add_typer(update_app, name="update", help="Update a native application version.")
cauldron_app.add_typer(repo_app, name="repo", help="Manage the local working copy.")


# -----------------------------------------------------------------------------
# get
# -----------------------------------------------------------------------------


@get_app.command("dependencies")
def get_dependencies(
    descriptor: str = typer.Argument(..., help="Native application version (name:platform:version)"),
) -> None:
    """List the native dependencies of a native application version."""
    ctx = build_context()
    target = descriptor_arg(descriptor, ctx.console)
    deps = exit_on_error(ctx.cauldron.get_native_dependencies(target), ctx.console)
    for dep in deps:
        ctx.console.print(str(dep))


@get_app.command("miniapps")
def get_miniapps(
    descriptor: str = typer.Argument(..., help="Native application version (name:platform:version)"),
) -> None:
    """List the MiniApps in the container of a native application version."""
    ctx = build_context()
    target = descriptor_arg(descriptor, ctx.console)
    miniapps = exit_on_error(ctx.cauldron.get_container_miniapps(target), ctx.console)
    for miniapp in miniapps:
        ctx.console.print(str(miniapp))


@get_app.command("nativeapp")
def get_nativeapp(
    descriptor: str | None = typer.Argument(None, help="Full or partial descriptor"),
    non_released: bool = typer.Option(False, "--non-released", help="Only unreleased versions"),
) -> None:
    """Show a native application version, or list versions under a partial descriptor."""
    ctx = build_context()
    console = ctx.console
    within = descriptor_arg(descriptor, console, complete=False) if descriptor else None

    doc = exit_on_error(ctx.cauldron.document(), console)
    if within is not None and within.is_complete:
        version = exit_on_error(doc.require_version(within), console)
        console.header(str(within))
        console.print(f"container version: {version.container_version}")
        console.print(f"released: {'yes' if version.released else 'no'}")
        if version.binary_store is not None:
            console.print(f"binary store: {version.binary_store.url}")
        console.print(f"miniapps: {len(version.miniapps)}", Style.DIM)
        console.print(f"native dependencies: {len(version.native_deps)}", Style.DIM)
        return

    if within is not None and not doc.has_descriptor(within):
        console.error(f"{within} does not exist in the Cauldron")
        exit_with_code(int(ErrorCode.USER_ERROR))

    descriptors = doc.descriptors(only_non_released=non_released, within=within)
    if not descriptors:
        console.print("no native application versions", Style.DIM)
    for d in descriptors:
        console.print(str(d))


# -----------------------------------------------------------------------------
# add
# -----------------------------------------------------------------------------


@add_app.command("nativeapp")
def add_nativeapp(
    descriptor: str = typer.Argument(..., help="Native application version (name:platform:version)"),
    container_version: str = typer.Option(
        DEFAULT_CONTAINER_VERSION, "--container-version", help="Initial container version"
    ),
) -> None:
    """Create a native application version."""
    ctx = build_context()
    target = descriptor_arg(descriptor, ctx.console)
    exit_on_error(
        ctx.cauldron.add_native_app_version(target, container_version=container_version),
        ctx.console,
    )
    ctx.console.success(f"{target} added")


@add_app.command("dependencies")
def add_dependencies(
    descriptor: str = typer.Argument(..., help="Native application version (name:platform:version)"),
    dependencies: list[str] = typer.Argument(..., help="Pinned native dependencies (name@version)"),
) -> None:
    """Add native dependencies to a version (an existing dependency gets the new version)."""
    ctx = build_context()
    target = descriptor_arg(descriptor, ctx.console)
    deps = dependency_args(dependencies, ctx.console)
    exit_on_error(ctx.cauldron.add_dependencies(target, deps), ctx.console)
    ctx.console.success(f"{len(deps)} native dependencies synced to {target}")


# -----------------------------------------------------------------------------
# update
# -----------------------------------------------------------------------------


@update_app.command("miniapps")
def update_miniapps(
    descriptor: str = typer.Argument(..., help="Native application version (name:platform:version)"),
    modules: Path = typer.Option(..., "--modules", help="JSON file of MiniApps and their native deps"),
    force: bool = typer.Option(
        False, "--force", help="Keep the highest version of conflicting native dependencies"
    ),
    container_version: str | None = typer.Option(
        None, "--container-version", help="New container version (default: patch bump)"
    ),
) -> None:
    """Update MiniApps already in the container and sync its native dependencies."""
    ctx = build_context()
    target = descriptor_arg(descriptor, ctx.console)
    modules_file = exit_on_error(load_modules_file(modules), ctx.console)
    update = exit_on_error(
        update_container_miniapps(
            ctx.cauldron.engine,
            target,
            modules_file.modules,
            known=modules_file.container,
            force=force,
            container_version=container_version,
            console=ctx.console,
        ),
        ctx.console,
    )
    for dep in update.dependencies:
        ctx.console.print(f"  {dep}", Style.DIM)


@update_app.command("release")
def update_release(
    descriptor: str = typer.Argument(..., help="Native application version (name:platform:version)"),
) -> None:
    """Mark a native application version as released."""
    ctx = build_context()
    target = descriptor_arg(descriptor, ctx.console)
    exit_on_error(ctx.cauldron.mark_released(target), ctx.console)
    ctx.console.success(f"{target} released")


@update_app.command("binarystore")
def update_binarystore(
    descriptor: str = typer.Argument(..., help="Native application version (name:platform:version)"),
    url: str = typer.Argument(..., help="Binary store URL"),
) -> None:
    """Set where the binaries of a native application version are stored."""
    ctx = build_context()
    target = descriptor_arg(descriptor, ctx.console)
    exit_on_error(ctx.cauldron.set_binary_store(target, url), ctx.console)
    ctx.console.success(f"binary store of {target} set to {url}")


# -----------------------------------------------------------------------------
# repo
# -----------------------------------------------------------------------------


@repo_app.command("clear")
def repo_clear() -> None:
    """Delete the local Cauldron working copy (it is cloned again on next use)."""
    ctx = build_context()
    if ctx.cauldron.clear_working_copy():
        ctx.console.success("local Cauldron working copy removed")
    else:
        ctx.console.print("no local Cauldron working copy", Style.DIM)
