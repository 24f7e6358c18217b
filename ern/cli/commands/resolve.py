from __future__ import annotations

from pathlib import Path

import typer

from ern.cli.commands._helpers import exit_on_error
from ern.output.console import RichConsole
from ern.resolver.resolution import check_conflicts, resolve_across_modules
from ern.services.container_update import load_modules_file


def resolve(
    modules: Path = typer.Option(..., "--modules", help="JSON file of MiniApps and their native deps"),
    force: bool = typer.Option(False, "--force", help="Report conflicts without failing"),
) -> None:
    """Resolve native dependency versions across MiniApps (no Cauldron access)."""
    console = RichConsole()
    modules_file = exit_on_error(load_modules_file(modules), console)
    resolution = resolve_across_modules([*modules_file.modules, *modules_file.container])

    console.header("Resolved native dependencies")
    for dep in resolution.resolved:
        console.print(str(dep))

    if not resolution.has_conflicts:
        console.success("no version conflicts")
        return

    console.newline()
    for conflict in resolution.conflicts:
        console.warning(conflict.describe())
    exit_on_error(check_conflicts(resolution, force=force), console)
