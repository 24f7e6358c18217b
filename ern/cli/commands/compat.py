from __future__ import annotations

from pathlib import Path

import typer

from ern.cli.commands._helpers import descriptor_arg, exit_on_error, exit_with_code
from ern.cli.context import build_context
from ern.core.errors import ErrorCode
from ern.output.console import Style
from ern.services.compat_check import check_compatibility
from ern.services.container_update import load_modules_file


def compat_check(
    descriptor: str = typer.Option(
        ..., "--descriptor", "-d", help="Native application version (name:platform:version)"
    ),
    modules: Path = typer.Option(..., "--modules", help="JSON file of MiniApps and their native deps"),
) -> None:
    """Check MiniApps' native dependencies against a version stored in the Cauldron."""
    ctx = build_context()
    console = ctx.console
    target = descriptor_arg(descriptor, console)
    modules_file = exit_on_error(load_modules_file(modules), console)
    stored = exit_on_error(ctx.cauldron.get_native_dependencies(target), console)

    report = check_compatibility(modules_file.modules, stored)

    console.header(f"Compatibility with {target}")
    for module, dep in report.missing:
        console.print(f"{module}: {dep} not in the container", Style.DIM)
    for incompatibility in report.incompatible:
        console.warning(incompatibility.describe())

    if not report.is_compatible:
        count = len(report.incompatible)
        noun = "dependency" if count == 1 else "dependencies"
        console.error(f"{count} incompatible native {noun}")
        exit_with_code(int(ErrorCode.CONFLICT_ERROR))
    console.success(f"compatible with {target}")
