from __future__ import annotations

import typer

from ern import __version__
from ern.cli.commands.cauldron import cauldron_app
from ern.cli.commands.compat import compat_check
from ern.cli.commands.resolve import resolve

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(resolve)
app.command("compat-check")(compat_check)

# Sub-apps
app.add_typer(cauldron_app, name="cauldron", help="Manage the Cauldron.")


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def main() -> None:
    app()
