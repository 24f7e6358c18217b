from __future__ import annotations

from dataclasses import dataclass

import typer

from ern.cauldron.context import context_from_config
from ern.cauldron.store import Cauldron
from ern.core.config import Config, load_config
from ern.core.errors import ErrorCode
from ern.core.result import Err
from ern.output.console import ConsoleProtocol, RichConsole
from ern.platform.paths import ern_home, user_config_path


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol
    cauldron: Cauldron


def build_context() -> CLIContext:
    console = RichConsole()
    config_path = user_config_path()

    config = Config()
    if config_path.exists():
        config_result = load_config(config_path)
        if isinstance(config_result, Err):
            console.error(config_result.error.pretty())
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        config = config_result.value

    context_result = context_from_config(config, ern_home=ern_home(), console=console)
    if isinstance(context_result, Err):
        console.error(context_result.error.message)
        console.print(f"hint: edit {config_path}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(
        config=config,
        console=console,
        cauldron=Cauldron(context_result.value),
    )
