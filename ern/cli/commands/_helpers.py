"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer

from ern.core.errors import ErrorCode
from ern.core.result import Err, Ok, Result, collect
from ern.identity.dependency import Dependency, parse_dependency
from ern.identity.descriptor import NativeApplicationDescriptor, parse_descriptor
from ern.output.console import ConsoleProtocol
from ern.output.errors import CliError, error_exit_code, print_error


def exit_on_error[T](result: Result[T, CliError], console: ConsoleProtocol) -> T:
    """Return the value of an Ok result, or print the error and exit.

    The exit code follows the error kind (see ern.output.errors).
    """
    match result:
        case Ok(value):
            return value
        case Err(error):
            print_error(error, console)
            raise typer.Exit(code=error_exit_code(error))


def exit_with_code(code: int) -> NoReturn:
    """Exit with given code. Explicit helper for clarity."""
    raise typer.Exit(code=code)


def descriptor_arg(
    value: str, console: ConsoleProtocol, *, complete: bool = True
) -> NativeApplicationDescriptor:
    descriptor = exit_on_error(parse_descriptor(value), console)
    if complete and not descriptor.is_complete:
        console.error(f"{descriptor} is not a complete descriptor (expected name:platform:version)")
        exit_with_code(int(ErrorCode.USER_ERROR))
    return descriptor


def dependency_args(values: list[str], console: ConsoleProtocol) -> list[Dependency]:
    return exit_on_error(collect([parse_dependency(v) for v in values]), console)
