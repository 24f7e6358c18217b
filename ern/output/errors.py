"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ern.cauldron.errors import (
    DocumentError,
    LockContentionError,
    SchemaError,
    StorageError,
    SyncError,
    TransactionAbortedError,
)
from ern.core.config import ConfigError
from ern.core.errors import ErrorCode
from ern.identity.errors import ParseError
from ern.output.console import Style
from ern.resolver.resolution import ConflictError
from ern.services.container_update import ModulesFileError

if TYPE_CHECKING:
    from ern.output.console import ConsoleProtocol

__all__ = ["CliError", "error_exit_code", "print_error"]

type CliError = (
    ParseError
    | ConfigError
    | ModulesFileError
    | DocumentError
    | ConflictError
    | SchemaError
    | StorageError
    | SyncError
    | LockContentionError
    | TransactionAbortedError
)


def print_error(error: CliError, console: ConsoleProtocol) -> None:
    """Print an error to console with appropriate formatting."""
    match error:
        case ConflictError(conflicts=conflicts):
            console.error(error.message)
            for conflict in conflicts:
                console.print(f"  {conflict.describe()}", Style.DIM)
            console.print(f"hint: {error.hint}", Style.DIM)
        case SyncError(step=step, message=message, hint=hint):
            console.error(f"{message} ({step})")
            if hint:
                console.print(hint, Style.DIM)
        case SchemaError(message=message, hint=hint) | DocumentError(message=message, hint=hint):
            console.error(message)
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case TransactionAbortedError(cause=cause):
            console.error(error.message)
            if isinstance(cause, DocumentError | ConflictError):
                print_error(cause, console)
            elif cause is not None:
                console.print(str(cause), Style.DIM)
        case _:
            console.error(error.pretty())


def error_exit_code(error: CliError) -> int:
    """Get exit code for an error."""
    match error:
        case ConflictError():
            return int(ErrorCode.CONFLICT_ERROR)
        case SchemaError():
            return int(ErrorCode.SCHEMA_ERROR)
        case SyncError():
            return int(ErrorCode.SYNC_ERROR)
        case StorageError():
            return int(ErrorCode.IO_ERROR)
        case LockContentionError():
            return int(ErrorCode.LOCK_ERROR)
        case TransactionAbortedError(cause=ConflictError()):
            return int(ErrorCode.CONFLICT_ERROR)
        case _:
            return int(ErrorCode.USER_ERROR)
