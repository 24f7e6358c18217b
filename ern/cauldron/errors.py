"""Error types for the Cauldron store.

All of them are plain values carried by Err(...). TransactionError is the
union a transaction caller has to handle; the CLI maps each member to an
exit code in ern.output.errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

__all__ = [
    "DocumentError",
    "LockContentionError",
    "SchemaError",
    "StorageError",
    "SyncError",
    "SyncStep",
    "TransactionAbortedError",
    "TransactionError",
]

SyncStep = Literal["init", "remote", "fetch", "reset", "bootstrap", "add", "commit", "tag", "push"]


@dataclass(frozen=True, slots=True)
class SchemaError:
    """The stored document format is newer than supported, or cannot be migrated."""

    message: str
    found: int | None = None
    supported: int | None = None
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


@dataclass(frozen=True, slots=True)
class DocumentError:
    """A Document Model operation would break one of the store invariants."""

    kind: Literal["not_found", "exists", "released", "incomplete", "invalid"]
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


@dataclass(frozen=True, slots=True)
class StorageError:
    """The working copy document could not be read or written."""

    message: str
    path: Path | None = None

    def pretty(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


@dataclass(frozen=True, slots=True)
class LockContentionError:
    """Another transaction is in flight in this process."""

    message: str = "a Cauldron transaction is already in progress"

    def pretty(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class SyncError:
    """A version control step against the working copy or remote failed.

    Attributes:
        step: Which step of the transaction failed.
        message: Error message.
        hint: Output of the failing git command, when available.
    """

    step: SyncStep
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} [{self.step}] (hint: {self.hint})"
        return f"{self.message} [{self.step}]"


@dataclass(frozen=True, slots=True)
class TransactionAbortedError:
    """The mutation failed; nothing was committed or pushed.

    Attributes:
        message: Summary line.
        cause: The DocumentError/other error value returned by the mutation,
            or the exception it raised.
    """

    message: str
    cause: object = None

    def pretty(self) -> str:
        cause = self.cause
        if cause is None:
            return self.message
        pretty = getattr(cause, "pretty", None)
        detail = pretty() if callable(pretty) else str(cause)
        return f"{self.message}: {detail}"


type TransactionError = (
    LockContentionError | SyncError | SchemaError | StorageError | TransactionAbortedError
)
