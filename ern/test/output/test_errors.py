"""Tests for ern.output.errors (error printing and exit codes)."""

from __future__ import annotations

from pathlib import Path

import pytest

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
from ern.identity.dependency import Dependency
from ern.identity.errors import ParseError
from ern.identity.package_path import PackagePath
from ern.output.console import MockConsole, Style
from ern.output.errors import CliError, error_exit_code, print_error
from ern.resolver.resolution import Conflict, ConflictError
from ern.services.container_update import ModulesFileError

CONFLICT = ConflictError(
    conflicts=(
        Conflict(
            identity=Dependency.from_string("react-native"),
            versions=("0.72.4", "0.73.0"),
            modules=((PackagePath.from_string("cart@1.0.0"),), (PackagePath.from_string("search@1.0.0"),)),
        ),
    )
)


class TestExitCodes:
    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (CONFLICT, ErrorCode.CONFLICT_ERROR),
            (SchemaError("too new", found=9, supported=3), ErrorCode.SCHEMA_ERROR),
            (SyncError(step="push", message="git push failed"), ErrorCode.SYNC_ERROR),
            (StorageError("cannot write"), ErrorCode.IO_ERROR),
            (LockContentionError(), ErrorCode.LOCK_ERROR),
            (TransactionAbortedError("aborted", cause=CONFLICT), ErrorCode.CONFLICT_ERROR),
            (
                TransactionAbortedError("aborted", cause=DocumentError(kind="exists", message="x")),
                ErrorCode.USER_ERROR,
            ),
            (DocumentError(kind="not_found", message="missing"), ErrorCode.USER_ERROR),
            (ParseError(kind="dependency", value="a b", message="bad"), ErrorCode.USER_ERROR),
            (ConfigError("bad config"), ErrorCode.USER_ERROR),
            (ModulesFileError("file not found", Path("m.json")), ErrorCode.USER_ERROR),
        ],
    )
    def test_mapping(self, error: CliError, code: ErrorCode) -> None:
        assert error_exit_code(error) == int(code)


class TestPrintError:
    def test_conflict_lists_each_conflict(self) -> None:
        console = MockConsole()
        print_error(CONFLICT, console)

        assert console.messages[0] == "error: 1 native dependency version conflict"
        assert console.dim_messages[0] == (
            "  react-native: 0.72.4 (cart@1.0.0); 0.73.0 (search@1.0.0)"
        )
        assert console.dim_messages[-1].startswith("hint: ")

    def test_sync_error_shows_step_and_hint(self) -> None:
        console = MockConsole()
        print_error(
            SyncError(step="push", message="git push failed", hint="run the command again"),
            console,
        )
        assert console.messages == ["error: git push failed (push)", "run the command again"]

    def test_document_error_hint(self) -> None:
        console = MockConsole()
        print_error(DocumentError(kind="released", message="frozen", hint="new version"), console)
        assert console.messages == ["error: frozen", "hint: new version"]
        assert console.outputs[1].style == Style.DIM

    def test_aborted_with_document_cause(self) -> None:
        console = MockConsole()
        cause = DocumentError(kind="exists", message="walmart:ios:1.0.0 already exists")
        print_error(TransactionAbortedError("Cauldron update failed", cause=cause), console)
        assert console.messages == [
            "error: Cauldron update failed",
            "error: walmart:ios:1.0.0 already exists",
        ]

    def test_aborted_with_exception_cause(self) -> None:
        console = MockConsole()
        print_error(TransactionAbortedError("Cauldron update failed", cause=KeyError("x")), console)
        assert console.dim_messages == ["'x'"]

    def test_default_uses_pretty(self) -> None:
        console = MockConsole()
        print_error(ModulesFileError("file not found", Path("m.json")), console)
        assert console.messages == ["error: m.json: file not found"]
