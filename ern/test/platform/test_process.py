"""Tests for ern.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

from ern.core.result import Err, Ok
from ern.platform.process import ProcessError, run


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(command=("git", "fetch"), returncode=128, stdout="", stderr="")
        assert str(error) == "git fetch failed (exit 128)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("git", "-C", "/tmp/wc", "push", "upstream"),
            returncode=1,
            stdout="",
            stderr="",
        )
        assert str(error) == "git -C /tmp/wc ... failed (exit 1)"


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert result.value.strip() == "hello"

    def test_failure_keeps_stderr(self, tmp_path: Path) -> None:
        script = "import sys; sys.stderr.write('boom'); sys.exit(3)"
        result = run([sys.executable, "-c", script], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 3
        assert result.error.stderr == "boom"

    def test_missing_executable(self, tmp_path: Path) -> None:
        result = run(["ern-no-such-binary"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1

    def test_timeout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "import time; time.sleep(5)"], cwd=tmp_path, timeout=0.2)

        assert isinstance(result, Err)
        assert "timed out" in result.error.stderr
