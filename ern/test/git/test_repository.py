"""Tests for git/repository.py."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from ern.core.result import Err, Ok
from ern.git.repository import GitError, Repository, _classify


def make_completed_process(
    stdout: str = "",
    stderr: str = "",
    returncode: int = 0,
) -> subprocess.CompletedProcess[str]:
    """Create a mock CompletedProcess."""
    return subprocess.CompletedProcess(
        args=["git"],
        returncode=returncode,
        stdout=stdout,
        stderr=stderr,
    )


def _git_args(mock_run: MagicMock, call: int = -1) -> list[str]:
    """Arguments after `git -C <path>` of a recorded call."""
    cmd = mock_run.call_args_list[call].args[0]
    return list(cmd[3:])


class TestClassify:
    @pytest.mark.parametrize(
        ("stderr", "kind"),
        [
            ("fatal: couldn't find remote ref master", "no_remote_ref"),
            (" ! [rejected]        HEAD -> master (fetch first)", "rejected"),
            ("error: failed to push some refs (non-fast-forward)", "rejected"),
            ("fatal: could not read from remote repository", "failed"),
        ],
    )
    def test_kinds(self, stderr: str, kind: str) -> None:
        assert _classify(stderr) == kind


class TestRepository:
    """Tests for Repository class."""

    def test_exists_with_git_dir(self, tmp_path: Path) -> None:
        (tmp_path / ".git").mkdir()
        assert Repository(tmp_path).exists() is True

    def test_exists_no_git(self, tmp_path: Path) -> None:
        assert Repository(tmp_path).exists() is False

    @patch("subprocess.run")
    def test_init_sets_branch_and_remote(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()
        repo = Repository(tmp_path / "wc")

        assert repo.init("upstream", "https://example.com/c.git", "master") == Ok(None)

        assert (tmp_path / "wc").is_dir()
        assert [_git_args(mock_run, i) for i in range(3)] == [
            ["init"],
            ["symbolic-ref", "HEAD", "refs/heads/master"],
            ["remote", "add", "upstream", "https://example.com/c.git"],
        ]

    @patch("subprocess.run")
    def test_fetch_missing_branch(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            returncode=128, stderr="fatal: couldn't find remote ref master\n"
        )

        result = Repository(tmp_path).fetch("upstream", "master")

        assert isinstance(result, Err)
        error = result.unwrap_err()
        assert isinstance(error, GitError)
        assert error.kind == "no_remote_ref"
        assert error.returncode == 128
        assert error.command == "fetch upstream"

    @patch("subprocess.run")
    def test_reset_hard_also_cleans(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()

        assert Repository(tmp_path).reset_hard("upstream/master") == Ok(None)

        assert _git_args(mock_run, 0) == ["reset", "--hard", "upstream/master"]
        assert _git_args(mock_run, 1) == ["clean", "-fd"]

    @patch("subprocess.run")
    def test_add_without_paths_stages_everything(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()
        repo = Repository(tmp_path)

        repo.add()
        assert _git_args(mock_run) == ["add", "-A"]
        repo.add(["cauldron.json"])
        assert _git_args(mock_run) == ["add", "--", "cauldron.json"]

    @patch("subprocess.run")
    def test_push_refspecs(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()

        Repository(tmp_path).push("upstream", "master", tags=["v1.0.0"])

        assert _git_args(mock_run) == [
            "push",
            "--atomic",
            "upstream",
            "HEAD:refs/heads/master",
            "refs/tags/v1.0.0",
        ]
        assert mock_run.call_args.kwargs["timeout"] is None

    @patch("subprocess.run")
    def test_push_rejected(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            returncode=1,
            stderr=" ! [rejected]        HEAD -> master (fetch first)\n",
        )

        result = Repository(tmp_path).push("upstream", "master")

        assert isinstance(result, Err)
        assert result.error.kind == "rejected"

    @patch("subprocess.run")
    def test_local_commands_have_timeout(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()
        Repository(tmp_path).commit("message")
        assert mock_run.call_args.kwargs["timeout"] == 30.0
        assert _git_args(mock_run) == ["commit", "--allow-empty", "-m", "message"]

    @patch("subprocess.run")
    def test_head_sha(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="abc123\n")
        assert Repository(tmp_path).head_sha() == "abc123"

    @patch("subprocess.run")
    def test_head_sha_empty_repository(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(returncode=1)
        assert Repository(tmp_path).head_sha() is None

    @patch("subprocess.run", side_effect=FileNotFoundError("git"))
    def test_git_missing(self, _mock_run: MagicMock, tmp_path: Path) -> None:
        result = Repository(tmp_path).fetch("upstream", "master")
        assert isinstance(result, Err)
        assert result.error.kind == "failed"
