"""Git repository abstraction.

Repository wraps the git command line for the working copy of a Cauldron.
All operations return Result types; it satisfies the VersionControl protocol
the transaction engine depends on.

Usage:
    repo = Repository(Path("~/.ern/cauldron").expanduser())

    match repo.fetch("upstream", "master"):
        case Ok(_):
            repo.reset_hard("upstream/master")
        case Err(e) if e.kind == "no_remote_ref":
            print("remote is empty")
        case Err(e):
            print(f"fetch failed: {e.message}")
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from ern.core.result import Err, Ok, Result
from ern.platform.process import ProcessError
from ern.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "clone"})

__all__ = [
    "GitError",
    "GitErrorKind",
    "Repository",
]

GitErrorKind = Literal["failed", "no_remote_ref", "rejected"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
        kind: no_remote_ref when the remote branch does not exist yet,
            rejected when a push was refused (remote advanced)
    """

    command: str
    message: str
    returncode: int = 1
    kind: GitErrorKind = "failed"


def _classify(stderr: str) -> GitErrorKind:
    text = stderr.lower()
    if "couldn't find remote ref" in text or "could not find remote ref" in text:
        return "no_remote_ref"
    if "[rejected]" in text or "non-fast-forward" in text or "fetch first" in text:
        return "rejected"
    return "failed"


class Repository:
    """Git working copy.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check if this is a valid git repository."""
        return (self.path / ".git").exists()

    def init(self, remote: str, url: str, branch: str) -> Result[None, GitError]:
        """Create the repository, point HEAD at branch and register the remote."""
        self.path.mkdir(parents=True, exist_ok=True)
        for args in (
            ["init"],
            ["symbolic-ref", "HEAD", f"refs/heads/{branch}"],
            ["remote", "add", remote, url],
        ):
            result = self._git(args)
            if isinstance(result, Err):
                return result
        return Ok(None)

    def set_remote_url(self, remote: str, url: str) -> Result[None, GitError]:
        return self._git(["remote", "set-url", remote, url]).map(lambda _: None)

    def fetch(self, remote: str, branch: str) -> Result[None, GitError]:
        return self._git(["fetch", remote, branch]).map(lambda _: None)

    def reset_hard(self, ref: str) -> Result[None, GitError]:
        """Reset to ref and remove untracked files left by an interrupted write."""
        reset = self._git(["reset", "--hard", ref])
        if isinstance(reset, Err):
            return reset
        return self._git(["clean", "-fd"]).map(lambda _: None)

    def add(self, paths: Sequence[str] = ()) -> Result[None, GitError]:
        """Stage the given paths, or every change when none are given."""
        args = ["add", "--", *paths] if paths else ["add", "-A"]
        return self._git(args).map(lambda _: None)

    def commit(self, message: str) -> Result[None, GitError]:
        # --allow-empty: a transaction whose mutation changed nothing still records its message
        return self._git(["commit", "--allow-empty", "-m", message]).map(lambda _: None)

    def tag(self, name: str) -> Result[None, GitError]:
        """Create or move a local tag; the remote still refuses to move a pushed one."""
        return self._git(["tag", "-f", name]).map(lambda _: None)

    def push(self, remote: str, branch: str, *, tags: Sequence[str] = ()) -> Result[None, GitError]:
        """Push HEAD and tags atomically: a refused tag keeps the branch unchanged too."""
        refspecs = [f"HEAD:refs/heads/{branch}", *(f"refs/tags/{t}" for t in tags)]
        return self._git(["push", "--atomic", remote, *refspecs]).map(lambda _: None)

    def head_sha(self) -> str | None:
        """Commit id of HEAD, None for an empty repository."""
        result = self._git(["rev-parse", "--verify", "-q", "HEAD"])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def _git(self, args: list[str]) -> Result[str, GitError]:
        result = self._run(args)
        match result:
            case Ok(stdout):
                return Ok(stdout)
            case Err(e):
                message = e.stderr.strip() or e.stdout.strip() or f"git {args[0]} failed"
                return Err(
                    GitError(
                        command=" ".join(args[:2]),
                        message=message,
                        returncode=e.returncode,
                        kind=_classify(e.stderr),
                    )
                )

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository.

        Network commands have no timeout: a hung remote blocks the caller,
        which owns cancellation.
        """
        command = args[0] if args else ""
        timeout = None if command in _NETWORK_COMMANDS else _GIT_TIMEOUT_SECONDS
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)
