"""Version control capability used by the transaction engine.

The engine only needs a handful of primitives; ern.git.Repository provides
them on top of the git CLI and MemoryVersionControl provides them in memory
(for tests and dry runs) with the same fast-forward-only push semantics.
"""

from __future__ import annotations

import itertools
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from ern.core.result import Err, Ok, Result
from ern.git.repository import GitError, Repository

__all__ = [
    "MemoryCommit",
    "MemoryRemote",
    "MemoryVersionControl",
    "VersionControl",
    "git_version_control",
]


class VersionControl(Protocol):
    """Operations the Cauldron needs from its working copy."""

    path: Path

    def exists(self) -> bool: ...

    def init(self, remote: str, url: str, branch: str) -> Result[None, GitError]: ...

    def set_remote_url(self, remote: str, url: str) -> Result[None, GitError]: ...

    def fetch(self, remote: str, branch: str) -> Result[None, GitError]:
        """Fetch branch; Err(kind="no_remote_ref") when the remote has no such branch."""
        ...

    def reset_hard(self, ref: str) -> Result[None, GitError]: ...

    def add(self, paths: Sequence[str] = ()) -> Result[None, GitError]: ...

    def commit(self, message: str) -> Result[None, GitError]: ...

    def tag(self, name: str) -> Result[None, GitError]: ...

    def push(self, remote: str, branch: str, *, tags: Sequence[str] = ()) -> Result[None, GitError]:
        """Push HEAD to branch; Err(kind="rejected") when it is not a fast-forward."""
        ...

    def head_sha(self) -> str | None: ...


def git_version_control(path: Path) -> VersionControl:
    return Repository(path)


# -----------------------------------------------------------------------------
# In-memory implementation
# -----------------------------------------------------------------------------

_commit_ids = itertools.count(1)


@dataclass(frozen=True, slots=True)
class MemoryCommit:
    id: str
    message: str
    files: dict[str, bytes]


def _new_commit(message: str, files: dict[str, bytes]) -> MemoryCommit:
    return MemoryCommit(id=f"c{next(_commit_ids):06d}", message=message, files=dict(files))


@dataclass
class MemoryRemote:
    """A shared remote: branch histories and tags.

    Attributes:
        url: Remote URL the working copies register.
        reachable: When False, fetch and push fail.
        reject_next_push: Refuse the next push as if another machine won the race.
    """

    url: str = "memory://cauldron"
    branches: dict[str, list[MemoryCommit]] = field(default_factory=dict)
    tags: dict[str, MemoryCommit] = field(default_factory=dict)
    reachable: bool = True
    reject_next_push: bool = False
    push_count: int = 0

    def head(self, branch: str = "master") -> MemoryCommit | None:
        history = self.branches.get(branch)
        return history[-1] if history else None

    def read(self, path: str, branch: str = "master") -> bytes | None:
        """Content of a file at the tip of branch."""
        head = self.head(branch)
        return None if head is None else head.files.get(path)


class MemoryVersionControl:
    """Working copy on disk, history in memory.

    Files live under `path` so the engine reads and writes real files; commits
    snapshot every file below `path`.
    """

    def __init__(self, path: Path, remote: MemoryRemote) -> None:
        self.path = path
        self.remote = remote
        self._initialized = False
        self._remote_name: str | None = None
        self._tracking: dict[str, list[MemoryCommit]] = {}
        self._history: list[MemoryCommit] = []
        self._staged: dict[str, bytes] | None = None
        self._tags: dict[str, MemoryCommit] = {}

    @property
    def history(self) -> list[MemoryCommit]:
        return list(self._history)

    def exists(self) -> bool:
        return self._initialized

    def init(self, remote: str, url: str, branch: str) -> Result[None, GitError]:
        self.path.mkdir(parents=True, exist_ok=True)
        self._initialized = True
        self._remote_name = remote
        return self.set_remote_url(remote, url)

    def set_remote_url(self, remote: str, url: str) -> Result[None, GitError]:
        if remote != self._remote_name:
            return Err(GitError(command="remote set-url", message=f"No such remote '{remote}'"))
        if url != self.remote.url:
            return Err(GitError(command="remote set-url", message=f"unknown remote url {url}"))
        return Ok(None)

    def fetch(self, remote: str, branch: str) -> Result[None, GitError]:
        if not self.remote.reachable:
            return Err(GitError(command="fetch", message="Could not read from remote repository."))
        history = self.remote.branches.get(branch)
        if not history:
            return Err(
                GitError(
                    command="fetch",
                    message=f"fatal: couldn't find remote ref {branch}",
                    kind="no_remote_ref",
                )
            )
        self._tracking[branch] = list(history)
        return Ok(None)

    def reset_hard(self, ref: str) -> Result[None, GitError]:
        branch = ref.split("/", 1)[1] if "/" in ref else ref
        history = self._tracking.get(branch)
        if history is None:
            return Err(GitError(command="reset --hard", message=f"unknown revision {ref}"))

        for existing in sorted(self.path.rglob("*"), reverse=True):
            if existing.is_file():
                existing.unlink()
            elif existing.is_dir() and not any(existing.iterdir()):
                existing.rmdir()
        for rel, content in history[-1].files.items():
            target = self.path / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)

        self._history = list(history)
        self._staged = None
        return Ok(None)

    def add(self, paths: Sequence[str] = ()) -> Result[None, GitError]:
        snapshot = dict(self._history[-1].files) if self._history else {}
        if paths:
            for rel in paths:
                file = self.path / rel
                if not file.exists():
                    return Err(GitError(command="add", message=f"pathspec '{rel}' did not match"))
                snapshot[rel] = file.read_bytes()
        else:
            snapshot = {
                p.relative_to(self.path).as_posix(): p.read_bytes()
                for p in self.path.rglob("*")
                if p.is_file()
            }
        self._staged = snapshot
        return Ok(None)

    def commit(self, message: str) -> Result[None, GitError]:
        files = self._staged
        if files is None:
            files = dict(self._history[-1].files) if self._history else {}
        self._history.append(_new_commit(message, files))
        self._staged = None
        return Ok(None)

    def tag(self, name: str) -> Result[None, GitError]:
        if not self._history:
            return Err(GitError(command="tag", message="Failed to resolve 'HEAD'"))
        self._tags[name] = self._history[-1]
        return Ok(None)

    def push(self, remote: str, branch: str, *, tags: Sequence[str] = ()) -> Result[None, GitError]:
        if not self.remote.reachable:
            return Err(GitError(command="push", message="Could not read from remote repository."))
        if self.remote.reject_next_push:
            self.remote.reject_next_push = False
            return Err(
                GitError(command="push", message="! [rejected] (fetch first)", kind="rejected")
            )

        upstream = self.remote.branches.get(branch, [])
        if self._history[: len(upstream)] != upstream:
            return Err(
                GitError(command="push", message="! [rejected] (non-fast-forward)", kind="rejected")
            )
        for name in tags:
            commit = self._tags.get(name)
            if commit is None:
                return Err(GitError(command="push", message=f"src refspec {name} does not match any"))
            existing = self.remote.tags.get(name)
            if existing is not None and existing != commit:
                return Err(
                    GitError(command="push", message=f"! [rejected] {name} (already exists)", kind="rejected")
                )

        self.remote.branches[branch] = list(self._history)
        for name in tags:
            self.remote.tags[name] = self._tags[name]
        self._tracking[branch] = list(self._history)
        self.remote.push_count += 1
        return Ok(None)

    def head_sha(self) -> str | None:
        return self._history[-1].id if self._history else None
