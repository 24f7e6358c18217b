"""Git operations module.

Usage:
    from ern.git import Repository

    repo = Repository(working_copy)
    if not repo.exists():
        repo.init("upstream", url, "master")
"""

from ern.git.repository import (
    GitError,
    GitErrorKind,
    Repository,
)

__all__ = [
    "GitError",
    "GitErrorKind",
    "Repository",
]
