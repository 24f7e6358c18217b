"""Error codes for CLI exit status.

Each error family of the store and resolver maps to one stable exit code so
scripts driving `ern` can branch on the kind of failure.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: User error (malformed descriptor, unknown version, bad input file)
    - 2: Dependency conflict under the fatal policy
    - 3: Store document format error (unsupported or unmigratable)
    - 4: Remote synchronization error (fetch/push/commit failed)
    - 5: I/O error (working copy unreadable/unwritable)
    - 6: Another transaction is already running
    """

    OK = 0
    USER_ERROR = 1
    CONFLICT_ERROR = 2
    SCHEMA_ERROR = 3
    SYNC_ERROR = 4
    IO_ERROR = 5
    LOCK_ERROR = 6

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
