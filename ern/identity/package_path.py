"""Package paths of MiniApps bundled in a container.

A package path is either a registry package (`[@scope/]name[@version]`) or a
git reference (`https://host/org/repo.git#v1.0.0`). Its identity is the base
path: everything except the version / ref.
"""

from __future__ import annotations

from dataclasses import dataclass

from ern.core.result import Err, Ok, Result
from ern.identity.dependency import Dependency, parse_dependency
from ern.identity.errors import ParseError

__all__ = ["PackagePath", "parse_package_path"]

_GIT_PREFIXES = ("git+", "git@", "git://", "ssh://", "http://", "https://")


@dataclass(frozen=True, slots=True)
class PackagePath:
    base_path: str
    version: str | None = None
    is_git: bool = False

    @classmethod
    def from_string(cls, value: str) -> PackagePath:
        match parse_package_path(value):
            case Ok(path):
                return path
            case Err(error):
                raise ValueError(error.pretty())

    @classmethod
    def from_dependency(cls, dep: Dependency) -> PackagePath:
        return cls(base_path=dep.base, version=dep.version)

    def as_dependency(self) -> Dependency | None:
        """Registry package paths as a Dependency; None for git references."""
        if self.is_git:
            return None
        match parse_dependency(str(self)):
            case Ok(dep):
                return dep
            case Err(_):
                return None

    @property
    def name(self) -> str:
        """Short package name (repository name for git references)."""
        if self.is_git:
            tail = self.base_path.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1]
            return tail.removesuffix(".git")
        return self.base_path.rsplit("/", 1)[-1]

    def same_identity(self, other: PackagePath) -> bool:
        return self.base_path == other.base_path

    def without_version(self) -> PackagePath:
        return PackagePath(base_path=self.base_path, is_git=self.is_git)

    def __str__(self) -> str:
        if not self.version:
            return self.base_path
        sep = "#" if self.is_git else "@"
        return f"{self.base_path}{sep}{self.version}"


def _is_git_reference(s: str) -> bool:
    base = s.split("#", 1)[0]
    return s.startswith(_GIT_PREFIXES) or base.endswith(".git")


def parse_package_path(value: str) -> Result[PackagePath, ParseError]:
    s = value.strip()
    if not s:
        return Err(ParseError(kind="package_path", value=value, message="empty package path"))

    if _is_git_reference(s):
        base, _, ref = s.partition("#")
        if not base or any(c.isspace() for c in s):
            return Err(
                ParseError(kind="package_path", value=value, message="malformed git reference")
            )
        return Ok(PackagePath(base_path=base, version=ref or None, is_git=True))

    match parse_dependency(s):
        case Ok(dep):
            return Ok(PackagePath.from_dependency(dep))
        case Err(error):
            return Err(ParseError(kind="package_path", value=value, message=error.message))
