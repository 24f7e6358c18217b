"""Native dependency identity: `[@scope/]name[@version]`.

Parsing tries the alternatives below in order, each as a full-string match.
The scoped forms come first because `@scope/name` would otherwise be read as
an empty name followed by a version.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, replace

from ern.core.result import Err, Ok, Result
from ern.identity.errors import ParseError

__all__ = [
    "Dependency",
    "DependencyIdentity",
    "parse_dependency",
    "same_dependency",
    "to_canonical_string",
]

DependencyIdentity = tuple[str, str | None]

_SEGMENT = r"[^\s@/]+"
_VERSION = r"[^\s@]+"


@dataclass(frozen=True, slots=True)
class Dependency:
    """A named, optionally scoped, optionally versioned dependency.

    Two dependencies denote the same library when name and scope match;
    the version is compared separately (see same_dependency).
    """

    name: str
    scope: str | None = None
    version: str | None = None

    @classmethod
    def from_string(cls, value: str) -> Dependency:
        """Parse a literal, raising ValueError when malformed."""
        match parse_dependency(value):
            case Ok(dep):
                return dep
            case Err(error):
                raise ValueError(error.pretty())

    @property
    def identity(self) -> DependencyIdentity:
        return (self.name, self.scope)

    @property
    def base(self) -> str:
        """Canonical string without the version."""
        return f"@{self.scope}/{self.name}" if self.scope else self.name

    def without_version(self) -> Dependency:
        return replace(self, version=None)

    def with_version(self, version: str | None) -> Dependency:
        return replace(self, version=version)

    def __str__(self) -> str:
        return to_canonical_string(self)


def _scoped_versioned(m: re.Match[str]) -> Dependency:
    return Dependency(m.group(2), scope=m.group(1), version=m.group(3))


def _versioned(m: re.Match[str]) -> Dependency:
    return Dependency(m.group(1), version=m.group(2))


def _scoped(m: re.Match[str]) -> Dependency:
    return Dependency(m.group(2), scope=m.group(1))


def _bare(m: re.Match[str]) -> Dependency:
    return Dependency(m.group(1))


_ALTERNATIVES: tuple[tuple[re.Pattern[str], Callable[[re.Match[str]], Dependency]], ...] = (
    (re.compile(rf"@({_SEGMENT})/({_SEGMENT})@({_VERSION})"), _scoped_versioned),
    (re.compile(rf"({_SEGMENT})@({_VERSION})"), _versioned),
    (re.compile(rf"@({_SEGMENT})/({_SEGMENT})"), _scoped),
    (re.compile(rf"({_SEGMENT})"), _bare),
)


def parse_dependency(value: str) -> Result[Dependency, ParseError]:
    """Parse `[@scope/]name[@version]`.

    Returns:
        Ok(Dependency), or Err(ParseError) for empty or malformed input
        (empty segments, whitespace, stray `@` or `/`).
    """
    s = value.strip()
    if not s:
        return Err(ParseError(kind="dependency", value=value, message="empty dependency"))

    for pattern, build in _ALTERNATIVES:
        m = pattern.fullmatch(s)
        if m is not None:
            return Ok(build(m))

    return Err(ParseError(kind="dependency", value=value, message="malformed dependency"))


def same_dependency(a: Dependency, b: Dependency, *, ignore_version: bool = False) -> bool:
    return (
        a.name == b.name
        and a.scope == b.scope
        and (ignore_version or a.version == b.version)
    )


def to_canonical_string(dep: Dependency) -> str:
    if dep.version:
        return f"{dep.base}@{dep.version}"
    return dep.base
