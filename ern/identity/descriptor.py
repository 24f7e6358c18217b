"""Native application descriptor: `name[:platform[:version]]`.

The descriptor is the store's navigation key. A descriptor without platform
or version addresses every platform / version below it in queries.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Literal

from ern.core.result import Err, Ok, Result
from ern.identity.errors import ParseError

__all__ = [
    "NativeApplicationDescriptor",
    "PLATFORMS",
    "PlatformName",
    "parse_descriptor",
]

PlatformName = Literal["android", "ios"]
PLATFORMS: tuple[PlatformName, ...] = ("android", "ios")

_DESCRIPTOR_RE = re.compile(r"([^\s:]+)(?::([^\s:]+)(?::([^\s:]+))?)?")


@dataclass(frozen=True, slots=True)
class NativeApplicationDescriptor:
    name: str
    platform: PlatformName | None = None
    version: str | None = None

    def __post_init__(self) -> None:
        if self.version is not None and self.platform is None:
            raise ValueError("descriptor version requires a platform")

    @classmethod
    def from_string(cls, value: str) -> NativeApplicationDescriptor:
        match parse_descriptor(value):
            case Ok(descriptor):
                return descriptor
            case Err(error):
                raise ValueError(error.pretty())

    @property
    def is_complete(self) -> bool:
        """True when name, platform and version are all set."""
        return self.platform is not None and self.version is not None

    def without_version(self) -> NativeApplicationDescriptor:
        return replace(self, version=None)

    def without_platform(self) -> NativeApplicationDescriptor:
        return NativeApplicationDescriptor(self.name)

    def with_version(self, version: str) -> NativeApplicationDescriptor:
        if self.platform is None:
            raise ValueError("descriptor version requires a platform")
        return replace(self, version=version)

    def contains(self, other: NativeApplicationDescriptor) -> bool:
        """True when other is this descriptor or a refinement of it."""
        if self.name != other.name:
            return False
        if self.platform is not None and self.platform != other.platform:
            return False
        if self.version is not None and self.version != other.version:
            return False
        return True

    def __str__(self) -> str:
        parts = [self.name]
        if self.platform:
            parts.append(self.platform)
            if self.version:
                parts.append(self.version)
        return ":".join(parts)


def parse_descriptor(value: str) -> Result[NativeApplicationDescriptor, ParseError]:
    s = value.strip()
    if not s:
        return Err(ParseError(kind="descriptor", value=value, message="empty descriptor"))

    m = _DESCRIPTOR_RE.fullmatch(s)
    if m is None:
        return Err(
            ParseError(
                kind="descriptor",
                value=value,
                message="malformed descriptor (expected name[:platform[:version]])",
            )
        )

    name, platform, version = m.group(1), m.group(2), m.group(3)
    if platform is not None and platform not in PLATFORMS:
        return Err(
            ParseError(
                kind="descriptor",
                value=value,
                message=f"unsupported platform {platform!r} (expected android or ios)",
            )
        )

    return Ok(NativeApplicationDescriptor(name, platform, version))  # type: ignore[arg-type]
