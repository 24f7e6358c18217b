from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

VersionBump = Literal["major", "minor", "patch"]

# 1, 1.2 and 1.2.3 are accepted (missing parts are 0), with an optional v prefix,
# pre-release and build metadata. Build metadata never affects ordering.
_VERSION_RE = re.compile(
    r"v?(\d+)(?:\.(\d+))?(?:\.(\d+))?"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
)

type PrereleaseKey = tuple[tuple[int, int, str], ...]
type VersionKey = tuple[int, int, int, int, PrereleaseKey]


@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def key(self) -> VersionKey:
        """Precedence key: pre-releases sort below the release they precede."""
        pre: PrereleaseKey = tuple(
            (0, int(part), "") if part.isdigit() else (1, 0, part) for part in self.prerelease
        )
        return (self.major, self.minor, self.patch, 0 if self.prerelease else 1, pre)

    def __lt__(self, other: SemVer) -> bool:
        return self.key < other.key

    def __le__(self, other: SemVer) -> bool:
        return self.key <= other.key

    def __gt__(self, other: SemVer) -> bool:
        return self.key > other.key

    def __ge__(self, other: SemVer) -> bool:
        return self.key >= other.key

    def bump(self, kind: VersionBump) -> SemVer:
        match kind:
            case "major":
                return SemVer(self.major + 1, 0, 0)
            case "minor":
                return SemVer(self.major, self.minor + 1, 0)
            case "patch":
                return SemVer(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            return f"{base}-{'.'.join(self.prerelease)}"
        return base


def parse_version(value: str) -> SemVer | None:
    m = _VERSION_RE.fullmatch(value.strip())
    if m is None:
        return None
    prerelease = tuple(m.group(4).split(".")) if m.group(4) else ()
    return SemVer(
        int(m.group(1)),
        int(m.group(2) or 0),
        int(m.group(3) or 0),
        prerelease,
    )


def version_key(value: str) -> tuple[int, VersionKey] | tuple[int, str]:
    """Sort key ranking every non-semver string below every valid version.

    Two non-semver strings fall back to plain string order.
    """
    parsed = parse_version(value)
    if parsed is None:
        return (0, value)
    return (1, parsed.key)


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0 or 1 as a ranks below, level with, or above b."""
    ka, kb = version_key(a), version_key(b)
    if ka == kb:
        return 0
    return -1 if ka < kb else 1  # type: ignore[operator]


def bump_version(value: str, kind: VersionBump = "patch") -> str | None:
    parsed = parse_version(value)
    if parsed is None:
        return None
    return str(parsed.bump(kind))
