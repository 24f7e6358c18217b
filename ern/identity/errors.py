from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class ParseError:
    """A dependency, descriptor, package path or origin could not be parsed.

    Never retried internally; the caller decides whether to ask again.
    """

    kind: Literal["dependency", "descriptor", "package_path", "origin"]
    value: str
    message: str

    def pretty(self) -> str:
        return f"{self.message}: {self.value!r}"
