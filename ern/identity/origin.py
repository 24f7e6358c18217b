"""Where a native plugin's sources come from.

Origins are stored as `{"type": "npm", "name": ..., "scope": ..., "version": ...}`
or `{"type": "git", "url": ..., "version": ...}` and modelled as a closed
union so every consumer matches both variants.

Nothing in the Cauldron or the resolver reads origins. They are public API,
exported from `ern.identity`, for the package-layer code that fetches plugin
sources: `download_path` tells it where an origin lands once downloaded.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from ern.core.result import Err, Ok, Result
from ern.core.structured import as_str_dict, get_str
from ern.identity.dependency import Dependency
from ern.identity.errors import ParseError

__all__ = [
    "GitOrigin",
    "NpmOrigin",
    "PluginOrigin",
    "download_path",
    "origin_from_dict",
    "origin_to_dict",
]

_GIT_DIRECTORY_RE = re.compile(r".*/(.*)\.git")


@dataclass(frozen=True, slots=True)
class NpmOrigin:
    name: str
    scope: str | None = None
    version: str | None = None

    def as_dependency(self) -> Dependency:
        return Dependency(self.name, scope=self.scope, version=self.version)


@dataclass(frozen=True, slots=True)
class GitOrigin:
    url: str
    version: str | None = None


type PluginOrigin = NpmOrigin | GitOrigin


def _origin_error(data: object, message: str) -> ParseError:
    return ParseError(kind="origin", value=repr(data), message=message)


def origin_from_dict(data: object) -> Result[PluginOrigin, ParseError]:
    obj = as_str_dict(data)
    if obj is None:
        return Err(_origin_error(data, "origin must be an object"))

    match get_str(obj, "type"):
        case "npm":
            name = get_str(obj, "name")
            if name is None:
                return Err(_origin_error(data, "npm origin without name"))
            scope = get_str(obj, "scope")
            return Ok(NpmOrigin(name, scope=scope, version=get_str(obj, "version")))
        case "git":
            url = get_str(obj, "url")
            if url is None:
                return Err(_origin_error(data, "git origin without url"))
            return Ok(GitOrigin(url, version=get_str(obj, "version")))
        case other:
            return Err(_origin_error(data, f"unsupported plugin origin type: {other}"))


def origin_to_dict(origin: PluginOrigin) -> dict[str, str]:
    match origin:
        case NpmOrigin(name=name, scope=scope, version=version):
            out = {"type": "npm", "name": name}
            if scope:
                out["scope"] = scope
            if version:
                out["version"] = version
            return out
        case GitOrigin(url=url, version=version):
            out = {"type": "git", "url": url}
            if version:
                out["version"] = version
            return out


def download_path(origin: PluginOrigin) -> Result[str, ParseError]:
    """Relative directory a plugin lands in once its sources are fetched.

    npm origins go to node_modules/[@scope/]name; git origins are cloned into
    a directory named after the repository, which requires a pinned version.
    """
    match origin:
        case NpmOrigin(name=name, scope=scope):
            if scope:
                return Ok(str(PurePosixPath("node_modules", f"@{scope}", name)))
            return Ok(str(PurePosixPath("node_modules", name)))
        case GitOrigin(url=url, version=version):
            m = _GIT_DIRECTORY_RE.fullmatch(url)
            if version and m is not None:
                return Ok(m.group(1))
            return Err(
                ParseError(
                    kind="origin",
                    value=url,
                    message="git origin needs a version and a .git url",
                )
            )
