"""Persisted format of the Cauldron document and its migrations.

The document lives in a single `cauldron.json` at the root of the working
copy. Its `schemaVersion` tag selects the chain of migration steps applied on
load; documents written by this module always carry CURRENT_FORMAT, so the
stored tag never goes down.

Format history:
    1  untagged. Versions hold `miniApps.container`, `nativeDeps`, `isReleased`
       and a string `binaryStore`.
    2  MiniApps and native deps move under `container`; `containerVersion` added.
    3  `isReleased` -> `released`; `binaryStore` becomes `{"url": ...}`.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ern.cauldron.errors import SchemaError, StorageError
from ern.cauldron.model import (
    CURRENT_FORMAT,
    DEFAULT_CONTAINER_VERSION,
    AppVersion,
    BinaryStoreConfig,
    CauldronDocument,
    NativeApplication,
    Platform,
)
from ern.core.result import Err, Ok, Result
from ern.core.structured import (
    StrDict,
    as_obj_list,
    as_str_dict,
    get_bool,
    get_int,
    get_list,
    get_str,
    get_table,
)
from ern.identity.dependency import Dependency, parse_dependency
from ern.identity.descriptor import PLATFORMS
from ern.identity.package_path import PackagePath, parse_package_path
from ern.platform.files import atomic_write_text

__all__ = [
    "DOCUMENT_FILE",
    "FORMAT_KEY",
    "MigrationStep",
    "document_from_dict",
    "document_to_dict",
    "load_document",
    "migrate",
    "save_document",
]

DOCUMENT_FILE = "cauldron.json"
FORMAT_KEY = "schemaVersion"
OLDEST_FORMAT = 1

type Transform = Callable[[StrDict], StrDict]


@dataclass(frozen=True, slots=True)
class MigrationStep:
    from_format: int
    to_format: int
    apply: Transform


_STEPS: dict[int, MigrationStep] = {}


def _step(from_format: int, to_format: int) -> Callable[[Transform], Transform]:
    """Register a transform upgrading documents from one format to the next."""

    def register(fn: Transform) -> Transform:
        _STEPS[from_format] = MigrationStep(from_format, to_format, fn)
        return fn

    return register


def _each_version(data: StrDict) -> list[StrDict]:
    versions: list[StrDict] = []
    for app_obj in get_list(data, "nativeApps") or []:
        app = as_str_dict(app_obj) or {}
        for platform_obj in get_list(app, "platforms") or []:
            platform = as_str_dict(platform_obj) or {}
            for version_obj in get_list(platform, "versions") or []:
                version = as_str_dict(version_obj)
                if version is not None:
                    versions.append(version)
    return versions


@_step(1, 2)
def _container_section(data: StrDict) -> StrDict:
    for version in _each_version(data):
        miniapps = get_table(version, "miniApps") or {}
        version["container"] = {
            "miniApps": get_list(miniapps, "container") or [],
            "nativeDeps": get_list(version, "nativeDeps") or [],
        }
        version.pop("miniApps", None)
        version.pop("nativeDeps", None)
        version.setdefault("containerVersion", DEFAULT_CONTAINER_VERSION)
    return data


@_step(2, 3)
def _released_flag_and_binary_store(data: StrDict) -> StrDict:
    for version in _each_version(data):
        if "isReleased" in version:
            version["released"] = version.pop("isReleased")
        url = version.get("binaryStore")
        if isinstance(url, str):
            version["binaryStore"] = {"url": url}
    return data


def migrate(raw: StrDict) -> Result[StrDict, SchemaError]:
    """Bring a raw document up to CURRENT_FORMAT.

    A current document comes back unchanged, so migrating twice is the same
    as migrating once. Tags newer than CURRENT_FORMAT are refused.
    """
    tag_obj = raw.get(FORMAT_KEY)
    if tag_obj is None:
        tag = OLDEST_FORMAT
    else:
        parsed = get_int(raw, FORMAT_KEY)
        if parsed is None:
            return Err(SchemaError(message=f"invalid {FORMAT_KEY}: {tag_obj!r}"))
        tag = parsed

    if tag > CURRENT_FORMAT:
        return Err(
            SchemaError(
                message=f"Cauldron format {tag} is newer than the supported format {CURRENT_FORMAT}",
                found=tag,
                supported=CURRENT_FORMAT,
                hint="Upgrade ern to use this Cauldron",
            )
        )
    if tag < OLDEST_FORMAT:
        return Err(
            SchemaError(message=f"unknown Cauldron format {tag}", found=tag, supported=CURRENT_FORMAT)
        )

    data = copy.deepcopy(raw)
    while tag < CURRENT_FORMAT:
        step = _STEPS.get(tag)
        if step is None:
            return Err(
                SchemaError(
                    message=f"no migration from Cauldron format {tag}",
                    found=tag,
                    supported=CURRENT_FORMAT,
                )
            )
        data = step.apply(data)
        tag = step.to_format
        data[FORMAT_KEY] = tag

    return Ok(data)


# -----------------------------------------------------------------------------
# dict <-> document
# -----------------------------------------------------------------------------


def _parse_dependencies(items: list[object], where: str) -> Result[list[Dependency], SchemaError]:
    deps: list[Dependency] = []
    for i, item in enumerate(items):
        if not isinstance(item, str):
            return Err(SchemaError(message=f"{where}: nativeDeps[{i}] is not a string"))
        match parse_dependency(item):
            case Ok(dep):
                deps.append(dep)
            case Err(error):
                return Err(SchemaError(message=f"{where}: {error.pretty()}"))
    return Ok(deps)


def _parse_miniapps(items: list[object], where: str) -> Result[list[PackagePath], SchemaError]:
    miniapps: list[PackagePath] = []
    for i, item in enumerate(items):
        if not isinstance(item, str):
            return Err(SchemaError(message=f"{where}: miniApps[{i}] is not a string"))
        match parse_package_path(item):
            case Ok(path):
                miniapps.append(path)
            case Err(error):
                return Err(SchemaError(message=f"{where}: {error.pretty()}"))
    return Ok(miniapps)


def _version_from_dict(data: StrDict, where: str) -> Result[AppVersion, SchemaError]:
    name = get_str(data, "name")
    if name is None:
        return Err(SchemaError(message=f"{where}: version without name"))
    where = f"{where}:{name}"

    container = get_table(data, "container") or {}
    miniapps = _parse_miniapps(get_list(container, "miniApps") or [], where)
    if isinstance(miniapps, Err):
        return miniapps
    deps = _parse_dependencies(get_list(container, "nativeDeps") or [], where)
    if isinstance(deps, Err):
        return deps

    binary_store: BinaryStoreConfig | None = None
    store = get_table(data, "binaryStore")
    if store is not None:
        url = get_str(store, "url")
        if url is None:
            return Err(SchemaError(message=f"{where}: binaryStore without url"))
        binary_store = BinaryStoreConfig(url=url)

    return Ok(
        AppVersion(
            name=name,
            container_version=get_str(data, "containerVersion") or DEFAULT_CONTAINER_VERSION,
            miniapps=miniapps.value,
            native_deps=deps.value,
            released=bool(get_bool(data, "released")),
            binary_store=binary_store,
            config=get_table(data, "config"),
        )
    )


def document_from_dict(data: StrDict) -> Result[CauldronDocument, SchemaError]:
    """Build a document from a dict already at CURRENT_FORMAT."""
    if get_int(data, FORMAT_KEY) != CURRENT_FORMAT:
        return Err(
            SchemaError(
                message=f"expected Cauldron format {CURRENT_FORMAT}",
                found=get_int(data, FORMAT_KEY),
                supported=CURRENT_FORMAT,
            )
        )

    apps: list[NativeApplication] = []
    for app_obj in get_list(data, "nativeApps") or []:
        app_data = as_str_dict(app_obj)
        app_name = get_str(app_data, "name") if app_data is not None else None
        if app_data is None or app_name is None:
            return Err(SchemaError(message="native application without name"))

        app = NativeApplication(app_name)
        for platform_obj in get_list(app_data, "platforms") or []:
            platform_data = as_str_dict(platform_obj) or {}
            platform_name = get_str(platform_data, "name")
            if platform_name not in PLATFORMS:
                return Err(SchemaError(message=f"{app_name}: unsupported platform {platform_name!r}"))

            platform = Platform(platform_name)  # type: ignore[arg-type]
            for version_obj in as_obj_list(platform_data.get("versions")) or []:
                version_data = as_str_dict(version_obj)
                if version_data is None:
                    return Err(SchemaError(message=f"{app_name}:{platform_name}: invalid version entry"))
                version = _version_from_dict(version_data, f"{app_name}:{platform_name}")
                if isinstance(version, Err):
                    return version
                platform.versions.append(version.value)
            app.platforms.append(platform)
        apps.append(app)

    return Ok(
        CauldronDocument(
            format_version=CURRENT_FORMAT,
            apps=apps,
            config=get_table(data, "config") or {},
        )
    )


def _version_to_dict(version: AppVersion) -> StrDict:
    out: StrDict = {
        "name": version.name,
        "released": version.released,
        "containerVersion": version.container_version,
        "container": {
            "miniApps": [str(m) for m in version.miniapps],
            "nativeDeps": [str(d) for d in version.native_deps],
        },
    }
    if version.binary_store is not None:
        out["binaryStore"] = {"url": version.binary_store.url}
    if version.config is not None:
        out["config"] = version.config
    return out


def document_to_dict(doc: CauldronDocument) -> StrDict:
    return {
        FORMAT_KEY: max(doc.format_version, CURRENT_FORMAT),
        "nativeApps": [
            {
                "name": app.name,
                "platforms": [
                    {
                        "name": platform.name,
                        "versions": [_version_to_dict(v) for v in platform.versions],
                    }
                    for platform in app.platforms
                ],
            }
            for app in doc.apps
        ],
        "config": doc.config,
    }


# -----------------------------------------------------------------------------
# Files
# -----------------------------------------------------------------------------


def load_document(path: Path) -> Result[CauldronDocument, SchemaError | StorageError]:
    """Read, migrate and parse a document. A missing file is an empty Cauldron."""
    if not path.exists():
        return Ok(CauldronDocument())

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(StorageError(message=f"failed to read Cauldron document: {e}", path=path))

    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(SchemaError(message=f"invalid JSON in Cauldron document: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(SchemaError(message="Cauldron document root must be a JSON object"))

    migrated = migrate(data)
    if isinstance(migrated, Err):
        return migrated
    return document_from_dict(migrated.value)


def save_document(path: Path, doc: CauldronDocument) -> Result[None, StorageError]:
    payload = document_to_dict(doc)
    try:
        atomic_write_text(path, json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        return Err(StorageError(message=f"failed to write Cauldron document: {e}", path=path))
    return Ok(None)
