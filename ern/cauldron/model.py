"""In-memory Cauldron document.

The tree mirrors the descriptor hierarchy:

    CauldronDocument
      NativeApplication (name)
        Platform (android | ios)
          AppVersion (version: container version, MiniApps, native deps, ...)

Accessors are pure. Mutators return Result[..., DocumentError] and keep the
store invariants:
- a (name, scope) dependency appears at most once per version
- a MiniApp base path appears at most once per version
- a released version's MiniApps, dependencies and container version are frozen;
  only metadata (binary store, config overrides) can still change
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from ern.cauldron.errors import DocumentError
from ern.core.result import Err, Ok, Result
from ern.identity.dependency import Dependency
from ern.identity.descriptor import NativeApplicationDescriptor, PlatformName
from ern.identity.package_path import PackagePath
from ern.resolver.semver import parse_version

__all__ = [
    "AppVersion",
    "BinaryStoreConfig",
    "CURRENT_FORMAT",
    "CauldronDocument",
    "DEFAULT_CONTAINER_VERSION",
    "NativeApplication",
    "Platform",
]

CURRENT_FORMAT = 3
DEFAULT_CONTAINER_VERSION = "1.0.0"


@dataclass(frozen=True, slots=True)
class BinaryStoreConfig:
    """Where binaries of a native application version are stored."""

    url: str


@dataclass(slots=True)
class AppVersion:
    name: str
    container_version: str = DEFAULT_CONTAINER_VERSION
    miniapps: list[PackagePath] = field(default_factory=list)
    native_deps: list[Dependency] = field(default_factory=list)
    released: bool = False
    binary_store: BinaryStoreConfig | None = None
    config: dict[str, object] | None = None

    def find_miniapp(self, miniapp: PackagePath) -> int | None:
        for i, existing in enumerate(self.miniapps):
            if existing.same_identity(miniapp):
                return i
        return None

    def find_dependency(self, dep: Dependency) -> int | None:
        for i, existing in enumerate(self.native_deps):
            if existing.identity == dep.identity:
                return i
        return None


@dataclass(slots=True)
class Platform:
    name: PlatformName
    versions: list[AppVersion] = field(default_factory=list)

    def get_version(self, name: str) -> AppVersion | None:
        return next((v for v in self.versions if v.name == name), None)


@dataclass(slots=True)
class NativeApplication:
    name: str
    platforms: list[Platform] = field(default_factory=list)

    def get_platform(self, name: str) -> Platform | None:
        return next((p for p in self.platforms if p.name == name), None)


def _not_found(descriptor: NativeApplicationDescriptor) -> DocumentError:
    return DocumentError(
        kind="not_found",
        message=f"{descriptor} does not exist in the Cauldron",
    )


@dataclass(slots=True)
class CauldronDocument:
    format_version: int = CURRENT_FORMAT
    apps: list[NativeApplication] = field(default_factory=list)
    config: dict[str, object] = field(default_factory=dict)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_app(self, name: str) -> NativeApplication | None:
        return next((a for a in self.apps if a.name == name), None)

    def get_platform(self, descriptor: NativeApplicationDescriptor) -> Platform | None:
        app = self.get_app(descriptor.name)
        if app is None or descriptor.platform is None:
            return None
        return app.get_platform(descriptor.platform)

    def get_version(self, descriptor: NativeApplicationDescriptor) -> AppVersion | None:
        platform = self.get_platform(descriptor)
        if platform is None or descriptor.version is None:
            return None
        return platform.get_version(descriptor.version)

    def has_descriptor(self, descriptor: NativeApplicationDescriptor) -> bool:
        """True if the application (or platform, or version) the descriptor names exists."""
        if descriptor.platform is None:
            return self.get_app(descriptor.name) is not None
        if descriptor.version is None:
            return self.get_platform(descriptor) is not None
        return self.get_version(descriptor) is not None

    def descriptors(
        self,
        *,
        only_non_released: bool = False,
        within: NativeApplicationDescriptor | None = None,
    ) -> list[NativeApplicationDescriptor]:
        """Complete descriptors of every version, optionally under a partial descriptor."""
        out: list[NativeApplicationDescriptor] = []
        for app in self.apps:
            for platform in app.platforms:
                for version in platform.versions:
                    if only_non_released and version.released:
                        continue
                    d = NativeApplicationDescriptor(app.name, platform.name, version.name)
                    if within is None or within.contains(d):
                        out.append(d)
        return out

    def require_version(
        self, descriptor: NativeApplicationDescriptor
    ) -> Result[AppVersion, DocumentError]:
        if not descriptor.is_complete:
            return Err(
                DocumentError(
                    kind="incomplete",
                    message=f"{descriptor} is not a complete descriptor",
                    hint="Use name:platform:version",
                )
            )
        version = self.get_version(descriptor)
        if version is None:
            return Err(_not_found(descriptor))
        return Ok(version)

    def native_dependencies(
        self, descriptor: NativeApplicationDescriptor
    ) -> Result[list[Dependency], DocumentError]:
        return self.require_version(descriptor).map(lambda v: list(v.native_deps))

    def miniapps(
        self, descriptor: NativeApplicationDescriptor
    ) -> Result[list[PackagePath], DocumentError]:
        return self.require_version(descriptor).map(lambda v: list(v.miniapps))

    def container_version(self, descriptor: NativeApplicationDescriptor) -> Result[str, DocumentError]:
        return self.require_version(descriptor).map(lambda v: v.container_version)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def _require_unreleased(
        self, descriptor: NativeApplicationDescriptor
    ) -> Result[AppVersion, DocumentError]:
        result = self.require_version(descriptor)
        if isinstance(result, Ok) and result.value.released:
            return Err(
                DocumentError(
                    kind="released",
                    message=f"{descriptor} is released and can no longer be modified",
                    hint="Create a new native application version instead",
                )
            )
        return result

    def add_version(
        self,
        descriptor: NativeApplicationDescriptor,
        *,
        container_version: str = DEFAULT_CONTAINER_VERSION,
    ) -> Result[AppVersion, DocumentError]:
        """Create a native application version, and its app/platform if needed."""
        if not descriptor.is_complete:
            return Err(
                DocumentError(
                    kind="incomplete",
                    message=f"{descriptor} is not a complete descriptor",
                    hint="Use name:platform:version",
                )
            )
        if parse_version(container_version) is None:
            return Err(
                DocumentError(
                    kind="invalid",
                    message=f"invalid container version: {container_version}",
                )
            )
        if self.get_version(descriptor) is not None:
            return Err(
                DocumentError(kind="exists", message=f"{descriptor} already exists in the Cauldron")
            )

        assert descriptor.platform is not None and descriptor.version is not None
        app = self.get_app(descriptor.name)
        if app is None:
            app = NativeApplication(descriptor.name)
            self.apps.append(app)
        platform = app.get_platform(descriptor.platform)
        if platform is None:
            platform = Platform(descriptor.platform)
            app.platforms.append(platform)

        version = AppVersion(descriptor.version, container_version=container_version)
        platform.versions.append(version)
        return Ok(version)

    def add_miniapp(
        self, descriptor: NativeApplicationDescriptor, miniapp: PackagePath
    ) -> Result[None, DocumentError]:
        result = self._require_unreleased(descriptor)
        if isinstance(result, Err):
            return result
        version = result.value
        if version.find_miniapp(miniapp) is not None:
            return Err(
                DocumentError(
                    kind="exists",
                    message=f"{miniapp.base_path} is already in the container of {descriptor}",
                    hint="Update the MiniApp instead",
                )
            )
        version.miniapps.append(miniapp)
        return Ok(None)

    def update_miniapp(
        self, descriptor: NativeApplicationDescriptor, miniapp: PackagePath
    ) -> Result[None, DocumentError]:
        result = self._require_unreleased(descriptor)
        if isinstance(result, Err):
            return result
        version = result.value
        index = version.find_miniapp(miniapp)
        if index is None:
            return Err(
                DocumentError(
                    kind="not_found",
                    message=f"{miniapp.base_path} is not in the container of {descriptor}",
                )
            )
        version.miniapps[index] = miniapp
        return Ok(None)

    def remove_miniapp(
        self, descriptor: NativeApplicationDescriptor, miniapp: PackagePath
    ) -> Result[None, DocumentError]:
        result = self._require_unreleased(descriptor)
        if isinstance(result, Err):
            return result
        version = result.value
        index = version.find_miniapp(miniapp)
        if index is None:
            return Err(
                DocumentError(
                    kind="not_found",
                    message=f"{miniapp.base_path} is not in the container of {descriptor}",
                )
            )
        del version.miniapps[index]
        return Ok(None)

    def sync_miniapps(
        self, descriptor: NativeApplicationDescriptor, miniapps: Iterable[PackagePath]
    ) -> Result[None, DocumentError]:
        """Add each MiniApp, or replace the entry with the same base path."""
        result = self._require_unreleased(descriptor)
        if isinstance(result, Err):
            return result
        version = result.value
        for miniapp in miniapps:
            index = version.find_miniapp(miniapp)
            if index is None:
                version.miniapps.append(miniapp)
            else:
                version.miniapps[index] = miniapp
        return Ok(None)

    def add_dependency(
        self, descriptor: NativeApplicationDescriptor, dep: Dependency
    ) -> Result[None, DocumentError]:
        """Add a native dependency; an existing (name, scope) entry gets the new version."""
        if not dep.version:
            return Err(
                DocumentError(
                    kind="invalid",
                    message=f"native dependency {dep} has no version",
                    hint="Dependencies stored in the Cauldron must be pinned",
                )
            )
        result = self._require_unreleased(descriptor)
        if isinstance(result, Err):
            return result
        version = result.value
        index = version.find_dependency(dep)
        if index is None:
            version.native_deps.append(dep)
        else:
            version.native_deps[index] = dep
        return Ok(None)

    def update_dependency(
        self, descriptor: NativeApplicationDescriptor, dep: Dependency
    ) -> Result[None, DocumentError]:
        result = self._require_unreleased(descriptor)
        if isinstance(result, Err):
            return result
        if result.value.find_dependency(dep) is None:
            return Err(
                DocumentError(
                    kind="not_found",
                    message=f"{dep.base} is not a native dependency of {descriptor}",
                )
            )
        return self.add_dependency(descriptor, dep)

    def remove_dependency(
        self, descriptor: NativeApplicationDescriptor, dep: Dependency
    ) -> Result[None, DocumentError]:
        result = self._require_unreleased(descriptor)
        if isinstance(result, Err):
            return result
        version = result.value
        index = version.find_dependency(dep)
        if index is None:
            return Err(
                DocumentError(
                    kind="not_found",
                    message=f"{dep.base} is not a native dependency of {descriptor}",
                )
            )
        del version.native_deps[index]
        return Ok(None)

    def sync_native_dependencies(
        self, descriptor: NativeApplicationDescriptor, deps: Iterable[Dependency]
    ) -> Result[None, DocumentError]:
        for dep in deps:
            result = self.add_dependency(descriptor, dep)
            if isinstance(result, Err):
                return result
        return Ok(None)

    def set_container_version(
        self, descriptor: NativeApplicationDescriptor, container_version: str
    ) -> Result[None, DocumentError]:
        if parse_version(container_version) is None:
            return Err(
                DocumentError(
                    kind="invalid",
                    message=f"invalid container version: {container_version}",
                )
            )
        result = self._require_unreleased(descriptor)
        if isinstance(result, Err):
            return result
        result.value.container_version = container_version
        return Ok(None)

    def mark_released(self, descriptor: NativeApplicationDescriptor) -> Result[None, DocumentError]:
        result = self.require_version(descriptor)
        if isinstance(result, Err):
            return result
        result.value.released = True
        return Ok(None)

    def set_binary_store(
        self, descriptor: NativeApplicationDescriptor, binary_store: BinaryStoreConfig
    ) -> Result[None, DocumentError]:
        result = self.require_version(descriptor)
        if isinstance(result, Err):
            return result
        result.value.binary_store = binary_store
        return Ok(None)

    def set_version_config(
        self, descriptor: NativeApplicationDescriptor, config: dict[str, object]
    ) -> Result[None, DocumentError]:
        result = self.require_version(descriptor)
        if isinstance(result, Err):
            return result
        result.value.config = dict(config)
        return Ok(None)
