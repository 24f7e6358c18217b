"""Identity model: dependencies, application descriptors, package paths, origins."""

from .dependency import (
    Dependency,
    DependencyIdentity,
    parse_dependency,
    same_dependency,
    to_canonical_string,
)
from .descriptor import PLATFORMS, NativeApplicationDescriptor, PlatformName, parse_descriptor
from .errors import ParseError
from .origin import GitOrigin, NpmOrigin, PluginOrigin, download_path, origin_from_dict, origin_to_dict
from .package_path import PackagePath, parse_package_path

__all__ = [
    # dependency
    "Dependency",
    "DependencyIdentity",
    "parse_dependency",
    "same_dependency",
    "to_canonical_string",
    # descriptor
    "NativeApplicationDescriptor",
    "PLATFORMS",
    "PlatformName",
    "parse_descriptor",
    # errors
    "ParseError",
    # origin
    "GitOrigin",
    "NpmOrigin",
    "PluginOrigin",
    "download_path",
    "origin_from_dict",
    "origin_to_dict",
    # package path
    "PackagePath",
    "parse_package_path",
]
