"""Tests for ern.cauldron.model."""

from __future__ import annotations

import pytest

from ern.cauldron.errors import DocumentError
from ern.cauldron.model import BinaryStoreConfig, CauldronDocument
from ern.core.result import Err, Ok
from ern.identity.dependency import Dependency
from ern.identity.descriptor import NativeApplicationDescriptor
from ern.identity.package_path import PackagePath

APP = NativeApplicationDescriptor.from_string("walmart:android:17.7.0")


def _doc() -> CauldronDocument:
    doc = CauldronDocument()
    assert isinstance(doc.add_version(APP), Ok)
    return doc


def _dep(literal: str) -> Dependency:
    return Dependency.from_string(literal)


def _path(literal: str) -> PackagePath:
    return PackagePath.from_string(literal)


def _error(result: object) -> DocumentError:
    assert isinstance(result, Err)
    assert isinstance(result.error, DocumentError)
    return result.error


class TestAddVersion:
    def test_creates_app_and_platform(self) -> None:
        doc = _doc()
        assert doc.has_descriptor(NativeApplicationDescriptor("walmart"))
        assert doc.has_descriptor(NativeApplicationDescriptor("walmart", "android"))
        assert doc.has_descriptor(APP)
        assert not doc.has_descriptor(NativeApplicationDescriptor("walmart", "ios"))
        assert doc.container_version(APP) == Ok("1.0.0")

    def test_duplicate(self) -> None:
        doc = _doc()
        assert _error(doc.add_version(APP)).kind == "exists"

    def test_incomplete_descriptor(self) -> None:
        error = _error(CauldronDocument().add_version(NativeApplicationDescriptor("walmart", "ios")))
        assert error.kind == "incomplete"

    def test_invalid_container_version(self) -> None:
        error = _error(CauldronDocument().add_version(APP, container_version="latest"))
        assert error.kind == "invalid"

    def test_second_platform_shares_app(self) -> None:
        doc = _doc()
        ios = NativeApplicationDescriptor.from_string("walmart:ios:17.7.0")
        assert isinstance(doc.add_version(ios), Ok)
        assert len(doc.apps) == 1
        assert [p.name for p in doc.apps[0].platforms] == ["android", "ios"]


class TestQueries:
    def test_unknown_version(self) -> None:
        doc = _doc()
        missing = NativeApplicationDescriptor.from_string("walmart:android:1.0.0")
        assert _error(doc.native_dependencies(missing)).kind == "not_found"

    def test_descriptors_filtering(self) -> None:
        doc = _doc()
        other = NativeApplicationDescriptor.from_string("walmart:ios:1.0.0")
        doc.add_version(other)
        doc.mark_released(APP)

        assert doc.descriptors() == [APP, other]
        assert doc.descriptors(only_non_released=True) == [other]
        assert doc.descriptors(within=NativeApplicationDescriptor("walmart", "ios")) == [other]
        assert doc.descriptors(within=NativeApplicationDescriptor("target")) == []

    def test_accessors_return_copies(self) -> None:
        doc = _doc()
        doc.add_dependency(APP, _dep("lib@1.0.0"))
        deps = doc.native_dependencies(APP).unwrap()
        deps.clear()
        assert doc.native_dependencies(APP) == Ok([_dep("lib@1.0.0")])


class TestDependencies:
    def test_add_replaces_same_identity(self) -> None:
        """Adding an existing (name, scope) replaces its version instead of duplicating it."""
        doc = _doc()
        doc.add_dependency(APP, _dep("@s/lib@1.0.0"))
        doc.add_dependency(APP, _dep("other@3.0.0"))
        doc.add_dependency(APP, _dep("@s/lib@2.0.0"))

        assert doc.native_dependencies(APP) == Ok([_dep("@s/lib@2.0.0"), _dep("other@3.0.0")])

    def test_scope_is_a_distinct_identity(self) -> None:
        doc = _doc()
        doc.add_dependency(APP, _dep("lib@1.0.0"))
        doc.add_dependency(APP, _dep("@s/lib@1.0.0"))
        assert len(doc.native_dependencies(APP).unwrap()) == 2

    def test_unpinned_refused(self) -> None:
        assert _error(_doc().add_dependency(APP, _dep("lib"))).kind == "invalid"

    def test_update_requires_existing(self) -> None:
        doc = _doc()
        assert _error(doc.update_dependency(APP, _dep("lib@2.0.0"))).kind == "not_found"
        doc.add_dependency(APP, _dep("lib@1.0.0"))
        assert doc.update_dependency(APP, _dep("lib@2.0.0")) == Ok(None)
        assert doc.native_dependencies(APP) == Ok([_dep("lib@2.0.0")])

    def test_remove(self) -> None:
        doc = _doc()
        doc.add_dependency(APP, _dep("lib@1.0.0"))
        assert doc.remove_dependency(APP, _dep("lib")) == Ok(None)
        assert doc.native_dependencies(APP) == Ok([])
        assert _error(doc.remove_dependency(APP, _dep("lib"))).kind == "not_found"

    def test_sync_stops_at_first_error(self) -> None:
        doc = _doc()
        result = doc.sync_native_dependencies(APP, [_dep("a@1.0.0"), _dep("b"), _dep("c@1.0.0")])
        assert _error(result).kind == "invalid"
        assert doc.native_dependencies(APP) == Ok([_dep("a@1.0.0")])


class TestMiniApps:
    def test_add_and_duplicate(self) -> None:
        doc = _doc()
        assert doc.add_miniapp(APP, _path("cart@1.0.0")) == Ok(None)
        assert _error(doc.add_miniapp(APP, _path("cart@2.0.0"))).kind == "exists"

    def test_update(self) -> None:
        doc = _doc()
        doc.add_miniapp(APP, _path("cart@1.0.0"))
        assert doc.update_miniapp(APP, _path("cart@2.0.0")) == Ok(None)
        assert doc.miniapps(APP) == Ok([_path("cart@2.0.0")])
        assert _error(doc.update_miniapp(APP, _path("search@1.0.0"))).kind == "not_found"

    def test_remove(self) -> None:
        doc = _doc()
        doc.add_miniapp(APP, _path("cart@1.0.0"))
        assert doc.remove_miniapp(APP, _path("cart")) == Ok(None)
        assert doc.miniapps(APP) == Ok([])

    def test_sync_keeps_order(self) -> None:
        doc = _doc()
        doc.add_miniapp(APP, _path("a@1.0.0"))
        doc.add_miniapp(APP, _path("b@1.0.0"))
        doc.sync_miniapps(APP, [_path("b@2.0.0"), _path("c@1.0.0")])
        assert doc.miniapps(APP) == Ok([_path("a@1.0.0"), _path("b@2.0.0"), _path("c@1.0.0")])


class TestReleased:
    @pytest.fixture
    def released(self) -> CauldronDocument:
        doc = _doc()
        doc.add_miniapp(APP, _path("cart@1.0.0"))
        doc.add_dependency(APP, _dep("lib@1.0.0"))
        assert doc.mark_released(APP) == Ok(None)
        return doc

    def test_container_frozen(self, released: CauldronDocument) -> None:
        assert _error(released.add_miniapp(APP, _path("search@1.0.0"))).kind == "released"
        assert _error(released.update_miniapp(APP, _path("cart@2.0.0"))).kind == "released"
        assert _error(released.remove_miniapp(APP, _path("cart"))).kind == "released"
        assert _error(released.add_dependency(APP, _dep("lib@2.0.0"))).kind == "released"
        assert _error(released.remove_dependency(APP, _dep("lib"))).kind == "released"
        assert _error(released.set_container_version(APP, "2.0.0")).kind == "released"
        assert released.native_dependencies(APP) == Ok([_dep("lib@1.0.0")])

    def test_metadata_still_editable(self, released: CauldronDocument) -> None:
        store = BinaryStoreConfig(url="https://binaries.example.com")
        assert released.set_binary_store(APP, store) == Ok(None)
        assert released.set_version_config(APP, {"codePush": True}) == Ok(None)
        version = released.require_version(APP).unwrap()
        assert version.binary_store == store
        assert version.config == {"codePush": True}


class TestContainerVersion:
    def test_set(self) -> None:
        doc = _doc()
        assert doc.set_container_version(APP, "1.0.1") == Ok(None)
        assert doc.container_version(APP) == Ok("1.0.1")

    def test_invalid(self) -> None:
        assert _error(_doc().set_container_version(APP, "one")).kind == "invalid"
