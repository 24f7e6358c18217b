"""Tests for ern.resolver.semver."""

from __future__ import annotations

import pytest

from ern.resolver.semver import (
    SemVer,
    bump_version,
    compare_versions,
    parse_version,
    version_key,
)


class TestParseVersion:
    @pytest.mark.parametrize(
        ("literal", "expected"),
        [
            ("1.2.3", SemVer(1, 2, 3)),
            ("v1.2.3", SemVer(1, 2, 3)),
            ("1.2", SemVer(1, 2, 0)),
            ("7", SemVer(7, 0, 0)),
            ("1.0.0-beta.2", SemVer(1, 0, 0, ("beta", "2"))),
            ("1.0.0+build.5", SemVer(1, 0, 0)),
        ],
    )
    def test_valid(self, literal: str, expected: SemVer) -> None:
        assert parse_version(literal) == expected

    @pytest.mark.parametrize("literal", ["", "latest", "1.2.3.4", "1..2", "x1.0.0", "1.0.0-"])
    def test_invalid(self, literal: str) -> None:
        assert parse_version(literal) is None

    def test_str(self) -> None:
        assert str(SemVer(1, 0, 0, ("rc", "1"))) == "1.0.0-rc.1"


class TestOrdering:
    @pytest.mark.parametrize(
        ("lower", "higher"),
        [
            ("1.0.0", "1.0.1"),
            ("1.9.0", "1.10.0"),
            ("1.0.0-alpha", "1.0.0"),
            ("1.0.0-alpha", "1.0.0-alpha.1"),
            ("1.0.0-alpha.2", "1.0.0-alpha.10"),
            ("1.0.0-2", "1.0.0-alpha"),
            ("0.9.9", "v1.0.0"),
        ],
    )
    def test_semver_precedence(self, lower: str, higher: str) -> None:
        assert compare_versions(lower, higher) == -1
        assert compare_versions(higher, lower) == 1

    def test_build_metadata_ignored(self) -> None:
        assert compare_versions("1.0.0+a", "1.0.0+b") == 0

    def test_non_semver_ranks_below_semver(self) -> None:
        assert compare_versions("latest", "0.0.1") == -1
        assert compare_versions("0.0.1", "next") == 1

    def test_non_semver_compare_lexically(self) -> None:
        assert compare_versions("alpha", "beta") == -1
        assert compare_versions("beta", "beta") == 0

    def test_sort_mixed(self) -> None:
        versions = ["2.0.0", "master", "1.0.0", "1.0.0-rc.1", "develop"]
        assert sorted(versions, key=version_key) == [
            "develop",
            "master",
            "1.0.0-rc.1",
            "1.0.0",
            "2.0.0",
        ]

    def test_semver_operators(self) -> None:
        assert SemVer(1, 0, 0) < SemVer(1, 0, 1)
        assert SemVer(2, 0, 0) >= SemVer(2, 0, 0)
        assert SemVer(1, 0, 0, ("rc",)) <= SemVer(1, 0, 0)


class TestBump:
    @pytest.mark.parametrize(
        ("value", "kind", "expected"),
        [
            ("1.2.3", "patch", "1.2.4"),
            ("1.2.3", "minor", "1.3.0"),
            ("1.2.3", "major", "2.0.0"),
            ("1.2.3-rc.1", "patch", "1.2.4"),
            ("v1.0", "patch", "1.0.1"),
        ],
    )
    def test_bump(self, value: str, kind: str, expected: str) -> None:
        assert bump_version(value, kind) == expected  # type: ignore[arg-type]

    def test_bump_invalid(self) -> None:
        assert bump_version("latest") is None
