"""Tests for the pragmatic version comparator."""

import pytest

from osv_audit.core.versions import (
    compare_versions,
    is_version_greater_or_equal,
    parse_version,
    version_sort_key,
)


class TestParseVersion:
    """Test version string parsing."""

    def test_full_version(self):
        parsed = parse_version("1.2.3")
        assert (parsed.major, parsed.minor, parsed.patch) == (1, 2, 3)
        assert parsed.prerelease is None

    def test_missing_components_default_to_zero(self):
        parsed = parse_version("1")
        assert parsed.release == (1, 0, 0)

    def test_leading_v_is_stripped_but_original_kept(self):
        parsed = parse_version("v2.5")
        assert parsed.release == (2, 5, 0)
        assert parsed.original == "v2.5"

    @pytest.mark.parametrize("version,prerelease", [
        ("1.0.0-beta.1", "beta.1"),
        ("1.0.0.rc1", "rc1"),
        ("2.0-alpha", "alpha"),
    ])
    def test_prerelease(self, version, prerelease):
        assert parse_version(version).prerelease == prerelease

    @pytest.mark.parametrize("version", ["", "latest", "*", "^1.2.3", "x.y.z"])
    def test_unparsable(self, version):
        assert parse_version(version) is None


class TestCompareVersions:
    """Test version ordering."""

    def test_numeric_components(self):
        assert compare_versions("1.10.0", "1.9.9") > 0
        assert compare_versions("2.0.0", "10.0.0") < 0
        assert compare_versions("1.2.3", "1.2.4") < 0

    def test_equal_versions(self):
        assert compare_versions("1.2.3", "1.2.3") == 0
        assert compare_versions("1.2", "1.2.0") == 0
        assert compare_versions("v1.2.3", "1.2.3") == 0

    def test_prerelease_sorts_below_release(self):
        assert compare_versions("1.2.3-beta", "1.2.3") < 0
        assert compare_versions("1.2.3", "1.2.3-beta") > 0

    def test_prerelease_tags_compare_as_strings(self):
        assert compare_versions("1.0.0-alpha", "1.0.0-beta") < 0
        assert compare_versions("1.0.0-rc.2", "1.0.0-rc.10") > 0

    def test_unparsable_falls_back_to_string_order(self):
        assert compare_versions("abc", "abd") < 0
        assert compare_versions("1.0.0", "latest") < 0
        assert compare_versions("same", "same") == 0

    @pytest.mark.parametrize("a,b", [
        ("1.0.0", "2.0.0"),
        ("1.2.3-beta", "1.2.3"),
        ("0.9", "0.10"),
        ("1.0.0-alpha", "1.0.0-beta"),
    ])
    def test_antisymmetric(self, a, b):
        assert compare_versions(a, b) == -compare_versions(b, a)

    def test_greater_or_equal(self):
        assert is_version_greater_or_equal("4.17.21", "4.17.21")
        assert is_version_greater_or_equal("4.17.21", "4.17.20")
        assert not is_version_greater_or_equal("4.17.20", "4.17.21")

    def test_sort_key(self):
        versions = ["1.10.0", "1.2.0", "1.2.0-rc1", "0.9"]
        assert sorted(versions, key=version_sort_key) == ["0.9", "1.2.0-rc1", "1.2.0", "1.10.0"]
