"""Tests for the fix suggestion engine."""

import json

import pytest

from osv_audit.core.parsers import Dependency
from osv_audit.core.suggest import (
    ACTIONS,
    INVESTIGATE,
    FixSuggestion,
    FixSuggestionEngine,
    VulnerabilityRecord,
    VulnerabilityResult,
    find_minimum_safe_version,
    priority_from_severity,
)


def _result(name, version, *vulns, ecosystem="npm"):
    return VulnerabilityResult(
        dependency=Dependency(ecosystem, name, version),
        vulnerabilities=list(vulns),
    )


@pytest.fixture
def engine():
    return FixSuggestionEngine()


class TestFindMinimumSafeVersion:
    """Test upgrade target selection."""

    def test_smallest_version_above_current(self):
        assert find_minimum_safe_version("1.0.0", ["3.0.0", "1.2.0", "1.1.0"]) == "1.1.0"

    def test_equal_version_is_not_an_upgrade(self):
        assert find_minimum_safe_version("1.1.0", ["1.1.0", "1.2.0"]) == "1.2.0"

    def test_stale_fix_list_returns_highest(self):
        assert find_minimum_safe_version("5.0.0", ["1.0.0", "2.0.0"]) == "2.0.0"

    def test_unparsable_current_returns_smallest(self):
        assert find_minimum_safe_version("unknown", ["2.0.0", "1.5.0"]) == "1.5.0"
        assert find_minimum_safe_version("*", ["2.0.0", "1.5.0"]) == "1.5.0"

    def test_no_fixed_versions(self):
        assert find_minimum_safe_version("1.0.0", []) is None


class TestPriorityFromSeverity:
    """Test severity label to priority tier mapping."""

    @pytest.mark.parametrize("severity,priority", [
        ("CRITICAL", "critical"),
        ("HIGH", "high"),
        ("MEDIUM", "medium"),
        ("LOW", "low"),
        ("NONE", "low"),
        ("UNKNOWN", "low"),
        (None, "low"),
    ])
    def test_mapping(self, severity, priority):
        assert priority_from_severity(severity) == priority


class TestFixSuggestionEngine:
    """Test suggestion generation and ranking."""

    def test_lodash_upgrade(self, engine):
        result = _result(
            "lodash",
            "4.17.20",
            VulnerabilityRecord(id="GHSA-35jh-r3h4-6jhm", severity="HIGH", fixed_versions=["4.17.21"]),
        )
        suggestion = engine.suggest([result]).suggestions[0]

        assert suggestion.package == "lodash"
        assert suggestion.current_version == "4.17.20"
        assert suggestion.suggested_version == "4.17.21"
        assert suggestion.action == "upgrade"
        assert suggestion.priority == "high"
        assert suggestion.notes == ["Upgrade from 4.17.20 to 4.17.21"]

    def test_entries_without_vulnerabilities_are_skipped(self, engine):
        report = engine.suggest([_result("safe", "1.0.0")])

        assert report.suggestions == []
        assert report.to_dict()["summary"] == {
            "total": 0,
            "by_priority": {"critical": 0, "high": 0, "medium": 0, "low": 0},
        }

    def test_ordering_by_priority_is_stable(self, engine):
        results = [
            _result("a", "1.0.0", VulnerabilityRecord(id="V-A", severity="LOW")),
            _result("b", "1.0.0", VulnerabilityRecord(id="V-B", severity="CRITICAL")),
            _result("c", "1.0.0", VulnerabilityRecord(id="V-C", severity="MEDIUM")),
            _result("d", "1.0.0", VulnerabilityRecord(id="V-D")),
        ]
        report = engine.suggest(results)

        assert [s.package for s in report.suggestions] == ["b", "c", "a", "d"]
        assert [s.priority for s in report.suggestions] == ["critical", "medium", "low", "low"]
        assert report.by_priority == {"critical": 1, "high": 0, "medium": 1, "low": 2}

    def test_worst_severity_wins(self, engine):
        result = _result(
            "pkg",
            "1.0.0",
            VulnerabilityRecord(id="V-1", severity="LOW", fixed_versions=["1.0.1"]),
            VulnerabilityRecord(id="V-2", severity_score=9.1, fixed_versions=["1.2.0", "1.0.1"]),
        )
        suggestion = engine.suggest([result]).suggestions[0]

        assert suggestion.severity == "CRITICAL"
        assert suggestion.priority == "critical"
        assert suggestion.suggested_version == "1.0.1"
        assert suggestion.vulnerabilities_fixed == ["V-1", "V-2"]

    def test_unknown_severity(self, engine):
        result = _result("pkg", "1.0.0", VulnerabilityRecord(id="V-1"))
        suggestion = engine.suggest([result]).suggestions[0]

        assert suggestion.severity == "UNKNOWN"
        assert suggestion.priority == "low"

    def test_no_fix_available(self, engine):
        result = _result("pkg", "1.0.0", VulnerabilityRecord(id="V-1", severity="MEDIUM"))
        suggestion = engine.suggest([result]).suggestions[0]

        assert suggestion.suggested_version is None
        assert suggestion.action == "review"
        assert suggestion.notes == [
            "No fixed version available - consider alternative packages or manual mitigation"
        ]

    def test_major_upgrade_warning_and_cves(self, engine):
        result = _result(
            "pkg",
            "1.4.0",
            VulnerabilityRecord(
                id="GHSA-1", severity="HIGH", fixed_versions=["2.0.0"],
                aliases=["CVE-2023-0001", "PYSEC-2023-1"],
            ),
            VulnerabilityRecord(id="GHSA-2", severity="LOW", aliases=["CVE-2023-0001", "CVE-2023-0002"]),
        )
        notes = engine.suggest([result]).suggestions[0].notes

        assert notes == [
            "Upgrade from 1.4.0 to 2.0.0",
            "Warning: This is a major version upgrade - review changelog for breaking changes",
            "Related CVEs: CVE-2023-0001, CVE-2023-0002",
        ]

    def test_missing_version_reported_as_unknown(self, engine):
        result = _result("pkg", None, VulnerabilityRecord(id="V-1", fixed_versions=["2.0.0", "1.0.0"]))
        suggestion = engine.suggest([result]).suggestions[0]

        assert suggestion.current_version == "unknown"
        assert suggestion.suggested_version == "1.0.0"

    def test_idempotent(self, engine):
        results = [
            _result("a", "1.0.0", VulnerabilityRecord(id="V-A", severity="HIGH", fixed_versions=["1.1.0"])),
            _result("b", "2.0.0", VulnerabilityRecord(id="V-B", severity="LOW", aliases=["CVE-1"])),
        ]
        first = json.dumps(engine.suggest(results).to_dict(), sort_keys=True)
        second = json.dumps(engine.suggest(results).to_dict(), sort_keys=True)
        assert first == second

    def test_investigate_is_valid_but_never_emitted(self, engine):
        """investigate is accepted on the model but no input path produces it."""
        assert INVESTIGATE in ACTIONS
        FixSuggestion(
            package="a", ecosystem="npm", current_version="1.0.0", suggested_version=None,
            vulnerabilities_fixed=["V"], severity="LOW", priority="low", action=INVESTIGATE,
        )

        results = [
            _result("a", "1.0.0", VulnerabilityRecord(id="V-A", fixed_versions=["1.1.0"])),
            _result("b", None, VulnerabilityRecord(id="V-B")),
        ]
        assert {s.action for s in engine.suggest(results).suggestions} == {"upgrade", "review"}

    def test_invalid_priority_rejected(self):
        with pytest.raises(ValueError):
            FixSuggestion(
                package="a", ecosystem="npm", current_version="1", suggested_version=None,
                vulnerabilities_fixed=[], severity="LOW", priority="urgent", action="review",
            )


class TestVulnerabilityRecord:
    """Test record conversion."""

    def test_from_dict_tolerates_missing_fields(self):
        record = VulnerabilityRecord.from_dict({"id": "GHSA-x"})

        assert record.severity is None
        assert record.severity_score is None
        assert record.fixed_versions == []

    def test_resolved_severity_falls_back_to_score(self):
        assert VulnerabilityRecord(id="V", severity_score=7.5).resolved_severity == "HIGH"
        assert VulnerabilityRecord(id="V", severity="LOW", severity_score=9.8).resolved_severity == "LOW"

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError):
            VulnerabilityRecord(id="")
