"""Tests for the envelope-returning tool operations."""

import json
from unittest.mock import AsyncMock

import pytest

from osv_audit.core.parsers import Dependency
from osv_audit.core.suggest import VulnerabilityRecord, VulnerabilityResult
from osv_audit.osv.client import OSVRateLimitError, OSVTimeoutError, OSVUpstreamError
from osv_audit.tools import osv_query, parse_dependencies, suggest_fixes


class TestParseDependencies:
    """Test the parse_dependencies tool."""

    def test_package_lock(self):
        text = '{"packages":{"":{"name":"test","version":"1.0.0"},"node_modules/lodash":{"version":"4.17.21"}}}'
        response = parse_dependencies(text, "package-lock")

        assert response["ok"] is True
        assert response["data"] == {
            "dependencies": [{"ecosystem": "npm", "name": "lodash", "version": "4.17.21"}],
            "count": 1,
        }
        assert response["meta"]["source"] == "parsed from package-lock"
        assert response["meta"]["warnings"] == []
        assert response["meta"]["retrieved_at"].endswith("Z")

    def test_requirements(self):
        response = parse_dependencies("requests==2.31.0\nflask>=2.0.0\n", "requirements")

        deps = response["data"]["dependencies"]
        assert [d["name"] for d in deps] == ["requests", "flask"]
        assert {d["ecosystem"] for d in deps} == {"PyPI"}

    @pytest.mark.parametrize("text", ["", "   \n", None])
    def test_empty_text(self, text):
        response = parse_dependencies(text, "requirements")

        assert response["ok"] is False
        assert response["error"]["code"] == "INVALID_INPUT"
        assert "retrieved_at" in response["meta"]

    def test_unsupported_type(self):
        response = parse_dependencies("x==1\n", "Gemfile.lock")

        assert response["error"]["code"] == "INVALID_INPUT"
        assert "cargo-lock" in response["error"]["details"]["supported_types"]

    def test_malformed_structured_input(self):
        response = parse_dependencies("{broken", "package-lock")

        assert response["error"]["code"] == "PARSE_ERROR"
        assert "package-lock" in response["error"]["message"]

    def test_no_dependencies_warning(self):
        response = parse_dependencies("# only a comment\n", "requirements")

        assert response["ok"] is True
        assert response["data"]["count"] == 0
        assert response["meta"]["warnings"] == ["No dependencies found in manifest"]


class TestSuggestFixes:
    """Test the suggest_fixes tool."""

    def test_lodash_example(self):
        response = suggest_fixes([
            {
                "dependency": {"ecosystem": "npm", "name": "lodash", "version": "4.17.20"},
                "vulnerabilities": [
                    {"id": "GHSA-35jh-r3h4-6jhm", "severity": "HIGH", "fixed_versions": ["4.17.21"]}
                ],
            }
        ])

        assert response["ok"] is True
        suggestion = response["data"]["suggestions"][0]
        assert suggestion["package"] == "lodash"
        assert suggestion["current_version"] == "4.17.20"
        assert suggestion["suggested_version"] == "4.17.21"
        assert suggestion["action"] == "upgrade"
        assert suggestion["priority"] == "high"
        assert response["data"]["summary"]["by_priority"]["high"] == 1

    def test_empty_list(self):
        response = suggest_fixes([])

        assert response["ok"] is True
        assert response["data"] == {
            "suggestions": [],
            "summary": {"total": 0, "by_priority": {"critical": 0, "high": 0, "medium": 0, "low": 0}},
        }
        assert response["meta"]["warnings"] == ["No vulnerabilities found - no fix suggestions needed"]

    @pytest.mark.parametrize("payload", [None, "lodash", {"dependency": {}}])
    def test_non_list_rejected(self, payload):
        response = suggest_fixes(payload)

        assert response["ok"] is False
        assert response["error"]["code"] == "INVALID_INPUT"

    def test_entry_without_dependency_name(self):
        response = suggest_fixes([{"dependency": {"ecosystem": "npm"}, "vulnerabilities": []}])

        assert response["error"]["code"] == "INVALID_INPUT"
        assert response["error"]["details"] == {"index": 0}

    def test_vulnerability_without_id(self):
        response = suggest_fixes([
            {"dependency": {"ecosystem": "npm", "name": "a"}, "vulnerabilities": [{"severity": "HIGH"}]}
        ])

        assert response["error"]["code"] == "INVALID_INPUT"

    @pytest.mark.parametrize("list_field,value", [
        ("fixed_versions", "1.2.0"),
        ("aliases", "CVE-2024-0001"),
        ("references", {"type": "WEB", "url": "https://example.invalid"}),
    ])
    def test_record_list_fields_must_be_lists(self, list_field, value):
        response = suggest_fixes([
            {
                "dependency": {"ecosystem": "npm", "name": "a", "version": "1.0.0"},
                "vulnerabilities": [{"id": "X", list_field: value}],
            }
        ])

        assert response["ok"] is False
        assert response["error"]["code"] == "INVALID_INPUT"
        assert response["error"]["details"] == {"index": 0, "id": "X"}

    def test_null_list_fields_are_tolerated(self):
        response = suggest_fixes([
            {
                "dependency": {"ecosystem": "npm", "name": "a", "version": "1.0.0"},
                "vulnerabilities": [{"id": "X", "fixed_versions": None, "aliases": None}],
            }
        ])

        assert response["ok"] is True
        assert response["data"]["suggestions"][0]["action"] == "review"

    def test_priority_order(self):
        entries = [
            {"dependency": {"ecosystem": "npm", "name": name}, "vulnerabilities": [{"id": f"V-{name}", "severity": sev}]}
            for name, sev in (("low-pkg", "LOW"), ("crit-pkg", "CRITICAL"), ("med-pkg", "MEDIUM"))
        ]
        response = suggest_fixes(entries)

        assert [s["priority"] for s in response["data"]["suggestions"]] == ["critical", "medium", "low"]

    def test_repeatable_output(self):
        entries = [
            {
                "dependency": {"ecosystem": "PyPI", "name": "django", "version": "3.2.0"},
                "vulnerabilities": [{"id": "PYSEC-1", "severity_score": 9.1, "fixed_versions": ["3.2.19", "4.1.7"]}],
            }
        ]
        first = suggest_fixes(entries)["data"]
        second = suggest_fixes(entries)["data"]
        assert json.dumps(first) == json.dumps(second)


class TestOSVQuery:
    """Test the osv_query tool with a mocked client."""

    @pytest.mark.asyncio
    async def test_success(self):
        client = AsyncMock()
        client.query_batch.return_value = [
            VulnerabilityResult(
                dependency=Dependency("npm", "a", "1.0.0"),
                vulnerabilities=[VulnerabilityRecord(id="GHSA-1", summary="bad", fixed_versions=["1.0.1"])],
            )
        ]

        response = await osv_query([{"ecosystem": "npm", "name": "a", "version": "1.0.0"}], client=client)

        assert response["ok"] is True
        assert response["data"]["total_vulnerabilities"] == 1
        assert response["data"]["results"][0]["vulnerabilities"][0]["fixed_versions"] == ["1.0.1"]
        assert response["meta"]["source"] == "osv.dev"
        client.query_batch.assert_awaited_once_with([Dependency("npm", "a", "1.0.0")])

    @pytest.mark.asyncio
    async def test_no_vulnerabilities_warning(self):
        client = AsyncMock()
        client.query_batch.return_value = [VulnerabilityResult(dependency=Dependency("PyPI", "safe"))]

        response = await osv_query([{"ecosystem": "PyPI", "name": "safe"}], client=client)

        assert response["data"]["total_vulnerabilities"] == 0
        assert response["meta"]["warnings"] == ["No vulnerabilities found for the provided dependencies"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("dependencies", [[], None, [{"name": "a"}]])
    async def test_invalid_input(self, dependencies):
        client = AsyncMock()

        response = await osv_query(dependencies, client=client)

        assert response["error"]["code"] == "INVALID_INPUT"
        client.query_batch.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error,code,details", [
        (OSVRateLimitError("30"), "RATE_LIMITED", {"status": 429, "retry_after": "30"}),
        (OSVTimeoutError(2000), "TIMEOUT", {"timeout": 2000}),
        (OSVUpstreamError("boom", status=500), "UPSTREAM_ERROR", {"status": 500}),
        (RuntimeError("unexpected"), "INTERNAL_ERROR", {}),
    ])
    async def test_client_failures(self, error, code, details):
        client = AsyncMock()
        client.query_batch.side_effect = error

        response = await osv_query([{"ecosystem": "npm", "name": "a"}], client=client)

        assert response["ok"] is False
        assert response["error"]["code"] == code
        assert response["error"]["details"] == details
