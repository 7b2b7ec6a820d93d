"""Envelope-returning entry points: parse, query and suggest.

Every function here returns a success or failure envelope and never raises.
"""

from typing import Any, Dict, List, Optional

from .core.parsers import DependencyParser, ManifestParseError, UnsupportedManifestError
from .core.parsers.base import Dependency
from .core.suggest import FixSuggestionEngine, VulnerabilityResult
from .osv.client import OSVClient, OSVRateLimitError, OSVTimeoutError, OSVUpstreamError
from .response import ErrorCode, ToolError, error_response, success_response
from .utils.logging import get_logger

logger = get_logger("tools")

NO_DEPENDENCIES_WARNING = "No dependencies found in manifest"
NO_VULNERABILITIES_WARNING = "No vulnerabilities found for the provided dependencies"
NO_SUGGESTIONS_WARNING = "No vulnerabilities found - no fix suggestions needed"

RECORD_LIST_FIELDS = ("fixed_versions", "aliases", "references")


def parse_dependencies(text: Any, manifest_type: Any) -> Dict[str, Any]:
    """Extract a normalised dependency list from manifest text.

    Args:
        text: Manifest content
        manifest_type: One of the supported dialect tags

    Returns:
        Envelope with ``{"dependencies": [...], "count": n}``
    """
    if not isinstance(text, str) or not text.strip():
        return error_response(
            ErrorCode.INVALID_INPUT,
            "Manifest text cannot be empty",
            {"manifest_type": manifest_type},
        )

    if not isinstance(manifest_type, str):
        manifest_type = str(manifest_type)

    try:
        parsed = DependencyParser.parse(text, manifest_type)
    except UnsupportedManifestError as e:
        return error_response(
            ErrorCode.INVALID_INPUT, str(e), {"supported_types": e.supported}
        )
    except ManifestParseError as e:
        logger.warning(str(e))
        return error_response(ErrorCode.PARSE_ERROR, str(e), {"manifest_type": manifest_type})
    except Exception as e:
        logger.error(f"Unexpected failure parsing {manifest_type}: {e}")
        return error_response(ErrorCode.INTERNAL_ERROR, f"Unexpected parser failure: {e}")

    warnings = [NO_DEPENDENCIES_WARNING] if not parsed.dependencies else []
    return success_response(
        parsed.to_dict(),
        source=f"parsed from {manifest_type}",
        warnings=warnings,
    )


def _dependencies_from_input(dependencies: Any) -> List[Dependency]:
    if not isinstance(dependencies, list) or not dependencies:
        raise ToolError(ErrorCode.INVALID_INPUT, "Dependencies array cannot be empty")

    parsed = []
    for index, entry in enumerate(dependencies):
        if not isinstance(entry, dict) or not entry.get("ecosystem") or not entry.get("name"):
            raise ToolError(
                ErrorCode.INVALID_INPUT,
                "Each dependency needs a non-empty ecosystem and name",
                {"index": index},
            )
        parsed.append(Dependency.from_dict(entry))
    return parsed


async def osv_query(dependencies: Any, client: Optional[OSVClient] = None) -> Dict[str, Any]:
    """Look up vulnerabilities for dependencies on OSV.dev.

    Args:
        dependencies: List of ``{ecosystem, name, version?}`` mappings
        client: Client to use; a short-lived one is created when omitted

    Returns:
        Envelope with ``{"results": [...], "total_vulnerabilities": n}``
    """
    try:
        queries = _dependencies_from_input(dependencies)
    except ToolError as e:
        return e.to_response()

    try:
        if client is None:
            async with OSVClient() as own_client:
                results = await own_client.query_batch(queries)
        else:
            results = await client.query_batch(queries)
    except OSVRateLimitError as e:
        return error_response(
            ErrorCode.RATE_LIMITED,
            str(e),
            {"status": e.status, "retry_after": e.retry_after},
        )
    except OSVTimeoutError as e:
        return error_response(ErrorCode.TIMEOUT, str(e), {"timeout": e.timeout})
    except OSVUpstreamError as e:
        return error_response(ErrorCode.UPSTREAM_ERROR, str(e), {"status": e.status})
    except Exception as e:
        logger.error(f"Unexpected failure querying OSV: {e}")
        return error_response(ErrorCode.INTERNAL_ERROR, f"Unknown error occurred: {e}")

    total = sum(len(result.vulnerabilities) for result in results)
    return success_response(
        {
            "results": [result.to_dict() for result in results],
            "total_vulnerabilities": total,
        },
        source="osv.dev",
        warnings=[NO_VULNERABILITIES_WARNING] if total == 0 else [],
    )


def _results_from_input(vuln_results: Any) -> List[VulnerabilityResult]:
    if not isinstance(vuln_results, list):
        raise ToolError(ErrorCode.INVALID_INPUT, "vuln_results must be a list")

    results = []
    for index, entry in enumerate(vuln_results):
        if not isinstance(entry, dict):
            raise ToolError(ErrorCode.INVALID_INPUT, "Each vuln_results entry must be an object", {"index": index})

        dependency = entry.get("dependency")
        if not isinstance(dependency, dict) or not dependency.get("name") or not dependency.get("ecosystem"):
            raise ToolError(
                ErrorCode.INVALID_INPUT,
                "Each entry needs a dependency with a name and ecosystem",
                {"index": index},
            )

        vulnerabilities = entry.get("vulnerabilities", [])
        if not isinstance(vulnerabilities, list):
            raise ToolError(ErrorCode.INVALID_INPUT, "vulnerabilities must be a list", {"index": index})
        for vuln in vulnerabilities:
            if not isinstance(vuln, dict) or not vuln.get("id"):
                raise ToolError(
                    ErrorCode.INVALID_INPUT,
                    "Each vulnerability must be an object with an id",
                    {"index": index},
                )
            for list_field in RECORD_LIST_FIELDS:
                if vuln.get(list_field) is not None and not isinstance(vuln[list_field], list):
                    raise ToolError(
                        ErrorCode.INVALID_INPUT,
                        f"{list_field} must be a list",
                        {"index": index, "id": vuln["id"]},
                    )

        results.append(VulnerabilityResult.from_dict(entry))
    return results


def suggest_fixes(vuln_results: Any) -> Dict[str, Any]:
    """Rank upgrade suggestions for vulnerable dependencies.

    Args:
        vuln_results: List of ``{dependency, vulnerabilities}`` mappings

    Returns:
        Envelope with ``{"suggestions": [...], "summary": {...}}``
    """
    try:
        results = _results_from_input(vuln_results)
        report = FixSuggestionEngine().suggest(results)
    except ToolError as e:
        return e.to_response()
    except Exception as e:
        logger.error(f"Unexpected failure building fix suggestions: {e}")
        return error_response(ErrorCode.INTERNAL_ERROR, f"Unexpected suggestion failure: {e}")

    return success_response(
        report.to_dict(),
        warnings=[NO_SUGGESTIONS_WARNING] if not report.suggestions else [],
    )
