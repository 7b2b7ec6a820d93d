"""Fix suggestion engine: turns vulnerability results into ranked upgrades."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from ..utils.logging import get_logger
from .parsers import Dependency
from .severity import highest_label, label_from_score
from .versions import compare_versions, parse_version, version_sort_key

CRITICAL = "critical"
HIGH = "high"
MEDIUM = "medium"
LOW = "low"

PRIORITIES = (CRITICAL, HIGH, MEDIUM, LOW)
PRIORITY_RANK = {priority: rank for rank, priority in enumerate(PRIORITIES)}
SEVERITY_PRIORITY = {"CRITICAL": CRITICAL, "HIGH": HIGH, "MEDIUM": MEDIUM}

UPGRADE = "upgrade"
REVIEW = "review"
# Valid action value that the engine never produces today
INVESTIGATE = "investigate"
ACTIONS = (UPGRADE, REVIEW, INVESTIGATE)

UNKNOWN_VERSION = "unknown"
CVE_PREFIX = "CVE-"


@dataclass(frozen=True)
class VulnerabilityRecord:
    """Normalised advisory entry as returned by the advisory query."""

    id: str
    summary: str = ""
    severity: Optional[str] = None
    severity_score: Optional[float] = None
    fixed_versions: List[str] = field(default_factory=list)
    aliases: List[str] = field(default_factory=list)
    references: List[Dict[str, str]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Vulnerability ID cannot be empty")

    @property
    def resolved_severity(self) -> Optional[str]:
        """Severity label, falling back to the label implied by the score."""
        if self.severity:
            return self.severity
        return label_from_score(self.severity_score)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VulnerabilityRecord":
        score = data.get("severity_score")
        return cls(
            id=str(data.get("id") or ""),
            summary=str(data.get("summary") or ""),
            severity=data.get("severity") or None,
            severity_score=float(score) if isinstance(score, (int, float)) else None,
            fixed_versions=[str(v) for v in data.get("fixed_versions") or []],
            aliases=[str(a) for a in data.get("aliases") or []],
            references=[
                {"type": str(ref.get("type", "")), "url": str(ref.get("url", ""))}
                for ref in data.get("references") or []
                if isinstance(ref, dict)
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "summary": self.summary,
            "severity": self.severity,
            "severity_score": self.severity_score,
            "fixed_versions": list(self.fixed_versions),
            "aliases": list(self.aliases),
            "references": [dict(ref) for ref in self.references],
        }


@dataclass(frozen=True)
class VulnerabilityResult:
    """A dependency paired with the vulnerabilities that affect it."""

    dependency: Dependency
    vulnerabilities: List[VulnerabilityRecord] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VulnerabilityResult":
        return cls(
            dependency=Dependency.from_dict(data.get("dependency") or {}),
            vulnerabilities=[
                VulnerabilityRecord.from_dict(vuln) for vuln in data.get("vulnerabilities") or []
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dependency": self.dependency.to_dict(),
            "vulnerabilities": [vuln.to_dict() for vuln in self.vulnerabilities],
        }


@dataclass(frozen=True)
class FixSuggestion:
    """Remediation advice for one vulnerable dependency."""

    package: str
    ecosystem: str
    current_version: str
    suggested_version: Optional[str]
    vulnerabilities_fixed: List[str]
    severity: str
    priority: str
    action: str
    notes: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.priority not in PRIORITY_RANK:
            raise ValueError(f"Invalid priority: {self.priority}")
        if self.action not in ACTIONS:
            raise ValueError(f"Invalid action: {self.action}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "package": self.package,
            "ecosystem": self.ecosystem,
            "current_version": self.current_version,
            "suggested_version": self.suggested_version,
            "vulnerabilities_fixed": list(self.vulnerabilities_fixed),
            "severity": self.severity,
            "priority": self.priority,
            "action": self.action,
            "notes": list(self.notes),
        }


@dataclass
class SuggestionReport:
    """Ranked suggestions plus per-priority counts."""

    suggestions: List[FixSuggestion] = field(default_factory=list)

    @property
    def by_priority(self) -> Dict[str, int]:
        counts = {priority: 0 for priority in PRIORITIES}
        for suggestion in self.suggestions:
            counts[suggestion.priority] += 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "suggestions": [s.to_dict() for s in self.suggestions],
            "summary": {
                "total": len(self.suggestions),
                "by_priority": self.by_priority,
            },
        }


def priority_from_severity(severity: Optional[str]) -> str:
    return SEVERITY_PRIORITY.get((severity or "").upper(), LOW)


def find_minimum_safe_version(current_version: str, fixed_versions: List[str]) -> Optional[str]:
    """Pick the smallest fixed version above the current one.

    If the current version cannot be parsed the smallest fixed version is
    returned. If every fixed version is at or below the current one (stale
    advisory data), the highest fixed version is returned instead of nothing.

    Args:
        current_version: Installed version
        fixed_versions: Deduplicated fixed versions from all advisories

    Returns:
        Suggested version, or None when there are no fixed versions
    """
    if not fixed_versions:
        return None

    ordered = sorted(fixed_versions, key=version_sort_key)

    if parse_version(current_version) is None:
        return ordered[0]

    for candidate in ordered:
        if compare_versions(candidate, current_version) > 0:
            return candidate

    return ordered[-1]


class FixSuggestionEngine:
    """Computes upgrade targets, priorities and notes per dependency."""

    def __init__(self) -> None:
        self.logger = get_logger("FixSuggestionEngine")

    def suggest(self, results: Iterable[VulnerabilityResult]) -> SuggestionReport:
        """Build ranked fix suggestions.

        Entries without vulnerabilities produce no suggestion. The output is
        ordered by priority only; equal priorities keep their input order.

        Args:
            results: Vulnerability results, one per dependency

        Returns:
            Report with suggestions and per-priority counts
        """
        suggestions = []
        for result in results:
            if not result.vulnerabilities:
                continue
            suggestions.append(self._suggest_one(result))

        suggestions.sort(key=lambda s: PRIORITY_RANK[s.priority])
        self.logger.debug(f"Generated {len(suggestions)} fix suggestions")
        return SuggestionReport(suggestions=suggestions)

    def _suggest_one(self, result: VulnerabilityResult) -> FixSuggestion:
        dependency = result.dependency
        vulnerabilities = result.vulnerabilities

        fixed_versions: List[str] = []
        for vuln in vulnerabilities:
            for version in vuln.fixed_versions:
                if version not in fixed_versions:
                    fixed_versions.append(version)

        severity = highest_label(vuln.resolved_severity for vuln in vulnerabilities)
        priority = priority_from_severity(severity)

        current_version = dependency.version or UNKNOWN_VERSION
        suggested_version = find_minimum_safe_version(current_version, fixed_versions)

        return FixSuggestion(
            package=dependency.name,
            ecosystem=dependency.ecosystem,
            current_version=current_version,
            suggested_version=suggested_version,
            vulnerabilities_fixed=[vuln.id for vuln in vulnerabilities],
            severity=severity,
            priority=priority,
            action=UPGRADE if suggested_version else REVIEW,
            notes=self._build_notes(current_version, suggested_version, vulnerabilities),
        )

    @staticmethod
    def _build_notes(
        current_version: str,
        suggested_version: Optional[str],
        vulnerabilities: List[VulnerabilityRecord],
    ) -> List[str]:
        notes = []

        if suggested_version:
            notes.append(f"Upgrade from {current_version} to {suggested_version}")

            current = parse_version(current_version)
            suggested = parse_version(suggested_version)
            if current and suggested and suggested.major > current.major:
                notes.append(
                    "Warning: This is a major version upgrade - review changelog for breaking changes"
                )
        else:
            notes.append(
                "No fixed version available - consider alternative packages or manual mitigation"
            )

        cves: List[str] = []
        for vuln in vulnerabilities:
            for alias in vuln.aliases:
                if alias.startswith(CVE_PREFIX) and alias not in cves:
                    cves.append(alias)
        if cves:
            notes.append(f"Related CVEs: {', '.join(cves)}")

        return notes
