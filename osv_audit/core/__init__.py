"""Core manifest parsing, version reasoning and fix suggestion logic."""

from .parsers import Dependency, DependencyParser, ManifestParseError, ParsedDependencies
from .suggest import (
    FixSuggestion,
    FixSuggestionEngine,
    SuggestionReport,
    VulnerabilityRecord,
    VulnerabilityResult,
)
from .versions import ParsedVersion, compare_versions, parse_version

__all__ = [
    "Dependency",
    "DependencyParser",
    "FixSuggestion",
    "FixSuggestionEngine",
    "ManifestParseError",
    "ParsedDependencies",
    "ParsedVersion",
    "SuggestionReport",
    "VulnerabilityRecord",
    "VulnerabilityResult",
    "compare_versions",
    "parse_version",
]
