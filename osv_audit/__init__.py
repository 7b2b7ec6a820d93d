"""osv-audit - lockfile parsing, OSV vulnerability lookup and fix suggestions."""

__version__ = "1.0.0"

from .core.parsers import DependencyParser
from .core.suggest import FixSuggestionEngine
from .osv.client import OSVClient
from .output.formatters import ConsoleFormatter, JSONFormatter
from .tools import osv_query, parse_dependencies, suggest_fixes

__all__ = [
    "DependencyParser",
    "FixSuggestionEngine",
    "OSVClient",
    "ConsoleFormatter",
    "JSONFormatter",
    "osv_query",
    "parse_dependencies",
    "suggest_fixes",
]
