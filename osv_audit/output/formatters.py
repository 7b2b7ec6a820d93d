"""Output formatters for osv-audit results."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..utils.logging import get_logger

SEVERITY_STYLES = {
    "critical": "red bold",
    "high": "red",
    "medium": "yellow",
    "low": "blue",
}


def _severity_style(severity: Optional[str]) -> str:
    """Get color style for a severity label or priority tier."""
    return SEVERITY_STYLES.get((severity or "").lower(), "white")


class ConsoleFormatter:
    """Rich console formatter for tool envelopes."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()
        self.logger = get_logger("ConsoleFormatter")

    def format_envelope(self, envelope: Dict[str, Any]) -> None:
        """Display warnings or the error carried by an envelope."""
        if not envelope.get("ok"):
            error = envelope.get("error", {})
            details = error.get("details")
            self.format_error(
                f"{error.get('code')}: {error.get('message')}",
                json.dumps(details) if details else None,
            )
            return

        for warning in envelope.get("meta", {}).get("warnings") or []:
            self.console.print(f"[yellow]Warning: {warning}[/yellow]")

    def format_dependencies(self, dependencies: List[Dict[str, Any]], title: str = "Dependencies") -> None:
        table = Table(title=f"{title} ({len(dependencies)})")
        table.add_column("Ecosystem", style="magenta")
        table.add_column("Package", style="cyan", no_wrap=True)
        table.add_column("Version", style="blue")

        for dep in dependencies:
            table.add_row(dep.get("ecosystem", ""), dep.get("name", ""), dep.get("version") or "unknown")

        self.console.print(table)

    def format_vulnerability_results(self, results: List[Dict[str, Any]]) -> None:
        """Display one row per (dependency, vulnerability) pair.

        Args:
            results: ``results`` list from an osv_query envelope
        """
        table = Table(title="Vulnerabilities Found")
        table.add_column("Package", style="cyan", no_wrap=True)
        table.add_column("Version", style="blue")
        table.add_column("Vulnerability ID", style="red")
        table.add_column("Severity")
        table.add_column("Fixed In", style="green")
        table.add_column("Summary", style="white")

        rows = 0
        for result in results:
            dependency = result.get("dependency", {})
            for vuln in result.get("vulnerabilities") or []:
                severity = vuln.get("severity") or "UNKNOWN"
                summary = vuln.get("summary") or ""
                table.add_row(
                    dependency.get("name", ""),
                    dependency.get("version") or "unknown",
                    vuln.get("id", ""),
                    Text(severity, style=_severity_style(severity)),
                    ", ".join(vuln.get("fixed_versions") or []) or "-",
                    summary[:50] + "..." if len(summary) > 50 else summary,
                )
                rows += 1

        if rows == 0:
            self.console.print(Panel("No vulnerabilities found!", style="green"))
            return
        self.console.print(table)

    def format_suggestions(self, report: Dict[str, Any]) -> None:
        """Display ranked fix suggestions and the per-priority summary.

        Args:
            report: ``data`` of a suggest_fixes envelope
        """
        suggestions = report.get("suggestions") or []
        summary = report.get("summary", {})
        by_priority = summary.get("by_priority", {})

        counts = "  ".join(f"{tier}: {count}" for tier, count in by_priority.items())
        style = "red" if suggestions else "green"
        self.console.print(
            Panel(f"Suggestions: {summary.get('total', 0)}\n{counts}", title="Fix Summary", style=style)
        )

        if not suggestions:
            return

        table = Table(title="Fix Suggestions")
        table.add_column("Priority")
        table.add_column("Package", style="cyan", no_wrap=True)
        table.add_column("Current", style="blue")
        table.add_column("Suggested", style="green")
        table.add_column("Action")
        table.add_column("Vulnerabilities", style="red")
        table.add_column("Notes", style="dim")

        for suggestion in suggestions:
            priority = suggestion.get("priority", "")
            table.add_row(
                Text(priority, style=_severity_style(priority)),
                suggestion.get("package", ""),
                suggestion.get("current_version", ""),
                suggestion.get("suggested_version") or "-",
                suggestion.get("action", ""),
                ", ".join(suggestion.get("vulnerabilities_fixed") or []),
                "\n".join(suggestion.get("notes") or []),
            )

        self.console.print(table)

    def format_error(self, error: str, details: Optional[str] = None) -> None:
        content = f"[bold red]Error:[/bold red] {error}"
        if details:
            content += f"\n\n[dim]{details}[/dim]"

        self.console.print(Panel(content, style="red"))

    def format_info(self, message: str, title: Optional[str] = None) -> None:
        self.console.print(Panel(message, title=title, style="blue"))


class JSONFormatter:
    """JSON formatter for tool envelopes."""

    def __init__(self, output_file: Optional[Path] = None) -> None:
        """Initialize the JSON formatter.

        Args:
            output_file: Optional output file path
        """
        self.output_file = output_file
        self.logger = get_logger("JSONFormatter")

    @staticmethod
    def to_json(envelope: Dict[str, Any]) -> str:
        return json.dumps(envelope, indent=2, ensure_ascii=False)

    def save_results(
        self,
        results: Dict[str, Any],
        output_file: Optional[Path] = None,
    ) -> None:
        """Save results to a JSON file.

        Args:
            results: Envelope or other JSON-serialisable mapping
            output_file: Output file path (uses instance default if None)
        """
        file_path = output_file or self.output_file
        if not file_path:
            raise ValueError("No output file specified")

        try:
            with open(file_path, "w", encoding="utf-8") as f:
                f.write(self.to_json(results))
            self.logger.info(f"Results saved to {file_path}")
        except IOError as e:
            self.logger.error(f"Failed to save results to {file_path}: {e}")
            raise
