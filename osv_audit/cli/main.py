"""Main CLI interface for osv-audit."""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from .. import __version__
from ..core.parsers import DependencyParser
from ..output.formatters import ConsoleFormatter, JSONFormatter
from ..response import ErrorCode, error_response
from ..tools import osv_query, parse_dependencies, suggest_fixes
from ..utils.logging import get_logger, setup_logging
from ..utils.path_utils import detect_manifest_type, find_manifest_files

app = typer.Typer(
    name="osv-audit",
    help="Parse lockfiles, look up known vulnerabilities on OSV.dev and suggest fixes",
    add_completion=False,
)

console = Console()
logger = get_logger("CLI")


def _fail(envelope: Dict[str, Any], as_json: bool) -> None:
    if as_json:
        typer.echo(JSONFormatter.to_json(envelope))
    else:
        ConsoleFormatter(console).format_envelope(envelope)
    raise typer.Exit(1)


def _read_manifest(file: Path, manifest_type: Optional[str]) -> Dict[str, Any]:
    """Read a manifest from disk and run it through parse_dependencies."""
    if not file.is_file():
        console.print(f"[red]Error: File does not exist: {file}[/red]")
        raise typer.Exit(1)

    manifest_type = manifest_type or detect_manifest_type(file)
    if not manifest_type:
        supported = ", ".join(DependencyParser.get_supported_manifest_types())
        console.print(
            f"[red]Error: Cannot detect manifest type of {file.name}; pass --type ({supported})[/red]"
        )
        raise typer.Exit(1)

    logger.debug(f"Parsing {file} as {manifest_type}")
    try:
        text = file.read_text(encoding="utf-8")
    except (UnicodeDecodeError, OSError) as e:
        logger.warning(f"Cannot read {file}: {e}")
        return error_response(
            ErrorCode.INVALID_INPUT,
            f"Cannot read {file.name} as UTF-8 text: {e}",
            {"manifest_type": manifest_type},
        )
    return parse_dependencies(text, manifest_type)


async def _query_with_progress(dependencies: List[Dict[str, Any]]) -> Dict[str, Any]:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(f"Querying OSV for {len(dependencies)} packages...", total=None)
        return await osv_query(dependencies)


def _load_vuln_results(file: Path) -> Any:
    """Accept a bare vuln_results list, a ``{"vuln_results": [...]}`` object
    or a saved osv_query envelope."""
    data = json.loads(file.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        if "vuln_results" in data:
            return data["vuln_results"]
        if isinstance(data.get("data"), dict) and "results" in data["data"]:
            return data["data"]["results"]
    return data


@app.command()
def parse(
    file: Path = typer.Argument(..., help="Manifest or lockfile to parse"),
    manifest_type: Optional[str] = typer.Option(
        None, "--type", "-t", help="Manifest type (detected from the file name if omitted)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON envelope"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Extract the dependency list from a lockfile."""
    setup_logging(verbose=verbose)

    envelope = _read_manifest(file, manifest_type)
    if not envelope["ok"]:
        _fail(envelope, as_json)

    if as_json:
        typer.echo(JSONFormatter.to_json(envelope))
        return

    formatter = ConsoleFormatter(console)
    formatter.format_envelope(envelope)
    formatter.format_dependencies(envelope["data"]["dependencies"], title=file.name)


@app.command()
def query(
    file: Path = typer.Argument(..., help="Manifest or lockfile to check"),
    manifest_type: Optional[str] = typer.Option(
        None, "--type", "-t", help="Manifest type (detected from the file name if omitted)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON envelope"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Parse a lockfile and look up its dependencies on OSV.dev."""
    setup_logging(verbose=verbose)

    parsed = _read_manifest(file, manifest_type)
    if not parsed["ok"]:
        _fail(parsed, as_json)

    dependencies = parsed["data"]["dependencies"]
    if not dependencies:
        console.print("[yellow]No dependencies found[/yellow]")
        return

    envelope = asyncio.run(_query_with_progress(dependencies))
    if not envelope["ok"]:
        _fail(envelope, as_json)

    if as_json:
        typer.echo(JSONFormatter.to_json(envelope))
        return

    formatter = ConsoleFormatter(console)
    formatter.format_envelope(envelope)
    formatter.format_vulnerability_results(envelope["data"]["results"])


@app.command()
def suggest(
    results_file: Path = typer.Argument(..., help="JSON file holding vuln_results or a query envelope"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON envelope"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Rank fix suggestions for previously fetched vulnerability results."""
    setup_logging(verbose=verbose)

    if not results_file.is_file():
        console.print(f"[red]Error: File does not exist: {results_file}[/red]")
        raise typer.Exit(1)

    try:
        vuln_results = _load_vuln_results(results_file)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error: {results_file.name} is not valid JSON: {e}[/red]")
        raise typer.Exit(1)

    envelope = suggest_fixes(vuln_results)
    if not envelope["ok"]:
        _fail(envelope, as_json)

    if as_json:
        typer.echo(JSONFormatter.to_json(envelope))
        return

    formatter = ConsoleFormatter(console)
    formatter.format_envelope(envelope)
    formatter.format_suggestions(envelope["data"])


@app.command()
def audit(
    path: Path = typer.Argument(Path("."), help="Lockfile or project directory to audit"),
    manifest_type: Optional[str] = typer.Option(
        None, "--type", "-t", help="Manifest type (single files only)"
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file for JSON results"),
    ignore_patterns: Optional[List[str]] = typer.Option(None, "--ignore", help="Additional ignore patterns"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Parse, query and suggest fixes in one pass."""
    setup_logging(verbose=verbose)
    formatter = ConsoleFormatter(console)

    if path.is_dir():
        manifests = find_manifest_files(path, ignore_patterns)
        if not manifests:
            console.print("[yellow]No manifest files found[/yellow]")
            return
        console.print(f"Found {len(manifests)} manifest files")
        targets = [(manifest.path, manifest.manifest_type) for manifest in manifests]
    else:
        targets = [(path, manifest_type)]

    dependencies: List[Dict[str, Any]] = []
    seen = set()
    for file, file_type in targets:
        parsed = _read_manifest(file, file_type)
        if not parsed["ok"]:
            error = parsed["error"]
            console.print(f"  ✗ {file}: {error['message']}")
            continue
        found = parsed["data"]["dependencies"]
        console.print(f"  ✓ {file} ({len(found)} dependencies)")
        for dep in found:
            key = (dep["ecosystem"], dep["name"], dep.get("version"))
            if key not in seen:
                seen.add(key)
                dependencies.append(dep)

    if not dependencies:
        console.print("[yellow]No dependencies found[/yellow]")
        return

    queried = asyncio.run(_query_with_progress(dependencies))
    if not queried["ok"]:
        _fail(queried, False)

    results = queried["data"]["results"]
    formatter.format_vulnerability_results(results)

    suggested = suggest_fixes(results)
    if not suggested["ok"]:
        _fail(suggested, False)
    formatter.format_suggestions(suggested["data"])

    if output:
        JSONFormatter(output).save_results(
            {
                "dependencies": dependencies,
                "results": results,
                "total_vulnerabilities": queried["data"]["total_vulnerabilities"],
                "suggestions": suggested["data"],
            }
        )
        console.print(f"[green]Results saved to: {output}[/green]")


@app.command()
def info() -> None:
    """Show osv-audit information."""
    ConsoleFormatter(console).format_info(
        f"[bold blue]osv-audit[/bold blue] {__version__}\n"
        "Parse lockfiles, look up known vulnerabilities on OSV.dev\n"
        "and rank upgrade suggestions",
        title="Information",
    )

    ecosystems = DependencyParser.get_supported_ecosystems()
    console.print(f"\n[bold]Supported Ecosystems:[/bold] {', '.join(ecosystems)}")

    manifest_types = DependencyParser.get_supported_manifest_types()
    console.print(f"[bold]Supported Manifest Types:[/bold] {', '.join(manifest_types)}")


def main() -> None:
    """Main entry point for the osv-audit CLI."""
    app()


if __name__ == "__main__":
    main()
