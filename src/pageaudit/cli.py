"""PageAudit CLI - passive security posture audit of a web page."""

import asyncio
import json
import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from pageaudit.config import (
    find_project_dir,
    get_collect_timeout,
    get_fetch_subresources,
    get_request_timeout,
    get_user_agent,
    get_verify_ssl,
    global_config_path,
    is_debug_config_enabled,
    load_global_config,
    load_project_config,
)
from pageaudit.errors import PageAuditError
from pageaudit.modules.audit import CONTENT_RULES, HEADER_RULES, AuditConfig, audit_url
from pageaudit.modules.report import build_json_report, render_findings, write_json_report
from pageaudit.utils.debug import set_debug_enabled

app = typer.Typer(
    name="pageaudit",
    help="Passive security posture audit of a single web page",
    no_args_is_help=True,
)
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@app.command()
def version() -> None:
    """Show the installed PageAudit version."""
    try:
        current_version = pkg_version("pageaudit")
    except PackageNotFoundError:
        current_version = "0.0.0+unknown"

    console.print(f"PageAudit {current_version}")


@app.command()
def audit(
    url: str = typer.Argument(..., help="URL of the page to audit"),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write a JSON report"),
    fetch_subresources: Optional[bool] = typer.Option(
        None,
        "--fetch-subresources/--no-fetch-subresources",
        help="Also load scripts, images and styles into the request log",
    ),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Page load timeout (s)"),
    insecure: bool = typer.Option(False, "--insecure", help="Skip TLS certificate checks"),
    debug: bool = typer.Option(False, "--debug", help="Print debug diagnostics"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Audit a page's transport, headers and DOM."""
    _configure_logging(verbose)
    set_debug_enabled(debug or is_debug_config_enabled())

    config = AuditConfig(
        url=url,
        timeout=timeout if timeout and timeout > 0 else get_request_timeout(),
        verify_ssl=False if insecure else get_verify_ssl(),
        user_agent=get_user_agent(),
        fetch_subresources=(
            get_fetch_subresources() if fetch_subresources is None else fetch_subresources
        ),
        collect_timeout=get_collect_timeout(),
    )

    try:
        result = asyncio.run(audit_url(config))
    except PageAuditError as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc

    if output is not None:
        report_file = write_json_report(result, output)
        console.print(f"[green]Report written:[/green] {report_file}")

    if as_json:
        typer.echo(json.dumps(build_json_report(result), indent=2))
    else:
        render_findings(console, result)


@app.command()
def rules() -> None:
    """List the rules findings are evaluated against."""
    table = Table(title="Audit rules")
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Severity", no_wrap=True)
    table.add_column("OWASP")
    table.add_column("CWE", no_wrap=True)
    table.add_column("Title")

    for rule in HEADER_RULES:
        table.add_row(
            rule.id,
            rule.severity.label,
            rule.classification.owasp,
            rule.classification.cwe,
            rule.title,
        )
    for content_rule in CONTENT_RULES:
        finding = content_rule.finding
        table.add_row(
            finding.id,
            finding.severity.label,
            finding.classification.owasp,
            finding.classification.cwe,
            finding.title,
        )
    console.print(table)


@app.command()
def config(
    global_config: bool = typer.Option(False, "--global", "-g", help="Show global config"),
) -> None:
    """Show the configuration that applies in the current directory."""
    if global_config:
        values = load_global_config()
        source = str(global_config_path())
    else:
        project_dir = find_project_dir()
        if project_dir is None:
            console.print(
                "[yellow]Not in a project directory. Use --global to show global config.[/yellow]"
            )
            return
        values = load_project_config(project_dir)
        source = str(project_dir / ".pageaudit" / ".env")

    console.print(f"[bold]Config source:[/bold] {source}")
    if not values:
        console.print("[dim]No configuration values set.[/dim]")
        return
    for key, value in values.items():
        console.print(f"  {key}={value}")


def main():
    """Entry point for the CLI."""
    app()
