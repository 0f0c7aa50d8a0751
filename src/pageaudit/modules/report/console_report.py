"""Rich console rendering of audit results."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pageaudit.modules.audit.document import origin_of
from pageaudit.modules.audit.models import AuditResult, Finding, Severity

from .grouping import group_by_severity, summarize

SEVERITY_STYLES: dict[Severity, str] = {
    Severity.CRITICAL: "bold white on red",
    Severity.HIGH: "bold red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "cyan",
    Severity.INFO: "dim",
}


def render_summary(console: Console, findings: tuple[Finding, ...] | list[Finding]) -> None:
    """Print one count card per severity."""
    counts = summarize(findings)
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    for severity in SEVERITY_STYLES:
        table.add_column(severity.label, justify="center", style=SEVERITY_STYLES[severity])
    table.add_row(*(str(counts[severity.label]) for severity in SEVERITY_STYLES))
    console.print(table)


def _finding_panel(finding: Finding) -> Panel:
    style = SEVERITY_STYLES[finding.severity]
    body = Text()
    body.append("ID: ", style="bold")
    body.append(finding.id)
    body.append("  CWE: ", style="bold")
    body.append(finding.classification.cwe)
    body.append("\nOWASP: ", style="bold")
    body.append(finding.classification.owasp)
    body.append("\nEvidence\n", style="bold")
    body.append(finding.evidence or "", style="dim")
    body.append("\nSuggested fix\n", style="bold")
    body.append(finding.remediation or "")
    title = Text(finding.title)
    title.append(f"  [{finding.severity.label}]", style=style)
    return Panel(body, title=title, title_align="left", border_style=style)


def render_findings(console: Console, result: AuditResult) -> None:
    """Print the target, severity summary and findings grouped by severity."""
    console.print(f"[bold]Target:[/bold] {origin_of(result.url) or '(unknown)'}")
    if result.error:
        console.print(f"[yellow]! Page signals unavailable: {escape(result.error)}[/yellow]")
    render_summary(console, result.findings)

    if not result.findings:
        console.print("[green]No findings.[/green]")
        return

    for severity, scoped in group_by_severity(result.findings).items():
        if not scoped:
            continue
        console.print(
            f"\n[{SEVERITY_STYLES[severity]}]{severity.label}[/] ({len(scoped)})"
        )
        for finding in scoped:
            console.print(_finding_panel(finding))
