"""Tests for report rendering."""

import json
from pathlib import Path

from rich.console import Console

from pageaudit.modules.audit import (
    AuditResult,
    Classification,
    Finding,
    MainFrame,
    Severity,
    TargetState,
)
from pageaudit.modules.report import (
    build_json_report,
    group_by_severity,
    render_findings,
    summarize,
    write_json_report,
)


def _finding(finding_id: str, severity: Severity) -> Finding:
    return Finding(
        id=finding_id,
        title=f"{finding_id} title",
        severity=severity,
        classification=Classification(owasp="A05:2021 Security Misconfiguration", cwe="CWE-693"),
        evidence="[evidence]",
        remediation="fix it",
    )


def _result(findings=(), error=None) -> AuditResult:
    state = TargetState(main_frame=MainFrame(url="https://example.com/a?b=c", status_code=200))
    return AuditResult(
        target_id=1,
        url="https://example.com/a?b=c",
        findings=tuple(findings),
        state=state,
        error=error,
    )


class TestGrouping:
    """Test severity grouping and counts."""

    def test_summarize_includes_every_label(self):
        counts = summarize([_finding("A", Severity.HIGH), _finding("B", Severity.HIGH)])
        assert counts == {"Critical": 0, "High": 2, "Medium": 0, "Low": 0, "Info": 0}

    def test_group_order_is_most_severe_first(self):
        groups = group_by_severity([_finding("A", Severity.INFO), _finding("B", Severity.CRITICAL)])
        assert list(groups) == [
            Severity.CRITICAL,
            Severity.HIGH,
            Severity.MEDIUM,
            Severity.LOW,
            Severity.INFO,
        ]
        assert [finding.id for finding in groups[Severity.CRITICAL]] == ["B"]


class TestJsonReport:
    """Test the JSON report."""

    def test_build_json_report(self):
        report = build_json_report(_result([_finding("CSP_MISSING", Severity.HIGH)], error="gone"))

        assert report["report_metadata"]["tool"] == "PageAudit"
        assert report["target"]["origin"] == "https://example.com"
        assert report["target"]["status_code"] == 200
        assert report["summary"]["total_findings"] == 1
        assert report["summary"]["High"] == 1
        assert report["content_error"] == "gone"
        assert report["findings"][0]["severity"] == "High"
        assert report["content"] is None

    def test_write_json_report(self, temp_dir: Path):
        path = write_json_report(_result(), temp_dir / "out.json")
        assert json.loads(path.read_text())["findings"] == []


class TestConsoleReport:
    """Test rich console rendering."""

    def test_renders_groups_and_literal_evidence(self):
        console = Console(record=True, width=120)

        render_findings(console, _result([_finding("CSP_MISSING", Severity.HIGH)]))

        text = console.export_text()
        assert "Target: https://example.com" in text
        assert "CSP_MISSING title" in text
        assert "[evidence]" in text
        assert "fix it" in text

    def test_renders_empty_result_and_error(self):
        console = Console(record=True, width=120)

        render_findings(console, _result(error="Could not establish connection"))

        text = console.export_text()
        assert "No findings." in text
        assert "Could not establish connection" in text
