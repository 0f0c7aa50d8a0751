"""Helpers for grouping findings."""

from collections.abc import Iterable

from pageaudit.modules.audit.models import SEVERITY_ORDER, Finding, Severity


def group_by_severity(findings: Iterable[Finding]) -> dict[Severity, list[Finding]]:
    """Group findings by severity, most severe first."""
    grouped: dict[Severity, list[Finding]] = {severity: [] for severity in SEVERITY_ORDER}
    for finding in findings:
        grouped[finding.severity].append(finding)
    return grouped


def summarize(findings: Iterable[Finding]) -> dict[str, int]:
    """Count findings per severity label; every label is present."""
    return {
        severity.label: len(scoped) for severity, scoped in group_by_severity(findings).items()
    }
