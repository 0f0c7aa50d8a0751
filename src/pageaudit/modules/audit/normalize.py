"""Finding deduplication and ranking."""

from collections.abc import Iterable

from .models import Finding


def normalize(findings: Iterable[Finding]) -> list[Finding]:
    """Keep the most severe finding per id and sort by severity, highest first.

    Ties on severity keep the first-seen instance, and equal severities keep
    their first-seen relative order.
    """
    by_id: dict[str, Finding] = {}
    for finding in findings:
        existing = by_id.get(finding.id)
        if existing is None or finding.severity.rank > existing.severity.rank:
            by_id[finding.id] = finding
    return sorted(by_id.values(), key=lambda finding: finding.severity.rank, reverse=True)
