"""JSON report rendering."""

import json
from datetime import datetime
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any

from pageaudit.modules.audit.document import origin_of
from pageaudit.modules.audit.models import AuditResult

from .grouping import summarize


def _tool_version() -> str:
    try:
        return version("pageaudit")
    except PackageNotFoundError:
        return "0.0.0+unknown"


def build_json_report(result: AuditResult) -> dict[str, Any]:
    """Build the JSON-serializable report for one audit."""
    return {
        "report_metadata": {
            "generated_at": datetime.now().isoformat(),
            "tool": "PageAudit",
            "version": _tool_version(),
        },
        "target": {
            "id": result.target_id,
            "url": result.url,
            "origin": origin_of(result.url),
            "status_code": result.state.main_frame.status_code if result.state.main_frame else None,
            "requests_observed": len(result.state.request_log),
        },
        "summary": {
            "total_findings": len(result.findings),
            **summarize(result.findings),
        },
        "content_error": result.error,
        "content": result.content.to_dict() if result.content else None,
        "findings": [finding.to_dict() for finding in result.findings],
    }


def write_json_report(result: AuditResult, output: Path) -> Path:
    """Write the JSON report to ``output`` and return the path."""
    output.write_text(json.dumps(build_json_report(result), indent=2), encoding="utf-8")
    return output
