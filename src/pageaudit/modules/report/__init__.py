"""Report rendering for audit results."""

from .console_report import render_findings, render_summary
from .grouping import group_by_severity, summarize
from .json_report import build_json_report, write_json_report

__all__ = [
    "build_json_report",
    "group_by_severity",
    "render_findings",
    "render_summary",
    "summarize",
    "write_json_report",
]
