"""Audit module for PageAudit - page signals, header rules and ranked findings."""

from .auditor import Auditor
from .collector import collect
from .content_rules import CONTENT_RULES, evaluate_content
from .document import PageDocument
from .evidence import locate
from .header_rules import HEADER_RULES, evaluate_headers, parse_csp
from .loader import PageLoader
from .main import AuditConfig, audit_url
from .messages import DocumentRegistry, MessageRouter, parse_message
from .models import (
    AuditResult,
    Classification,
    ContentAudit,
    Finding,
    MainFrame,
    RequestEntry,
    Severity,
    SignalCollectionFailed,
    TargetState,
)
from .normalize import normalize
from .tracker import REQUEST_LOG_LIMIT, TargetStateTracker

__all__ = [
    "AuditConfig",
    "AuditResult",
    "Auditor",
    "CONTENT_RULES",
    "Classification",
    "ContentAudit",
    "DocumentRegistry",
    "Finding",
    "HEADER_RULES",
    "MainFrame",
    "MessageRouter",
    "PageDocument",
    "PageLoader",
    "REQUEST_LOG_LIMIT",
    "RequestEntry",
    "Severity",
    "SignalCollectionFailed",
    "TargetState",
    "TargetStateTracker",
    "audit_url",
    "collect",
    "evaluate_content",
    "evaluate_headers",
    "locate",
    "normalize",
    "parse_csp",
]
