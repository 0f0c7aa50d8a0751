"""Transport and security-header rules over a main-frame snapshot."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from .document import scheme_of
from .models import Classification, Finding, MainFrame, Severity

A01 = "A01:2021 Broken Access Control"
A02 = "A02:2021 Cryptographic Failures"
A05 = "A05:2021 Security Misconfiguration"


def parse_csp(value: str | None) -> dict[str, list[str]]:
    """Split a Content-Security-Policy into ``{directive: [values]}``.

    Directive names are lower-cased; a repeated directive keeps its last
    occurrence.
    """
    directives: dict[str, list[str]] = {}
    for part in (value or "").split(";"):
        tokens = part.strip().split()
        if not tokens:
            continue
        name, *values = tokens
        directives[name.lower()] = values
    return directives


@dataclass(frozen=True)
class HeaderContext:
    """What the rules see of one main-frame response."""

    url: str
    scheme: str
    headers: dict[str, str]
    csp_raw: str
    csp: dict[str, list[str]]

    @classmethod
    def from_main_frame(cls, main_frame: MainFrame) -> HeaderContext:
        headers = dict(main_frame.headers)
        csp_raw = headers.get("content-security-policy", "")
        return cls(
            url=main_frame.url,
            scheme=scheme_of(main_frame.url),
            headers=headers,
            csp_raw=csp_raw,
            csp=parse_csp(csp_raw),
        )

    def has(self, name: str) -> bool:
        return bool(self.headers.get(name))

    @property
    def script_sources(self) -> str:
        values = self.csp.get("script-src") or self.csp.get("default-src") or []
        return " ".join(values)


@dataclass(frozen=True)
class HeaderRule:
    """One row of the header rule table."""

    id: str
    title: str
    severity: Severity
    classification: Classification
    remediation: str
    applies: Callable[[HeaderContext], bool]
    evidence: Callable[[HeaderContext], str]

    def evaluate(self, context: HeaderContext) -> Finding | None:
        if not self.applies(context):
            return None
        return Finding(
            id=self.id,
            title=self.title,
            severity=self.severity,
            classification=self.classification,
            evidence=self.evidence(context),
            remediation=self.remediation,
        )


def _csp_is_unsafe(context: HeaderContext) -> bool:
    if not context.csp_raw:
        return False
    sources = context.script_sources
    return "'unsafe-inline'" in sources or "'unsafe-eval'" in sources


def _nosniff_missing(context: HeaderContext) -> bool:
    value = context.headers.get("x-content-type-options", "")
    return not value or value.lower() != "nosniff"


HTTP_IN_USE = HeaderRule(
    id="HTTP_IN_USE",
    title="Site served over HTTP (no transport encryption)",
    severity=Severity.HIGH,
    classification=Classification(owasp=A02, cwe="CWE-319"),
    remediation="Serve the site over HTTPS and redirect HTTP to HTTPS.",
    applies=lambda ctx: ctx.scheme == "http",
    evidence=lambda ctx: f"Main document URL uses HTTP: {ctx.url}",
)

HEADER_RULES: tuple[HeaderRule, ...] = (
    HTTP_IN_USE,
    HeaderRule(
        id="HSTS_MISSING",
        title="HSTS missing",
        severity=Severity.MEDIUM,
        classification=Classification(owasp=A05, cwe="CWE-319"),
        remediation="Add Strict-Transport-Security header.",
        applies=lambda ctx: ctx.scheme == "https" and not ctx.has("strict-transport-security"),
        evidence=lambda ctx: "Strict-Transport-Security header not present.",
    ),
    HeaderRule(
        id="CSP_MISSING",
        title="Content-Security-Policy missing",
        severity=Severity.HIGH,
        classification=Classification(owasp=A05, cwe="CWE-693"),
        remediation="Define a restrictive Content-Security-Policy.",
        applies=lambda ctx: not ctx.csp_raw,
        evidence=lambda ctx: "No CSP header present.",
    ),
    HeaderRule(
        id="CSP_UNSAFE",
        title="CSP allows unsafe-inline or unsafe-eval",
        severity=Severity.HIGH,
        classification=Classification(owasp=A05, cwe="CWE-693"),
        remediation="Remove unsafe-inline / unsafe-eval. Use nonces or hashes.",
        applies=_csp_is_unsafe,
        evidence=lambda ctx: ctx.csp_raw,
    ),
    HeaderRule(
        id="CLICKJACKING_RISK",
        title="No clickjacking protection",
        severity=Severity.MEDIUM,
        classification=Classification(owasp=A01, cwe="CWE-1021"),
        remediation="Add frame-ancestors 'none' or X-Frame-Options: DENY.",
        # Raw substring test on the header text, not the parsed directives.
        applies=lambda ctx: (
            not ctx.has("x-frame-options")
            and not re.search("frame-ancestors", ctx.csp_raw, re.IGNORECASE)
        ),
        evidence=lambda ctx: "Missing X-Frame-Options and frame-ancestors.",
    ),
    HeaderRule(
        id="NOSNIFF_MISSING",
        title="X-Content-Type-Options missing",
        severity=Severity.LOW,
        classification=Classification(owasp=A05, cwe="CWE-693"),
        remediation="Set X-Content-Type-Options: nosniff.",
        applies=_nosniff_missing,
        evidence=lambda ctx: "x-content-type-options missing or incorrect.",
    ),
    HeaderRule(
        id="REFERRER_POLICY_MISSING",
        title="Referrer-Policy missing",
        severity=Severity.LOW,
        classification=Classification(owasp=A05, cwe="CWE-200"),
        remediation="Set Referrer-Policy: strict-origin-when-cross-origin.",
        applies=lambda ctx: not ctx.has("referrer-policy"),
        evidence=lambda ctx: "No Referrer-Policy header present.",
    ),
    HeaderRule(
        id="PERMISSIONS_POLICY_MISSING",
        title="Permissions-Policy missing",
        severity=Severity.LOW,
        classification=Classification(owasp=A05, cwe="CWE-693"),
        remediation="Define a Permissions-Policy header.",
        applies=lambda ctx: not ctx.has("permissions-policy"),
        evidence=lambda ctx: "No Permissions-Policy header present.",
    ),
)

if len({rule.id for rule in HEADER_RULES}) != len(HEADER_RULES):
    raise RuntimeError("Duplicate header rule id")


def evaluate_headers(main_frame: MainFrame | None) -> list[Finding]:
    """Evaluate the header rule table against a main-frame snapshot.

    Every rule is evaluated independently. Transport rules gate themselves on
    the document scheme, so ``HSTS_MISSING`` only fires for HTTPS documents.
    """
    if main_frame is None:
        return []

    context = HeaderContext.from_main_frame(main_frame)
    findings: list[Finding] = []
    for rule in HEADER_RULES:
        finding = rule.evaluate(context)
        if finding is not None:
            findings.append(finding)
    return findings
