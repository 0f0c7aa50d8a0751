"""Data models for audit findings, tracked target state and page signals."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar

from pageaudit.errors import UnknownSignalKindError


class Severity(Enum):
    """Finding severity, totally ordered by ``rank``."""

    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    INFO = "Info"

    @property
    def label(self) -> str:
        return self.value

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def from_label(cls, label: str) -> Severity:
        """Parse a severity label case-insensitively."""
        for member in cls:
            if member.value.lower() == str(label).strip().lower():
                return member
        raise ValueError(f"Unknown severity: {label!r}")


_SEVERITY_RANK: dict[Severity, int] = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
    Severity.INFO: 0,
}

# A new severity without a rank must fail at import, not at ranking time.
_unranked = set(Severity) - set(_SEVERITY_RANK)
if _unranked:
    raise RuntimeError(f"Severity members without rank: {sorted(m.name for m in _unranked)}")

SEVERITY_ORDER: tuple[Severity, ...] = tuple(
    sorted(Severity, key=lambda member: member.rank, reverse=True)
)


@dataclass(frozen=True, slots=True)
class Classification:
    """OWASP category label and CWE identifier, carried through unchanged."""

    owasp: str
    cwe: str


@dataclass(frozen=True, slots=True)
class Finding:
    """A ranked audit result ready for presentation."""

    id: str
    title: str
    severity: Severity
    classification: Classification
    evidence: str = ""
    remediation: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "title": self.title,
            "severity": self.severity.label,
            "owasp": self.classification.owasp,
            "cwe": self.classification.cwe,
            "evidence": self.evidence,
            "remediation": self.remediation,
        }


@dataclass(frozen=True, slots=True)
class MainFrame:
    """Transport metadata of the top-level document response."""

    url: str
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def header(self, name: str) -> str:
        """Return a header value by case-insensitive name, or ``""``."""
        return self.headers.get(name.lower(), "")

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "statusCode": self.status_code, "headers": dict(self.headers)}


@dataclass(frozen=True, slots=True)
class RequestEntry:
    """A completed subresource load."""

    url: str
    resource_type: str

    def to_dict(self) -> dict[str, str]:
        return {"url": self.url, "type": self.resource_type}


@dataclass(frozen=True, slots=True)
class TargetState:
    """Read-only snapshot of what has been observed for one target."""

    main_frame: MainFrame | None = None
    request_log: tuple[RequestEntry, ...] = ()

    @classmethod
    def empty(cls) -> TargetState:
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.main_frame is None and not self.request_log

    def to_dict(self) -> dict[str, Any]:
        return {
            "mainFrame": self.main_frame.to_dict() if self.main_frame else None,
            "requests": [entry.to_dict() for entry in self.request_log],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> TargetState:
        """Rebuild a snapshot from its wire form; tolerates missing keys."""
        if not data:
            return cls.empty()
        frame_data = data.get("mainFrame")
        main_frame = None
        if frame_data:
            main_frame = MainFrame(
                url=str(frame_data.get("url", "")),
                status_code=int(frame_data.get("statusCode") or 0),
                headers=dict(frame_data.get("headers") or {}),
            )
        entries = tuple(
            RequestEntry(url=str(item.get("url", "")), resource_type=str(item.get("type", "")))
            for item in data.get("requests") or []
        )
        return cls(main_frame=main_frame, request_log=entries)


# --- Signals -----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MixedContentSignal:
    """An HTTP subresource on an HTTPS page."""

    kind: ClassVar[str] = "MIXED_CONTENT"

    element: str
    attr: str
    url: str
    evidence: str


@dataclass(frozen=True, slots=True)
class FormPostsToHttpSignal:
    kind: ClassVar[str] = "FORM_POSTS_TO_HTTP"

    url: str
    method: str
    evidence: str


@dataclass(frozen=True, slots=True)
class PasswordViaGetSignal:
    kind: ClassVar[str] = "PASSWORD_SENT_VIA_GET"

    evidence: str


@dataclass(frozen=True, slots=True)
class PasswordAutocompleteMissingSignal:
    kind: ClassVar[str] = "PASSWORD_AUTOCOMPLETE_MISSING"

    evidence: str


@dataclass(frozen=True, slots=True)
class TokenInUrlSignal:
    kind: ClassVar[str] = "TOKEN_IN_URL"

    pattern: str
    evidence: str


@dataclass(frozen=True, slots=True)
class DomXssInlineSignal:
    """An inline script naming both a DOM sink and a taint source."""

    kind: ClassVar[str] = "DOM_XSS_SOURCE_TO_SINK_INLINE"

    source: str
    sink: str
    evidence: str


@dataclass(frozen=True, slots=True)
class TabnabbingSignal:
    kind: ClassVar[str] = "TABNABBING_RISK"

    href: str
    evidence: str


@dataclass(frozen=True, slots=True)
class InlineHandlerSignal:
    kind: ClassVar[str] = "INLINE_EVENT_HANDLER"

    attr: str
    evidence: str


Signal = (
    MixedContentSignal
    | FormPostsToHttpSignal
    | PasswordViaGetSignal
    | PasswordAutocompleteMissingSignal
    | TokenInUrlSignal
    | DomXssInlineSignal
    | TabnabbingSignal
    | InlineHandlerSignal
)

SIGNAL_TYPES: dict[str, type] = {
    cls.kind: cls
    for cls in (
        MixedContentSignal,
        FormPostsToHttpSignal,
        PasswordViaGetSignal,
        PasswordAutocompleteMissingSignal,
        TokenInUrlSignal,
        DomXssInlineSignal,
        TabnabbingSignal,
        InlineHandlerSignal,
    )
}


def signal_to_dict(signal: Signal) -> dict[str, str]:
    """Serialize a signal with its ``kind`` discriminator first."""
    return {"kind": signal.kind, **asdict(signal)}


def signal_from_dict(data: Mapping[str, Any]) -> Signal:
    """Rebuild a signal from its wire form."""
    kind = data.get("kind")
    cls = SIGNAL_TYPES.get(kind) if isinstance(kind, str) else None
    if cls is None:
        raise UnknownSignalKindError(f"Unknown signal kind: {kind!r}")
    fields = {key: str(value) for key, value in data.items() if key != "kind"}
    try:
        return cls(**fields)
    except TypeError as exc:
        raise UnknownSignalKindError(f"Malformed {kind} signal: {exc}") from exc


@dataclass(frozen=True, slots=True)
class ContentAudit:
    """Everything the page signal collector found in one document."""

    url: str
    origin: str
    protocol: str
    timestamp: float
    mixed_content: tuple[MixedContentSignal, ...] = ()
    form_issues: tuple[Signal, ...] = ()
    url_leakage: tuple[TokenInUrlSignal, ...] = ()
    dom_xss_inline: tuple[DomXssInlineSignal, ...] = ()
    tabnabbing: tuple[TabnabbingSignal, ...] = ()
    inline_handlers: tuple[InlineHandlerSignal, ...] = ()

    @property
    def signals(self) -> tuple[Signal, ...]:
        return (
            *self.mixed_content,
            *self.form_issues,
            *self.url_leakage,
            *self.dom_xss_inline,
            *self.tabnabbing,
            *self.inline_handlers,
        )

    def to_dict(self) -> dict[str, Any]:
        def dump(items: tuple[Signal, ...]) -> list[dict[str, str]]:
            return [signal_to_dict(item) for item in items]

        return {
            "url": self.url,
            "origin": self.origin,
            "protocol": self.protocol,
            "ts": self.timestamp,
            "mixedContent": dump(self.mixed_content),
            "formIssues": dump(self.form_issues),
            "urlLeakage": dump(self.url_leakage),
            "domXssInline": dump(self.dom_xss_inline),
            "tabnabbing": dump(self.tabnabbing),
            "inlineHandlers": dump(self.inline_handlers),
        }


@dataclass(frozen=True, slots=True)
class SignalCollectionFailed:
    """Marker returned when the target's document could not be reached."""

    error: str


@dataclass(frozen=True, slots=True)
class AuditResult:
    """Final output of one audit run."""

    target_id: int
    url: str
    findings: tuple[Finding, ...]
    state: TargetState
    content: ContentAudit | None = None
    error: str | None = None

    @property
    def degraded(self) -> bool:
        """True when content signals were unavailable."""
        return self.error is not None
