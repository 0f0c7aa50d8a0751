"""Rules evaluated over collected page signals."""

from collections.abc import Iterable
from dataclasses import dataclass

from .models import (
    Classification,
    Finding,
    PasswordAutocompleteMissingSignal,
    Severity,
    Signal,
)


@dataclass(frozen=True)
class ContentRule:
    """Emits one finding when any signal of ``signal_kind`` was collected."""

    signal_kind: str
    finding: Finding


CONTENT_RULES: tuple[ContentRule, ...] = (
    ContentRule(
        signal_kind=PasswordAutocompleteMissingSignal.kind,
        finding=Finding(
            id="PW_AUTOCOMPLETE",
            title="Password input missing autocomplete",
            severity=Severity.INFO,
            classification=Classification(
                owasp="A05:2021 Security Misconfiguration",
                cwe="CWE-16",
            ),
            evidence="Password input has no autocomplete attribute.",
            remediation="Add autocomplete='current-password' or 'new-password'.",
        ),
    ),
)


def evaluate_content(signals: Iterable[Signal] | None) -> list[Finding]:
    """Evaluate content rules; ``None`` means no signals were available."""
    if signals is None:
        return []
    kinds = {signal.kind for signal in signals}
    return [rule.finding for rule in CONTENT_RULES if rule.signal_kind in kinds]
