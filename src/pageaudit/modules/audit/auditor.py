"""Audit orchestration: gather state and signals, evaluate, rank."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pageaudit.utils.debug import debug_print

from .content_rules import evaluate_content
from .header_rules import evaluate_headers
from .messages import MessageRouter, SignalCollectionRequest, StateQuery
from .models import (
    AuditResult,
    ContentAudit,
    DomXssInlineSignal,
    FormPostsToHttpSignal,
    InlineHandlerSignal,
    MixedContentSignal,
    PasswordAutocompleteMissingSignal,
    PasswordViaGetSignal,
    SignalCollectionFailed,
    TabnabbingSignal,
    TargetState,
    TokenInUrlSignal,
    signal_from_dict,
)
from .normalize import normalize

logger = logging.getLogger(__name__)

DEFAULT_COLLECT_TIMEOUT = 5.0

FORM_ISSUE_KINDS = frozenset(
    {
        FormPostsToHttpSignal.kind,
        PasswordViaGetSignal.kind,
        PasswordAutocompleteMissingSignal.kind,
    }
)


def _content_from_reply(reply: dict[str, Any]) -> ContentAudit | None:
    """Rebuild the content audit from the reply's flat ``signals`` list.

    ``data`` only contributes the page metadata.
    """
    raw_signals = reply.get("signals")
    data = reply.get("data") or {}
    if raw_signals is None and not data:
        return None

    signals = [signal_from_dict(item) for item in raw_signals or []]

    def of_kind(*kinds: str) -> tuple[Any, ...]:
        return tuple(signal for signal in signals if signal.kind in kinds)

    return ContentAudit(
        url=str(data.get("url", "")),
        origin=str(data.get("origin", "")),
        protocol=str(data.get("protocol", "")),
        timestamp=float(data.get("ts") or 0.0),
        mixed_content=of_kind(MixedContentSignal.kind),
        form_issues=of_kind(*FORM_ISSUE_KINDS),
        url_leakage=of_kind(TokenInUrlSignal.kind),
        dom_xss_inline=of_kind(DomXssInlineSignal.kind),
        tabnabbing=of_kind(TabnabbingSignal.kind),
        inline_handlers=of_kind(InlineHandlerSignal.kind),
    )


class Auditor:
    """Runs one audit against a target through the message router."""

    def __init__(self, router: MessageRouter, collect_timeout: float = DEFAULT_COLLECT_TIMEOUT):
        self.router = router
        self.collect_timeout = collect_timeout

    async def _send(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await asyncio.to_thread(self.router.handle, payload)

    async def fetch_state(self, target_id: int) -> TargetState:
        """Query the tracked state; never fails."""
        reply = await self._send({"type": StateQuery.type, "target": target_id})
        return TargetState.from_dict(reply.get("state"))

    async def collect_signals(self, target_id: int) -> ContentAudit | SignalCollectionFailed:
        """Ask the target's document for its signals.

        An unreachable or unresponsive target resolves to a
        ``SignalCollectionFailed`` marker instead of raising.
        """
        payload = {"type": SignalCollectionRequest.type, "target": target_id}
        try:
            reply = await asyncio.wait_for(self._send(payload), timeout=self.collect_timeout)
            if not reply.get("ok"):
                return SignalCollectionFailed(error=str(reply.get("error") or "Unknown error"))
            content = _content_from_reply(reply)
        except TimeoutError:
            return SignalCollectionFailed(
                error=f"Target {target_id} did not respond within {self.collect_timeout:g}s."
            )
        except Exception as exc:
            logger.warning("Signal collection failed for target %s", target_id, exc_info=True)
            return SignalCollectionFailed(error=str(exc) or type(exc).__name__)
        return content or SignalCollectionFailed(error="Target returned no content audit.")

    async def audit(self, target_id: int) -> AuditResult:
        """Audit a target and return ranked findings."""
        state, collected = await asyncio.gather(
            self.fetch_state(target_id),
            self.collect_signals(target_id),
        )

        content: ContentAudit | None = None
        error: str | None = None
        if isinstance(collected, SignalCollectionFailed):
            error = collected.error
            logger.info("Content signals unavailable for target %s: %s", target_id, error)
        else:
            content = collected

        findings = evaluate_headers(state.main_frame)
        findings.extend(evaluate_content(content.signals if content else None))
        ranked = normalize(findings)

        url = (state.main_frame.url if state.main_frame else "") or (content.url if content else "")
        debug_print(
            "audit",
            f"target {target_id}: {len(ranked)} findings",
            URL=url or None,
            Signals=len(content.signals) if content else None,
            Requests=len(state.request_log),
            Error=error,
        )
        return AuditResult(
            target_id=target_id,
            url=url,
            findings=tuple(ranked),
            state=state,
            content=content,
            error=error,
        )
