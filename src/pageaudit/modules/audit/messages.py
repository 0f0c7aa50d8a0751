"""Message kinds exchanged with the tracker and the document endpoint.

Incoming envelopes are loosely typed dicts carrying a ``type`` key.
``parse_message`` turns them into one of a closed set of message classes and
``MessageRouter`` dispatches on that set exhaustively.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pageaudit.errors import UnknownMessageError

from .collector import collect
from .document import PageDocument
from .models import signal_to_dict
from .tracker import TargetStateTracker

logger = logging.getLogger(__name__)

DOCUMENT_LEVEL = "document-level"
# Resource kinds that count as the top-level document.
DOCUMENT_LEVEL_KINDS = frozenset({DOCUMENT_LEVEL, "main_frame"})


@dataclass(frozen=True, slots=True)
class StateQuery:
    type = "GET_TAB_STATE"

    target: int


@dataclass(frozen=True, slots=True)
class SignalCollectionRequest:
    type = "RUN_CONTENT_AUDIT"

    target: int


@dataclass(frozen=True, slots=True)
class NavigationEvent:
    type = "NAVIGATION_START"

    target_id: int
    frame_depth: int


@dataclass(frozen=True, slots=True)
class HeadersEvent:
    type = "HEADERS_RECEIVED"

    target_id: int
    resource_kind: str
    url: str
    status_code: int
    headers: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True, slots=True)
class RequestCompletedEvent:
    type = "REQUEST_COMPLETED"

    target_id: int
    url: str
    resource_kind: str


@dataclass(frozen=True, slots=True)
class TargetClosedEvent:
    type = "TARGET_CLOSED"

    target_id: int


Message = (
    StateQuery
    | SignalCollectionRequest
    | NavigationEvent
    | HeadersEvent
    | RequestCompletedEvent
    | TargetClosedEvent
)


def _int_field(payload: Mapping[str, Any], *names: str) -> int:
    for name in names:
        if name in payload:
            value = payload[name]
            if isinstance(value, bool):
                break
            try:
                return int(value)
            except (TypeError, ValueError):
                break
    raise UnknownMessageError(f"Message field {names[0]!r} must be an integer")


def _header_pairs(raw: Any) -> tuple[tuple[str, str], ...]:
    pairs: list[tuple[str, str]] = []
    for item in raw or ():
        if isinstance(item, Mapping):
            name, value = item.get("name"), item.get("value")
        else:
            name, value = item
        if not name:
            continue
        pairs.append((str(name), "" if value is None else str(value)))
    return tuple(pairs)


def parse_message(payload: Any) -> Message:
    """Parse a loosely-typed envelope into a message object."""
    if not isinstance(payload, Mapping):
        raise UnknownMessageError("Message must be a mapping")

    kind = payload.get("type")
    if kind == StateQuery.type:
        return StateQuery(target=_int_field(payload, "target", "tabId"))
    if kind == SignalCollectionRequest.type:
        return SignalCollectionRequest(target=_int_field(payload, "target", "tabId"))
    if kind == NavigationEvent.type:
        return NavigationEvent(
            target_id=_int_field(payload, "targetId", "target_id"),
            frame_depth=_int_field(payload, "frameDepth", "frame_depth"),
        )
    if kind == HeadersEvent.type:
        return HeadersEvent(
            target_id=_int_field(payload, "targetId", "target_id"),
            resource_kind=str(payload.get("resourceKind", "")),
            url=str(payload.get("url", "")),
            status_code=_int_field(payload, "statusCode", "status_code"),
            headers=_header_pairs(payload.get("headers")),
        )
    if kind == RequestCompletedEvent.type:
        return RequestCompletedEvent(
            target_id=_int_field(payload, "targetId", "target_id"),
            url=str(payload.get("url", "")),
            resource_kind=str(payload.get("resourceKind", "")),
        )
    if kind == TargetClosedEvent.type:
        return TargetClosedEvent(target_id=_int_field(payload, "targetId", "target_id"))
    raise UnknownMessageError(f"Unknown message type: {kind!r}")


class DocumentRegistry:
    """Live documents by target id; the content-side endpoint."""

    def __init__(self) -> None:
        self._documents: dict[int, PageDocument] = {}
        self._lock = threading.Lock()

    def attach(self, target_id: int, document: PageDocument) -> None:
        with self._lock:
            self._documents[target_id] = document

    def detach(self, target_id: int) -> None:
        with self._lock:
            self._documents.pop(target_id, None)

    def get(self, target_id: int) -> PageDocument | None:
        with self._lock:
            return self._documents.get(target_id)


class MessageRouter:
    """Dispatch messages to the tracker and the document registry."""

    def __init__(self, tracker: TargetStateTracker, documents: DocumentRegistry | None = None):
        self.tracker = tracker
        self.documents = documents or DocumentRegistry()

    def handle(self, payload: Any) -> dict[str, Any]:
        """Parse and dispatch an envelope, replying with an error on rejection."""
        try:
            message = parse_message(payload)
        except UnknownMessageError as exc:
            logger.warning("Rejected message: %s", exc)
            return {"ok": False, "error": str(exc)}
        return self.dispatch(message)

    def dispatch(self, message: Message) -> dict[str, Any]:
        match message:
            case StateQuery(target=target):
                return {"ok": True, "state": self.tracker.get_state(target).to_dict()}
            case SignalCollectionRequest(target=target):
                return self._collect(target)
            case NavigationEvent(target_id=target_id, frame_depth=frame_depth):
                self.tracker.on_navigation_start(target_id, frame_depth)
                if frame_depth == 0:
                    self.documents.detach(target_id)
                return {"ok": True}
            case HeadersEvent():
                if message.resource_kind in DOCUMENT_LEVEL_KINDS:
                    self.tracker.on_main_frame_headers(
                        message.target_id,
                        message.url,
                        message.status_code,
                        message.headers,
                    )
                return {"ok": True}
            case RequestCompletedEvent(target_id=target_id, url=url, resource_kind=kind):
                self.tracker.on_request_completed(target_id, url, kind)
                return {"ok": True}
            case TargetClosedEvent(target_id=target_id):
                self.tracker.on_target_closed(target_id)
                self.documents.detach(target_id)
                return {"ok": True}
            case _:
                raise UnknownMessageError(f"Unhandled message: {message!r}")

    def _collect(self, target: int) -> dict[str, Any]:
        document = self.documents.get(target)
        if document is None:
            return {"ok": False, "error": f"Could not establish connection to target {target}."}
        audit = collect(document)
        return {
            "ok": True,
            "signals": [signal_to_dict(signal) for signal in audit.signals],
            "data": audit.to_dict(),
        }
