"""Per-target observation state fed by navigation and network events."""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .models import MainFrame, RequestEntry, TargetState

logger = logging.getLogger(__name__)

REQUEST_LOG_LIMIT = 300


@dataclass
class _TargetRecord:
    main_frame: MainFrame | None = None
    requests: deque[RequestEntry] = field(default_factory=lambda: deque(maxlen=REQUEST_LOG_LIMIT))
    lock: threading.Lock = field(default_factory=threading.Lock)

    def snapshot(self) -> TargetState:
        with self.lock:
            return TargetState(main_frame=self.main_frame, request_log=tuple(self.requests))


def _valid_target(target_id: Any) -> bool:
    return isinstance(target_id, int) and not isinstance(target_id, bool) and target_id >= 0


def normalize_headers(raw_headers: Iterable[Any] | Mapping[str, str] | None) -> dict[str, str]:
    """Lower-case header names; the last occurrence of a repeated header wins.

    Accepts a mapping, ``{"name", "value"}`` dicts or ``(name, value)`` pairs.
    Entries without a name are skipped and missing values become ``""``.
    """
    if raw_headers is None:
        return {}
    if isinstance(raw_headers, Mapping):
        raw_headers = raw_headers.items()

    headers: dict[str, str] = {}
    for item in raw_headers:
        if isinstance(item, Mapping):
            name, value = item.get("name"), item.get("value")
        else:
            name, value = item
        if not name:
            continue
        headers[str(name).lower()] = "" if value is None else str(value)
    return headers


class TargetStateTracker:
    """Owns the observed state of every browsing target.

    Create one per process and pass it to whatever consumes the event feeds.
    Callers only ever receive frozen ``TargetState`` snapshots.
    """

    def __init__(self) -> None:
        self._targets: dict[int, _TargetRecord] = {}
        self._registry_lock = threading.Lock()

    def _ensure(self, target_id: int) -> _TargetRecord:
        with self._registry_lock:
            record = self._targets.get(target_id)
            if record is None:
                record = _TargetRecord()
                self._targets[target_id] = record
            return record

    def on_navigation_start(self, target_id: int, frame_depth: int) -> None:
        """Reset a target when its top-level frame starts navigating."""
        if not _valid_target(target_id) or frame_depth != 0:
            return
        with self._registry_lock:
            self._targets[target_id] = _TargetRecord()
        logger.debug("Reset state for target %s", target_id)

    def on_main_frame_headers(
        self,
        target_id: int,
        url: str,
        status_code: int,
        raw_headers: Iterable[Any] | Mapping[str, str] | None,
    ) -> None:
        """Replace the target's main-frame snapshot."""
        if not _valid_target(target_id):
            return
        main_frame = MainFrame(
            url=url or "",
            status_code=int(status_code or 0),
            headers=normalize_headers(raw_headers),
        )
        record = self._ensure(target_id)
        with record.lock:
            record.main_frame = main_frame

    def on_request_completed(self, target_id: int, url: str, resource_type: str) -> None:
        """Append a completed load; the oldest entries fall off past the limit."""
        if not _valid_target(target_id):
            return
        record = self._ensure(target_id)
        with record.lock:
            record.requests.append(RequestEntry(url=url or "", resource_type=resource_type or ""))

    def on_target_closed(self, target_id: int) -> None:
        with self._registry_lock:
            removed = self._targets.pop(target_id, None)
        if removed is not None:
            logger.debug("Dropped state for closed target %s", target_id)

    def get_state(self, target_id: int) -> TargetState:
        """Return a snapshot, or the empty default for unknown targets."""
        if not _valid_target(target_id):
            return TargetState.empty()
        with self._registry_lock:
            record = self._targets.get(target_id)
        if record is None:
            return TargetState.empty()
        return record.snapshot()

    def known_targets(self) -> list[int]:
        with self._registry_lock:
            return sorted(self._targets)
