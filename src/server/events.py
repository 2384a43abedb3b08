"""Event serialization and the replay cache for late-joining UI clients."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from typing import Any, Callable

from contracts.ui_protocol import (
    COMPLETION_CLEARING_ACTIONS,
    EVENT_COMPLETION,
    EVENT_SESSION,
    STICKY_EVENT_ORDER,
    STICKY_EVENT_TYPES,
)


def make_event(
    event_type: str,
    *,
    now_fn: Callable[[], datetime] | None = None,
    **payload: Any,
) -> str:
    """Serialize an event as `{"type", "timestamp", **payload}` JSON."""
    now = now_fn() if now_fn is not None else datetime.now(timezone.utc)
    return json.dumps({"type": event_type, "timestamp": now.isoformat(), **payload})


class StickyEventStore:
    """Latest session snapshot and pending completion notice, replayed on connect.

    A completion notice stays until a session event reports that the finished
    workout was acknowledged, cancelled, or replaced by a new start.
    """

    def __init__(self):
        self._events: dict[str, str] = {}
        self._lock = threading.Lock()

    def remember(self, event_type: str, message: str) -> None:
        if event_type not in STICKY_EVENT_TYPES:
            return
        clears_completion = (
            event_type == EVENT_SESSION
            and _accepted_action(message) in COMPLETION_CLEARING_ACTIONS
        )
        with self._lock:
            self._events[event_type] = message
            if clears_completion:
                self._events.pop(EVENT_COMPLETION, None)

    def snapshot(self) -> list[str]:
        with self._lock:
            return [self._events[key] for key in STICKY_EVENT_ORDER if key in self._events]


def _accepted_action(message: str) -> str:
    try:
        payload = json.loads(message)
    except ValueError:
        return ""
    if not isinstance(payload, dict) or payload.get("accepted") is False:
        return ""
    action = payload.get("action")
    return action if isinstance(action, str) else ""
