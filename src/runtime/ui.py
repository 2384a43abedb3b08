from __future__ import annotations

from typing import Any, Optional, Protocol

from workout_timer import SessionSnapshot
from contracts.ui_protocol import EVENT_COMPLETION, EVENT_ERROR, EVENT_SESSION

from .messages import COMPLETION_TITLE, completion_message, status_message


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...


class RuntimeUIPublisher:
    def __init__(self, ui_server: Optional[UIServerLike]):
        self._ui_server = ui_server

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def publish_session_update(
        self,
        snapshot: SessionSnapshot,
        *,
        action: str,
        accepted: Optional[bool] = None,
        reason: str = "",
    ) -> None:
        payload: dict[str, Any] = {
            "action": action,
            "state": snapshot.state,
            "title": snapshot.title,
            "total_seconds": snapshot.total_seconds,
            "remaining_seconds": snapshot.remaining_seconds,
            "countdown_value": snapshot.countdown_value,
            "display": snapshot.display,
            "progress": round(snapshot.progress, 4),
            "message": status_message(snapshot),
        }
        if accepted is not None:
            payload["accepted"] = accepted
        if reason:
            payload["reason"] = reason
        self.publish(EVENT_SESSION, **payload)

    def publish_completion(self, snapshot: SessionSnapshot) -> None:
        self.publish(
            EVENT_COMPLETION,
            title=COMPLETION_TITLE,
            workout=snapshot.title,
            message=completion_message(snapshot),
        )

    def publish_error(self, message: str) -> None:
        self.publish(EVENT_ERROR, message=message)
