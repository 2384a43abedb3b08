"""Parsing of inbound websocket command messages."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

from contracts.ui_protocol import COMMAND_ACTIONS, COMMAND_START, MESSAGE_COMMAND


class CommandError(Exception):
    """Raised when a websocket client sends a malformed command."""


@dataclass(frozen=True)
class SessionCommand:
    """A user gesture forwarded from a UI client to the runtime."""
    action: str
    duration_minutes: Optional[int] = None
    title: Optional[str] = None


def parse_command(raw: str | bytes) -> SessionCommand:
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as error:
        raise CommandError(f"Command must be valid JSON: {error}") from error

    if not isinstance(payload, dict):
        raise CommandError("Command must be a JSON object.")
    if payload.get("type") != MESSAGE_COMMAND:
        raise CommandError(f"Unsupported message type: {payload.get('type')!r}")

    action = payload.get("action")
    if not isinstance(action, str) or action.strip().lower() not in COMMAND_ACTIONS:
        allowed = ", ".join(sorted(COMMAND_ACTIONS))
        raise CommandError(f"Command action must be one of: {allowed}")
    action = action.strip().lower()

    if action != COMMAND_START:
        return SessionCommand(action=action)

    return SessionCommand(
        action=action,
        duration_minutes=_as_minutes(payload.get("duration_minutes")),
        title=_as_title(payload.get("title")),
    )


def _as_minutes(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise CommandError("duration_minutes must be an integer.")
    if value <= 0:
        raise CommandError("duration_minutes must be greater than zero.")
    return value


def _as_title(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise CommandError("title must be a string.")
    return value.strip() or None
