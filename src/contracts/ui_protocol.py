"""Web UI websocket event, command, and field constants."""

from __future__ import annotations

# Server -> client event types
EVENT_HELLO = "hello"
EVENT_SESSION = "session"
EVENT_COMPLETION = "completion"
EVENT_ERROR = "error"

# Client -> server message types
MESSAGE_COMMAND = "command"

COMMAND_START = "start"
COMMAND_PAUSE = "pause"
COMMAND_RESUME = "resume"
COMMAND_RESET = "reset"
COMMAND_CANCEL = "cancel"
COMMAND_ACKNOWLEDGE = "acknowledge"

COMMAND_ACTIONS: frozenset[str] = frozenset(
    {
        COMMAND_START,
        COMMAND_PAUSE,
        COMMAND_RESUME,
        COMMAND_RESET,
        COMMAND_CANCEL,
        COMMAND_ACKNOWLEDGE,
    }
)

# Session actions after which a pending completion notice is no longer shown.
COMPLETION_CLEARING_ACTIONS: frozenset[str] = frozenset(
    {COMMAND_START, COMMAND_CANCEL, COMMAND_ACKNOWLEDGE}
)

STICKY_EVENT_TYPES: frozenset[str] = frozenset({EVENT_SESSION, EVENT_COMPLETION})

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_SESSION,
    EVENT_COMPLETION,
)
