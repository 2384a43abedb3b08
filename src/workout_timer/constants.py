"""State, action, effect, and reason constants used by the session controller."""

from __future__ import annotations

COUNTDOWN_STEPS = 3
DEFAULT_TICK_INTERVAL_MS = 1000
MAX_TITLE_LENGTH = 60

STATE_IDLE = "idle"
STATE_COUNTDOWN = "countdown"
STATE_RUNNING = "running"
STATE_PAUSED = "paused"
STATE_COMPLETED = "completed"

ACTIVE_STATES: frozenset[str] = frozenset(
    {STATE_COUNTDOWN, STATE_RUNNING, STATE_PAUSED, STATE_COMPLETED}
)

ACTION_START = "start"
ACTION_PAUSE = "pause"
ACTION_RESUME = "resume"
ACTION_RESET = "reset"
ACTION_CANCEL = "cancel"
ACTION_ACKNOWLEDGE = "acknowledge"

ACTION_TICK = "tick"
ACTION_COUNTDOWN = "countdown"
ACTION_COMPLETED = "completed"

EFFECT_COUNTDOWN_CUE = "countdown_cue"
EFFECT_AMBIENT_TICK = "ambient_tick"
EFFECT_COMPLETION = "completion"

ALL_EFFECTS: tuple[str, ...] = (
    EFFECT_COUNTDOWN_CUE,
    EFFECT_AMBIENT_TICK,
    EFFECT_COMPLETION,
)
# Terminal feedback survives the transition that started it until acknowledged.
TERMINAL_EFFECTS: frozenset[str] = frozenset({EFFECT_COMPLETION})

DEFAULT_HAPTIC_PATTERN_MS: tuple[int, ...] = (0, 500, 500, 500, 500, 500, 500, 500, 500)

REASON_STARTED = "started"
REASON_PAUSED = "paused"
REASON_RESUMED = "resumed"
REASON_RESET = "reset"
REASON_CANCELLED = "cancelled"
REASON_ACKNOWLEDGED = "acknowledged"
REASON_TICK = "tick"
REASON_COUNTDOWN_FINISHED = "countdown_finished"
REASON_COMPLETED = "completed"
REASON_NOT_RUNNING = "not_running"
REASON_NOT_PAUSED = "not_paused"
REASON_NOT_ACTIVE = "not_active"
REASON_NOT_COMPLETED = "not_completed"
