"""Status, completion, and rejection text builders for session flows."""

from __future__ import annotations

from workout_timer import SessionSnapshot
from workout_timer.constants import (
    ACTION_ACKNOWLEDGE,
    ACTION_PAUSE,
    ACTION_RESET,
    ACTION_RESUME,
    REASON_NOT_ACTIVE,
    REASON_NOT_COMPLETED,
    REASON_NOT_PAUSED,
    REASON_NOT_RUNNING,
    STATE_COMPLETED,
    STATE_COUNTDOWN,
    STATE_PAUSED,
    STATE_RUNNING,
)

COMPLETION_TITLE = "Workout Complete!"


def completion_message(snapshot: SessionSnapshot) -> str:
    if snapshot.title:
        return f"You've completed your {snapshot.title} workout!"
    return "You've completed your workout!"


def status_message(snapshot: SessionSnapshot) -> str:
    """Build a one-line status for the current session snapshot."""
    if snapshot.state == STATE_COUNTDOWN:
        return f"Starting in {snapshot.countdown_value}"
    if snapshot.state == STATE_RUNNING:
        return f"Workout running ({snapshot.display} remaining)"
    if snapshot.state == STATE_PAUSED:
        return f"Workout paused ({snapshot.display} remaining)"
    if snapshot.state == STATE_COMPLETED:
        return "Workout complete"
    return "Ready"


def rejection_text(action: str, reason: str) -> str:
    if reason == REASON_NOT_RUNNING and action == ACTION_PAUSE:
        return "Nothing to pause: the workout is not running."
    if reason == REASON_NOT_PAUSED and action == ACTION_RESUME:
        return "Nothing to resume: the workout is not paused."
    if reason == REASON_NOT_ACTIVE and action == ACTION_RESET:
        return "Only a running or paused workout can be reset."
    if reason == REASON_NOT_ACTIVE:
        return "No workout is active."
    if reason == REASON_NOT_COMPLETED and action == ACTION_ACKNOWLEDGE:
        return "There is no finished workout to acknowledge."
    return f"Cannot {action} right now."
