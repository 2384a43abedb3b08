"""Single-threaded workout session state machine driven by a tick scheduler."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from clock_display import format_clock

from .constants import (
    ACTION_ACKNOWLEDGE,
    ACTION_CANCEL,
    ACTION_COMPLETED,
    ACTION_COUNTDOWN,
    ACTION_PAUSE,
    ACTION_RESET,
    ACTION_RESUME,
    ACTION_START,
    ACTION_TICK,
    ACTIVE_STATES,
    COUNTDOWN_STEPS,
    DEFAULT_TICK_INTERVAL_MS,
    EFFECT_AMBIENT_TICK,
    EFFECT_COMPLETION,
    EFFECT_COUNTDOWN_CUE,
    MAX_TITLE_LENGTH,
    REASON_ACKNOWLEDGED,
    REASON_CANCELLED,
    REASON_COMPLETED,
    REASON_COUNTDOWN_FINISHED,
    REASON_NOT_ACTIVE,
    REASON_NOT_COMPLETED,
    REASON_NOT_PAUSED,
    REASON_NOT_RUNNING,
    REASON_PAUSED,
    REASON_RESET,
    REASON_RESUMED,
    REASON_STARTED,
    REASON_TICK,
    STATE_COMPLETED,
    STATE_COUNTDOWN,
    STATE_IDLE,
    STATE_PAUSED,
    STATE_RUNNING,
)
from .contracts import FeedbackCoordinatorLike
from .errors import InvalidDurationError, SchedulerMisuseError
from .scheduler import TickScheduler, TimerHandle

SessionState = Literal["idle", "countdown", "running", "paused", "completed"]
SessionAction = Literal["start", "pause", "resume", "reset", "cancel", "acknowledge"]


@dataclass
class Session:
    """Mutable state of one timed workout; owned by a single controller."""
    total_seconds: int
    remaining_seconds: int
    state: SessionState
    countdown_value: int
    title: Optional[str] = None
    timer: Optional[TimerHandle] = None


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable session view exposed to the runtime and UI publishers."""
    state: SessionState
    title: Optional[str]
    total_seconds: int
    remaining_seconds: int
    countdown_value: int

    @property
    def is_active(self) -> bool:
        return self.state in ACTIVE_STATES

    @property
    def display(self) -> str:
        return format_clock(self.remaining_seconds)

    @property
    def progress(self) -> float:
        if self.total_seconds <= 0:
            return 0.0
        return self.remaining_seconds / self.total_seconds


IDLE_SNAPSHOT = SessionSnapshot(
    state=STATE_IDLE,
    title=None,
    total_seconds=0,
    remaining_seconds=0,
    countdown_value=0,
)


@dataclass(frozen=True)
class SessionActionResult:
    """Result envelope returned after applying a public session operation."""
    action: SessionAction
    accepted: bool
    reason: str
    snapshot: SessionSnapshot


@dataclass(frozen=True)
class SessionUpdate:
    """Notification delivered to the listener after every transition or tick."""
    action: str
    reason: str
    snapshot: SessionSnapshot
    completed: bool = False


SessionListener = Callable[[SessionUpdate], None]


class SessionController:
    """Owns the active session, its tick handle, and its feedback effects.

    Invalid operations never raise: they return a rejected result and leave
    the session untouched. Only `start()` validates input and raises
    `InvalidDurationError`.
    """

    def __init__(
        self,
        *,
        scheduler: TickScheduler,
        feedback: Optional[FeedbackCoordinatorLike] = None,
        listener: Optional[SessionListener] = None,
        tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS,
        strict_scheduling: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        if tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms must be greater than zero")

        self._scheduler = scheduler
        self._feedback = feedback
        self._listener = listener
        self._tick_interval_ms = int(tick_interval_ms)
        self._strict_scheduling = strict_scheduling
        self._logger = logger or logging.getLogger("session")
        self._session: Optional[Session] = None

    def __enter__(self) -> "SessionController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def set_listener(self, listener: Optional[SessionListener]) -> None:
        self._listener = listener

    def current_state(self) -> SessionState:
        return self._session.state if self._session else STATE_IDLE

    def remaining_seconds(self) -> int:
        return self._session.remaining_seconds if self._session else 0

    def countdown_value(self) -> int:
        return self._session.countdown_value if self._session else 0

    def snapshot(self) -> SessionSnapshot:
        session = self._session
        if session is None:
            return IDLE_SNAPSHOT
        return SessionSnapshot(
            state=session.state,
            title=session.title,
            total_seconds=session.total_seconds,
            remaining_seconds=session.remaining_seconds,
            countdown_value=session.countdown_value,
        )

    def start(
        self,
        duration_seconds: int,
        *,
        title: Optional[str] = None,
    ) -> SessionActionResult:
        duration = _validate_duration(duration_seconds)

        if self._session is not None:
            self._logger.info(
                "Discarding %s session before starting a new one",
                self._session.state,
            )
            self._discard_session()
        # A completion tone from an unacknowledged session must not overlap
        # the new countdown.
        self._stop_effect(EFFECT_COMPLETION)

        self._session = Session(
            total_seconds=duration,
            remaining_seconds=duration,
            state=STATE_COUNTDOWN,
            countdown_value=COUNTDOWN_STEPS,
            title=_sanitize_title(title),
        )
        self._arm(self._on_countdown_tick)
        self._start_effect(EFFECT_COUNTDOWN_CUE)
        self._logger.info(
            "Session started: title=%s duration=%ss",
            self._session.title,
            duration,
        )
        self._notify(ACTION_START, REASON_STARTED)
        return self._result(ACTION_START, True, REASON_STARTED)

    def start_workout(
        self,
        duration_minutes: int,
        *,
        title: Optional[str] = None,
    ) -> SessionActionResult:
        """Start a session from a workout record's duration in minutes."""
        minutes = _validate_duration(duration_minutes)
        return self.start(minutes * 60, title=title)

    def pause(self) -> SessionActionResult:
        session = self._session
        if session is None or session.state != STATE_RUNNING:
            return self._result(ACTION_PAUSE, False, REASON_NOT_RUNNING)

        self._disarm()
        session.state = STATE_PAUSED
        self._stop_effect(EFFECT_AMBIENT_TICK)
        self._logger.info("Session paused: remaining=%ss", session.remaining_seconds)
        self._notify(ACTION_PAUSE, REASON_PAUSED)
        return self._result(ACTION_PAUSE, True, REASON_PAUSED)

    def resume(self) -> SessionActionResult:
        session = self._session
        if session is None or session.state != STATE_PAUSED:
            return self._result(ACTION_RESUME, False, REASON_NOT_PAUSED)

        session.state = STATE_RUNNING
        self._arm(self._on_running_tick)
        self._start_effect(EFFECT_AMBIENT_TICK)
        self._logger.info("Session resumed: remaining=%ss", session.remaining_seconds)
        self._notify(ACTION_RESUME, REASON_RESUMED)
        return self._result(ACTION_RESUME, True, REASON_RESUMED)

    def reset(self) -> SessionActionResult:
        session = self._session
        if session is None or session.state not in (STATE_RUNNING, STATE_PAUSED):
            return self._result(ACTION_RESET, False, REASON_NOT_ACTIVE)

        self._disarm()
        self._stop_all_effects()
        session.remaining_seconds = session.total_seconds
        session.state = STATE_PAUSED
        self._logger.info("Session reset: remaining=%ss", session.remaining_seconds)
        self._notify(ACTION_RESET, REASON_RESET)
        return self._result(ACTION_RESET, True, REASON_RESET)

    def cancel(self) -> SessionActionResult:
        # Feedback is released even without a session so teardown can rely on it.
        if self._session is None:
            self._stop_all_effects()
            return self._result(ACTION_CANCEL, False, REASON_NOT_ACTIVE)

        previous_state = self._session.state
        self._discard_session()
        self._logger.info("Session cancelled from %s", previous_state)
        self._notify(ACTION_CANCEL, REASON_CANCELLED)
        return self._result(ACTION_CANCEL, True, REASON_CANCELLED)

    def acknowledge(self) -> SessionActionResult:
        session = self._session
        if session is None or session.state != STATE_COMPLETED:
            return self._result(ACTION_ACKNOWLEDGE, False, REASON_NOT_COMPLETED)

        self._stop_effect(EFFECT_COMPLETION)
        self._session = None
        self._logger.info("Session completion acknowledged")
        self._notify(ACTION_ACKNOWLEDGE, REASON_ACKNOWLEDGED)
        return self._result(ACTION_ACKNOWLEDGE, True, REASON_ACKNOWLEDGED)

    def close(self) -> None:
        """Tear down the controller: cancel any session and release feedback."""
        try:
            self.cancel()
        finally:
            if self._feedback is not None:
                self._feedback.close()

    def _on_countdown_tick(self) -> None:
        session = self._session
        if session is None or session.state != STATE_COUNTDOWN:
            return

        if session.countdown_value > 1:
            session.countdown_value -= 1
            self._notify(ACTION_COUNTDOWN, REASON_TICK)
            return

        session.countdown_value = 0
        self._disarm()
        self._stop_effect(EFFECT_COUNTDOWN_CUE)
        session.state = STATE_RUNNING
        self._arm(self._on_running_tick)
        self._start_effect(EFFECT_AMBIENT_TICK)
        self._logger.info("Countdown finished: remaining=%ss", session.remaining_seconds)
        self._notify(ACTION_COUNTDOWN, REASON_COUNTDOWN_FINISHED)

    def _on_running_tick(self) -> None:
        session = self._session
        if session is None or session.state != STATE_RUNNING:
            return

        if session.remaining_seconds > 1:
            session.remaining_seconds -= 1
            self._notify(ACTION_TICK, REASON_TICK)
            return

        # Disarm before any side effect so no tick can follow zero.
        session.remaining_seconds = 0
        self._disarm()
        session.state = STATE_COMPLETED
        self._stop_effect(EFFECT_AMBIENT_TICK)
        self._start_effect(EFFECT_COMPLETION)
        self._logger.info("Session completed: title=%s", session.title)
        self._notify(ACTION_COMPLETED, REASON_COMPLETED, completed=True)

    def _arm(self, on_tick: Callable[[], None]) -> None:
        session = self._session
        if session is None:
            return

        if session.timer is not None and session.timer.armed:
            message = f"Session already holds an armed tick handle: {session.timer!r}"
            if self._strict_scheduling:
                raise SchedulerMisuseError(message)
            self._logger.error("%s; re-arming", message)
            self._scheduler.disarm(session.timer)

        session.timer = self._scheduler.arm(self._tick_interval_ms, on_tick)

    def _disarm(self) -> None:
        session = self._session
        if session is None or session.timer is None:
            return
        self._scheduler.disarm(session.timer)
        session.timer = None

    def _discard_session(self) -> None:
        try:
            self._disarm()
        finally:
            self._session = None
            self._stop_all_effects()

    def _start_effect(self, effect: str) -> None:
        if self._feedback is not None:
            self._feedback.start(effect)

    def _stop_effect(self, effect: str) -> None:
        if self._feedback is not None:
            self._feedback.stop(effect)

    def _stop_all_effects(self) -> None:
        if self._feedback is not None:
            self._feedback.stop_all()

    def _notify(self, action: str, reason: str, *, completed: bool = False) -> None:
        listener = self._listener
        if listener is None:
            return
        update = SessionUpdate(
            action=action,
            reason=reason,
            snapshot=self.snapshot(),
            completed=completed,
        )
        try:
            listener(update)
        except Exception as error:
            self._logger.error("Session listener failed: %s", error, exc_info=True)

    def _result(
        self,
        action: SessionAction,
        accepted: bool,
        reason: str,
    ) -> SessionActionResult:
        return SessionActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            snapshot=self.snapshot(),
        )


def _validate_duration(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidDurationError(f"Duration must be an integer, got: {value!r}")
    if value <= 0:
        raise InvalidDurationError(f"Duration must be greater than zero, got: {value}")
    return value


def _sanitize_title(title: Optional[str]) -> Optional[str]:
    if title is None:
        return None
    compact = " ".join(title.split())[:MAX_TITLE_LENGTH].strip()
    return compact or None
