from .errors import InvalidDurationError, SchedulerMisuseError, SessionError
from .scheduler import TickScheduler, TimerHandle
from .service import (
    IDLE_SNAPSHOT,
    Session,
    SessionAction,
    SessionActionResult,
    SessionController,
    SessionSnapshot,
    SessionState,
    SessionUpdate,
)

__all__ = [
    "IDLE_SNAPSHOT",
    "InvalidDurationError",
    "SchedulerMisuseError",
    "Session",
    "SessionAction",
    "SessionActionResult",
    "SessionController",
    "SessionError",
    "SessionSnapshot",
    "SessionState",
    "SessionUpdate",
    "TickScheduler",
    "TimerHandle",
]
