class SessionError(Exception):
    """Base exception for workout session control."""


class InvalidDurationError(SessionError, ValueError):
    """Raised when a session is started with a non-positive duration."""


class SchedulerMisuseError(SessionError):
    """Raised in strict mode when a session arms a second tick handle."""
