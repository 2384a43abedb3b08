class FeedbackError(Exception):
    """Base exception for audio and haptic feedback."""


class FeedbackConfigurationError(FeedbackError):
    """Raised when feedback configuration is invalid."""


class FeedbackUnavailableError(FeedbackError):
    """Raised when a feedback backend cannot start or stop an effect."""
