"""Public exports for audio and haptic feedback components."""

# feedback.output is imported on demand: sounddevice needs PortAudio at import time.

from .backend import (
    FeedbackBackend,
    FeedbackHandle,
    SilentFeedbackBackend,
    SoundDeviceFeedbackBackend,
)
from .config import FeedbackConfig
from .coordinator import FeedbackCoordinator
from .errors import FeedbackConfigurationError, FeedbackError, FeedbackUnavailableError
from .haptics import HapticDriver, LoggingHapticDriver

__all__ = [
    "FeedbackBackend",
    "FeedbackConfig",
    "FeedbackConfigurationError",
    "FeedbackCoordinator",
    "FeedbackError",
    "FeedbackHandle",
    "FeedbackUnavailableError",
    "HapticDriver",
    "LoggingHapticDriver",
    "SilentFeedbackBackend",
    "SoundDeviceFeedbackBackend",
]
