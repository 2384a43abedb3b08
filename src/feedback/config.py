"""Configuration model for feedback tones, volumes, and haptic pattern."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from workout_timer.constants import DEFAULT_HAPTIC_PATTERN_MS

from .errors import FeedbackConfigurationError


@dataclass(frozen=True)
class FeedbackConfig:
    """Validated feedback settings consumed by the sounddevice backend."""
    output_device_index: Optional[int] = None
    sample_rate_hz: int = 44100
    cue_volume: float = 1.0
    ambient_volume: float = 0.5
    completion_volume: float = 1.0
    haptic_pattern_ms: tuple[int, ...] = DEFAULT_HAPTIC_PATTERN_MS

    def __post_init__(self) -> None:
        if self.sample_rate_hz <= 0:
            raise FeedbackConfigurationError(
                f"Feedback sample_rate_hz must be positive, got: {self.sample_rate_hz}"
            )
        for name in ("cue_volume", "ambient_volume", "completion_volume"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise FeedbackConfigurationError(
                    f"Feedback {name} must be in [0.0, 1.0], got: {value}"
                )
        if not self.haptic_pattern_ms:
            raise FeedbackConfigurationError("Feedback haptic_pattern_ms cannot be empty")
        if any(step < 0 for step in self.haptic_pattern_ms):
            raise FeedbackConfigurationError(
                "Feedback haptic_pattern_ms values must be non-negative"
            )

    @classmethod
    def from_settings(cls, settings) -> "FeedbackConfig":
        return cls(
            output_device_index=settings.output_device,
            sample_rate_hz=int(settings.sample_rate_hz),
            cue_volume=float(settings.cue_volume),
            ambient_volume=float(settings.ambient_volume),
            completion_volume=float(settings.completion_volume),
            haptic_pattern_ms=tuple(int(step) for step in settings.haptic_pattern_ms),
        )
