"""Typed application configuration schema and config-specific exceptions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from workout_timer.constants import DEFAULT_HAPTIC_PATTERN_MS, DEFAULT_TICK_INTERVAL_MS


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class SessionSettings:
    tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS
    poll_interval_seconds: float = 0.05
    strict_scheduling: bool = False


@dataclass(frozen=True)
class FeedbackSettings:
    enabled: bool = True
    output_device: Optional[int] = None
    sample_rate_hz: int = 44100
    cue_volume: float = 1.0
    ambient_volume: float = 0.5
    completion_volume: float = 1.0
    haptic_pattern_ms: tuple[int, ...] = DEFAULT_HAPTIC_PATTERN_MS


@dataclass(frozen=True)
class UIServerSettings:
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = ""


@dataclass(frozen=True)
class AppConfig:
    session: SessionSettings
    feedback: FeedbackSettings
    ui_server: UIServerSettings
    source_file: str
