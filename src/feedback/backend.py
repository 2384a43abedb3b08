"""Effect-level feedback backend combining synthesized audio and haptics."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import numpy as np

from workout_timer.constants import (
    EFFECT_AMBIENT_TICK,
    EFFECT_COMPLETION,
    EFFECT_COUNTDOWN_CUE,
    TERMINAL_EFFECTS,
)

from .config import FeedbackConfig
from .errors import FeedbackUnavailableError
from .haptics import HapticDriver
from .tones import ambient_tick_loop, completion_alarm, countdown_cue


@dataclass(frozen=True)
class FeedbackHandle:
    """Opaque handle to one live effect instance."""
    effect: str
    playback: Any = None


class FeedbackBackend(Protocol):
    """Starts and stops named effects; failures raise FeedbackUnavailableError."""
    def start(self, effect: str) -> FeedbackHandle:
        ...

    def stop(self, handle: FeedbackHandle) -> None:
        ...


class AudioOutputLike(Protocol):
    def play(self, wav: np.ndarray, sample_rate_hz: int, *, loop: bool = False) -> Any:
        ...


@dataclass(frozen=True)
class _Cue:
    wav: np.ndarray
    loop: bool


class SoundDeviceFeedbackBackend:
    """Plays pre-rendered cues through an audio output and fires haptics."""
    def __init__(
        self,
        config: FeedbackConfig,
        output: AudioOutputLike,
        haptics: HapticDriver,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._output = output
        self._haptics = haptics
        self._logger = logger or logging.getLogger(__name__)
        rate = config.sample_rate_hz
        self._cues: dict[str, _Cue] = {
            EFFECT_COUNTDOWN_CUE: _Cue(
                countdown_cue(rate, volume=config.cue_volume),
                loop=False,
            ),
            EFFECT_AMBIENT_TICK: _Cue(
                ambient_tick_loop(rate, volume=config.ambient_volume),
                loop=True,
            ),
            EFFECT_COMPLETION: _Cue(
                completion_alarm(rate, volume=config.completion_volume),
                loop=True,
            ),
        }

    def start(self, effect: str) -> FeedbackHandle:
        cue = self._cues.get(effect)
        if cue is None:
            raise FeedbackUnavailableError(f"Unknown feedback effect: {effect}")

        playback = self._output.play(cue.wav, self._config.sample_rate_hz, loop=cue.loop)
        # Haptics start only once audio is playing.
        if effect in TERMINAL_EFFECTS:
            try:
                self._haptics.vibrate(self._config.haptic_pattern_ms)
            except Exception as error:
                self._logger.warning("Haptic pattern failed: %s", error)
        self._logger.debug("Started %s (%d samples, loop=%s)", effect, len(cue.wav), cue.loop)
        return FeedbackHandle(effect=effect, playback=playback)

    def stop(self, handle: FeedbackHandle) -> None:
        if handle.effect in TERMINAL_EFFECTS:
            try:
                self._haptics.cancel()
            except Exception as error:
                self._logger.warning("Haptic cancel failed: %s", error)
        if handle.playback is not None:
            handle.playback.stop()
        self._logger.debug("Stopped %s", handle.effect)


class SilentFeedbackBackend:
    """Backend used when feedback is disabled; effects are tracked but inaudible."""
    def start(self, effect: str) -> FeedbackHandle:
        return FeedbackHandle(effect=effect)

    def stop(self, handle: FeedbackHandle) -> None:
        return None
