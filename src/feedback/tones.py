"""Numpy synthesis of the countdown cue, ambient tick loop, and completion alarm."""

from __future__ import annotations

from typing import Iterable

import numpy as np

# (frequency_hz, duration_ms); a zero frequency is a rest.
COUNTDOWN_CUE_NOTES: tuple[tuple[float, int], ...] = (
    (660.0, 150),
    (0.0, 850),
    (660.0, 150),
    (0.0, 850),
    (990.0, 400),
)
COMPLETION_ALARM_NOTES: tuple[tuple[float, int], ...] = (
    (880.0, 300),
    (0.0, 100),
    (880.0, 300),
    (0.0, 100),
    (880.0, 300),
    (0.0, 100),
    (1046.5, 600),
    (0.0, 500),
)
AMBIENT_TICK_FREQUENCY_HZ = 1200.0
AMBIENT_TICK_CLICK_MS = 30
AMBIENT_TICK_PERIOD_MS = 1000

_FADE_MS = 5


def silence(duration_ms: int, sample_rate_hz: int) -> np.ndarray:
    return np.zeros(_sample_count(duration_ms, sample_rate_hz), dtype=np.float32)


def sine_tone(
    frequency_hz: float,
    duration_ms: int,
    sample_rate_hz: int,
    *,
    volume: float = 1.0,
) -> np.ndarray:
    """Render a sine tone with short linear fades to avoid clicks at the edges."""
    count = _sample_count(duration_ms, sample_rate_hz)
    if frequency_hz <= 0 or count == 0:
        return np.zeros(count, dtype=np.float32)

    t = np.arange(count, dtype=np.float32) / float(sample_rate_hz)
    wave = np.sin(2.0 * np.pi * frequency_hz * t).astype(np.float32)

    fade = min(count // 2, _sample_count(_FADE_MS, sample_rate_hz))
    if fade > 0:
        ramp = np.linspace(0.0, 1.0, fade, dtype=np.float32)
        wave[:fade] *= ramp
        wave[-fade:] *= ramp[::-1]
    return wave * np.float32(volume)


def render_notes(
    notes: Iterable[tuple[float, int]],
    sample_rate_hz: int,
    *,
    volume: float = 1.0,
) -> np.ndarray:
    parts = [
        sine_tone(frequency, duration_ms, sample_rate_hz, volume=volume)
        for frequency, duration_ms in notes
    ]
    if not parts:
        return np.zeros(0, dtype=np.float32)
    return np.concatenate(parts)


def countdown_cue(sample_rate_hz: int, *, volume: float = 1.0) -> np.ndarray:
    """One beep per countdown step; the last step sounds higher and longer."""
    return render_notes(COUNTDOWN_CUE_NOTES, sample_rate_hz, volume=volume)


def ambient_tick_loop(sample_rate_hz: int, *, volume: float = 0.5) -> np.ndarray:
    """One period of the ticking loop: a decaying click, then silence."""
    click = sine_tone(
        AMBIENT_TICK_FREQUENCY_HZ,
        AMBIENT_TICK_CLICK_MS,
        sample_rate_hz,
        volume=volume,
    )
    decay = np.exp(-np.linspace(0.0, 6.0, len(click), dtype=np.float32))
    rest = silence(AMBIENT_TICK_PERIOD_MS - AMBIENT_TICK_CLICK_MS, sample_rate_hz)
    return np.concatenate([click * decay, rest])


def completion_alarm(sample_rate_hz: int, *, volume: float = 1.0) -> np.ndarray:
    """A5, A5, A5 then C6, with a trailing rest so the loop breathes."""
    return render_notes(COMPLETION_ALARM_NOTES, sample_rate_hz, volume=volume)


def _sample_count(duration_ms: int, sample_rate_hz: int) -> int:
    return max(0, int(round(sample_rate_hz * duration_ms / 1000.0)))
