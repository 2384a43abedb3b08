import unittest

import numpy as np

from workout_timer.constants import COUNTDOWN_STEPS, DEFAULT_TICK_INTERVAL_MS
from feedback.tones import (
    COMPLETION_ALARM_NOTES,
    ambient_tick_loop,
    completion_alarm,
    countdown_cue,
    render_notes,
    sine_tone,
)

RATE = 8000


class ToneSynthesisTests(unittest.TestCase):
    def test_sine_tone_has_expected_length_and_peak(self) -> None:
        wave = sine_tone(440.0, 250, RATE, volume=0.5)

        self.assertEqual(2000, len(wave))
        self.assertEqual(np.float32, wave.dtype)
        self.assertLessEqual(float(np.max(np.abs(wave))), 0.5 + 1e-6)
        self.assertEqual(0.0, float(wave[0]))

    def test_rest_note_is_silent(self) -> None:
        rest = sine_tone(0.0, 100, RATE)
        self.assertEqual(800, len(rest))
        self.assertFalse(np.any(rest))

    def test_render_notes_concatenates_durations(self) -> None:
        wave = render_notes(((440.0, 100), (0.0, 50), (880.0, 100)), RATE)
        self.assertEqual(2000, len(wave))
        self.assertEqual(0, len(render_notes((), RATE)))

    def test_completion_alarm_spans_all_notes(self) -> None:
        expected_ms = sum(duration for _, duration in COMPLETION_ALARM_NOTES)
        wave = completion_alarm(RATE)
        self.assertEqual(RATE * expected_ms // 1000, len(wave))

    def test_ambient_loop_is_one_second_with_leading_click(self) -> None:
        wave = ambient_tick_loop(RATE, volume=0.4)

        self.assertEqual(RATE, len(wave))
        self.assertTrue(np.any(wave[: RATE // 10]))
        self.assertFalse(np.any(wave[RATE // 10 :]))

    def test_countdown_cue_fits_inside_the_countdown(self) -> None:
        countdown_samples = RATE * COUNTDOWN_STEPS * DEFAULT_TICK_INTERVAL_MS // 1000
        wave = countdown_cue(RATE)

        self.assertLessEqual(len(wave), countdown_samples)
        step = RATE * DEFAULT_TICK_INTERVAL_MS // 1000
        for index in range(COUNTDOWN_STEPS):
            with self.subTest(step=index):
                self.assertTrue(np.any(wave[index * step : index * step + step // 10]))

    def test_countdown_cue_scales_with_volume(self) -> None:
        loud = countdown_cue(RATE, volume=1.0)
        quiet = countdown_cue(RATE, volume=0.25)

        self.assertEqual(len(loud), len(quiet))
        np.testing.assert_allclose(quiet, loud * 0.25, atol=1e-6)


if __name__ == "__main__":
    unittest.main()
