"""Sounddevice-backed non-blocking playback of one-shot and looping cues."""

import logging
import threading
from typing import Optional

import numpy as np
import sounddevice as sd

from .errors import FeedbackUnavailableError


class Playback:
    """A live output stream; `stop()` is idempotent."""
    def __init__(self, stream: sd.OutputStream, logger: logging.Logger):
        self._stream = stream
        self._logger = logger
        self._lock = threading.Lock()
        self._stopped = False

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    def stop(self) -> None:
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
        try:
            self._stream.stop()
            self._stream.close()
        except Exception as error:
            raise FeedbackUnavailableError(f"Audio stop failed: {error}") from error


class SoundDeviceAudioOutput:
    """Plays mono PCM arrays through a selected sounddevice output."""
    def __init__(
        self,
        output_device_index: Optional[int] = None,
        blocksize: int = 1024,
        logger: Optional[logging.Logger] = None,
    ):
        self._output_device_index = output_device_index
        self._blocksize = blocksize
        self._logger = logger or logging.getLogger(__name__)

    def play(
        self,
        wav: np.ndarray,
        sample_rate_hz: int,
        *,
        loop: bool = False,
    ) -> Playback:
        if wav.ndim != 1:
            raise FeedbackUnavailableError("Expected mono PCM array for playback")
        if len(wav) == 0:
            raise FeedbackUnavailableError("Cannot play empty audio buffer")

        pos = 0

        def callback(outdata, frames, time_info, status):
            nonlocal pos
            if status:
                self._logger.warning("Sounddevice status: %s", status)

            written = 0
            while written < frames:
                chunk = wav[pos : pos + frames - written]
                outdata[written : written + len(chunk), 0] = chunk
                written += len(chunk)
                pos += len(chunk)
                if pos >= len(wav):
                    if not loop:
                        outdata[written:, 0] = 0
                        raise sd.CallbackStop()
                    pos = 0

        try:
            stream = sd.OutputStream(
                channels=1,
                samplerate=sample_rate_hz,
                blocksize=self._blocksize,
                dtype="float32",
                callback=callback,
                device=self._output_device_index,
            )
            stream.start()
        except Exception as error:
            raise FeedbackUnavailableError(f"Audio playback failed: {error}") from error

        return Playback(stream, self._logger)
