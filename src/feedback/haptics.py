"""Haptic driver contract and the default logging driver for headless hosts."""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence


class HapticDriver(Protocol):
    """Issues vibration patterns: initial delay, then alternating pulse/pause."""
    def vibrate(self, pattern_ms: Sequence[int]) -> None:
        ...

    def cancel(self) -> None:
        ...


class LoggingHapticDriver:
    """Records patterns in the log for hosts without a vibration motor."""
    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(__name__)

    def vibrate(self, pattern_ms: Sequence[int]) -> None:
        self._logger.info(
            "Haptic pattern: %s (%dms total)",
            list(pattern_ms),
            sum(pattern_ms),
        )

    def cancel(self) -> None:
        self._logger.debug("Haptic pattern cancelled")
