"""Protocols describing the collaborators composed by the session controller."""

from __future__ import annotations

from typing import Protocol


class FeedbackCoordinatorLike(Protocol):
    """Effect-level feedback interface driven by session transitions."""
    def start(self, effect: str) -> None:
        ...

    def stop(self, effect: str) -> None:
        ...

    def stop_all(self) -> None:
        ...

    def close(self) -> None:
        ...
