"""Session update handler that publishes transitions, ticks, and completion notices."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from workout_timer import SessionUpdate

from .messages import completion_message
from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class UpdateDependencies:
    """Dependencies required for publishing session updates."""
    logger: logging.Logger
    ui: RuntimeUIPublisher


class SessionUpdateProcessor:
    """Session listener: mirrors every controller update to the UI."""
    def __init__(self, dependencies: UpdateDependencies):
        self._dependencies = dependencies

    def __call__(self, update: SessionUpdate) -> None:
        self.handle_update(update)

    def handle_update(self, update: SessionUpdate) -> None:
        deps = self._dependencies
        deps.ui.publish_session_update(
            update.snapshot,
            action=update.action,
            accepted=True,
            reason=update.reason,
        )

        if update.completed:
            deps.logger.info(completion_message(update.snapshot))
            deps.ui.publish_completion(update.snapshot)
