"""Dispatcher that applies UI commands to the session controller."""

from __future__ import annotations

import logging

from server import SessionCommand
from workout_timer import InvalidDurationError, SessionActionResult, SessionController
from contracts.ui_protocol import (
    COMMAND_ACKNOWLEDGE,
    COMMAND_CANCEL,
    COMMAND_PAUSE,
    COMMAND_RESET,
    COMMAND_RESUME,
    COMMAND_START,
)

from .messages import rejection_text
from .ui import RuntimeUIPublisher


class RuntimeCommandDispatcher:
    """Routes client commands to controller operations in arrival order.

    Accepted transitions reach the UI through the controller's listener; the
    dispatcher only publishes rejections and input errors.
    """
    def __init__(
        self,
        *,
        logger: logging.Logger,
        controller: SessionController,
        ui: RuntimeUIPublisher,
    ):
        self._logger = logger
        self._controller = controller
        self._ui = ui
        self._operations = {
            COMMAND_PAUSE: controller.pause,
            COMMAND_RESUME: controller.resume,
            COMMAND_RESET: controller.reset,
            COMMAND_CANCEL: controller.cancel,
            COMMAND_ACKNOWLEDGE: controller.acknowledge,
        }

    def handle_command(self, command: SessionCommand) -> None:
        if command.action == COMMAND_START:
            self._handle_start(command)
            return

        operation = self._operations.get(command.action)
        if operation is None:
            self._logger.warning("Unsupported command: %s", command.action)
            self._ui.publish_error(f"Unsupported command: {command.action}")
            return

        self._publish_if_rejected(operation())

    def _handle_start(self, command: SessionCommand) -> None:
        if command.duration_minutes is None:
            self._ui.publish_error("duration_minutes is required to start a workout.")
            return
        try:
            result = self._controller.start_workout(
                command.duration_minutes,
                title=command.title,
            )
        except InvalidDurationError as error:
            self._logger.warning("Rejected start: %s", error)
            self._ui.publish_error(str(error))
            return
        self._publish_if_rejected(result)

    def _publish_if_rejected(self, result: SessionActionResult) -> None:
        if result.accepted:
            return
        self._logger.info("Command %s rejected: %s", result.action, result.reason)
        self._ui.publish_session_update(
            result.snapshot,
            action=result.action,
            accepted=False,
            reason=result.reason,
        )
        self._ui.publish_error(rejection_text(result.action, result.reason))
