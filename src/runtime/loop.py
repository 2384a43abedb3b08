"""Runtime loop that drives session ticks and UI commands on one thread."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from queue import Empty, Queue
from typing import Callable, Optional

from app_config import AppConfig
from server import SessionCommand, UIServer
from workout_timer import SessionController, TickScheduler
from workout_timer.constants import ACTION_START

from .dispatch import RuntimeCommandDispatcher
from .ui import RuntimeUIPublisher
from .updates import SessionUpdateProcessor, UpdateDependencies

ACTION_SYNC = "sync"
REASON_STARTUP = "startup"


@dataclass(frozen=True)
class RuntimeHooks:
    """Injectable lifecycle hooks used by runtime startup and shutdown flow."""
    setup_signal_handlers: Callable[["RuntimeEngine"], None]


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    app_config: AppConfig
    scheduler: TickScheduler
    controller: SessionController
    ui_server: Optional[UIServer]
    hooks: RuntimeHooks


@dataclass
class RuntimeResources:
    """Mutable runtime resources created for the event loop lifecycle."""
    command_queue: "Queue[SessionCommand]"
    stop_requested: threading.Event = field(default_factory=threading.Event)


class RuntimeEngine:
    """Main loop: polls the tick scheduler and applies queued UI commands.

    The controller is only ever touched from the thread running `run()`;
    other threads hand over work through `submit()`.
    """
    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._scheduler = bootstrap.scheduler
        self._controller = bootstrap.controller
        self._poll_interval = bootstrap.app_config.session.poll_interval_seconds

        self._ui = RuntimeUIPublisher(bootstrap.ui_server)
        self._controller.set_listener(
            SessionUpdateProcessor(UpdateDependencies(logger=self._logger, ui=self._ui))
        )
        self._dispatcher = RuntimeCommandDispatcher(
            logger=self._logger,
            controller=self._controller,
            ui=self._ui,
        )
        self._resources = RuntimeResources(command_queue=Queue())

        if bootstrap.ui_server is not None:
            bootstrap.ui_server.set_command_handler(self.submit)

    def submit(self, command: SessionCommand) -> None:
        """Thread-safe: queue a command for the runtime thread."""
        self._resources.command_queue.put(command)

    def request_stop(self) -> None:
        self._resources.stop_requested.set()

    def start_workout(self, duration_minutes: int, title: Optional[str] = None) -> None:
        self.submit(
            SessionCommand(
                action=ACTION_START,
                duration_minutes=duration_minutes,
                title=title,
            )
        )

    def run(self) -> int:
        self._bootstrap.hooks.setup_signal_handlers(self)
        self._publish_startup_sync()
        self._logger.info("Ready! Waiting for workout commands ...")

        try:
            while not self._resources.stop_requested.is_set():
                self.run_once()
            self._logger.info("Shutdown requested.")
            return 0
        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown()

    def run_once(self) -> None:
        """One loop iteration: deliver due ticks, then wait for a command."""
        self._scheduler.poll()
        command = self._poll_command()
        if command is not None:
            self._dispatcher.handle_command(command)

    def _poll_command(self) -> Optional[SessionCommand]:
        timeout = self._poll_interval
        until_tick = self._scheduler.seconds_until_next_tick()
        if until_tick is not None:
            timeout = min(timeout, until_tick)
        try:
            if timeout <= 0:
                return self._resources.command_queue.get_nowait()
            return self._resources.command_queue.get(timeout=timeout)
        except Empty:
            return None

    def _publish_startup_sync(self) -> None:
        self._ui.publish_session_update(
            self._controller.snapshot(),
            action=ACTION_SYNC,
            accepted=True,
            reason=REASON_STARTUP,
        )

    def _shutdown(self) -> None:
        self._logger.info("Releasing session resources...")
        try:
            self._controller.close()
        except Exception as error:
            self._logger.error("Error closing session controller: %s", error, exc_info=True)

        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            self._logger.info("Stopping UI server...")
            try:
                ui_server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)
