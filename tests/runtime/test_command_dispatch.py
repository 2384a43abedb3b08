import logging
import unittest
from typing import Any

from runtime.dispatch import RuntimeCommandDispatcher
from runtime.ui import RuntimeUIPublisher
from server import SessionCommand
from workout_timer import SessionController, TickScheduler


class _RecordingUIServer:
    def __init__(self):
        self.events: list[tuple[str, dict[str, Any]]] = []

    def publish(self, event_type: str, **payload: Any) -> None:
        self.events.append((event_type, payload))

    def errors(self) -> list[str]:
        return [payload["message"] for kind, payload in self.events if kind == "error"]


class RuntimeCommandDispatcherTests(unittest.TestCase):
    def setUp(self) -> None:
        self.now = 0.0
        self.scheduler = TickScheduler(monotonic_now=lambda: self.now)
        self.controller = SessionController(scheduler=self.scheduler)
        self.ui_server = _RecordingUIServer()
        self.dispatcher = RuntimeCommandDispatcher(
            logger=logging.getLogger("test.dispatch"),
            controller=self.controller,
            ui=RuntimeUIPublisher(self.ui_server),
        )

    def test_start_command_starts_session_in_seconds(self) -> None:
        self.dispatcher.handle_command(
            SessionCommand(action="start", duration_minutes=2, title="Stretch")
        )

        snapshot = self.controller.snapshot()
        self.assertEqual("countdown", snapshot.state)
        self.assertEqual(120, snapshot.total_seconds)
        self.assertEqual("Stretch", snapshot.title)
        self.assertEqual([], self.ui_server.errors())

    def test_start_without_valid_duration_publishes_error(self) -> None:
        for minutes in (None, 0, -3):
            with self.subTest(minutes=minutes):
                self.dispatcher.handle_command(
                    SessionCommand(action="start", duration_minutes=minutes)
                )
                self.assertEqual("idle", self.controller.current_state())
        self.assertEqual(3, len(self.ui_server.errors()))

    def test_each_control_action_reaches_controller(self) -> None:
        self.dispatcher.handle_command(SessionCommand(action="start", duration_minutes=1))
        for _ in range(3):
            self.now += 1.0
            self.scheduler.poll()

        self.dispatcher.handle_command(SessionCommand(action="pause"))
        self.assertEqual("paused", self.controller.current_state())
        self.dispatcher.handle_command(SessionCommand(action="resume"))
        self.assertEqual("running", self.controller.current_state())
        self.dispatcher.handle_command(SessionCommand(action="reset"))
        self.assertEqual("paused", self.controller.current_state())
        self.dispatcher.handle_command(SessionCommand(action="cancel"))
        self.assertEqual("idle", self.controller.current_state())
        self.assertEqual([], self.ui_server.errors())

    def test_rejections_publish_human_readable_errors(self) -> None:
        for action in ("resume", "reset", "cancel", "acknowledge"):
            self.dispatcher.handle_command(SessionCommand(action=action))

        self.assertEqual(
            [
                "Nothing to resume: the workout is not paused.",
                "Only a running or paused workout can be reset.",
                "No workout is active.",
                "There is no finished workout to acknowledge.",
            ],
            self.ui_server.errors(),
        )

    def test_unknown_action_publishes_error(self) -> None:
        self.dispatcher.handle_command(SessionCommand(action="skip"))
        self.assertEqual(["Unsupported command: skip"], self.ui_server.errors())


if __name__ == "__main__":
    unittest.main()
