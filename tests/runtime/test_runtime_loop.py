import json
import logging
import unittest
from typing import Any, Optional

from app_config import default_app_config
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from server import SessionCommand
from server.events import StickyEventStore, make_event
from workout_timer import SessionController, TickScheduler


class _RecordingUIServer:
    def __init__(self):
        self.events: list[tuple[str, dict[str, Any]]] = []
        self.sticky = StickyEventStore()
        self.command_handler = None
        self.stopped = False

    def set_command_handler(self, handler) -> None:
        self.command_handler = handler

    def publish(self, event_type: str, **payload: Any) -> None:
        self.events.append((event_type, payload))
        self.sticky.remember(event_type, make_event(event_type, **payload))

    def replayed_types(self) -> list[str]:
        return [json.loads(message)["type"] for message in self.sticky.snapshot()]

    def stop(self, timeout_seconds: float = 5.0) -> None:
        self.stopped = True

    def of_type(self, event_type: str) -> list[dict[str, Any]]:
        return [payload for kind, payload in self.events if kind == event_type]


class RuntimeEngineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.now = 0.0
        self.scheduler = TickScheduler(monotonic_now=lambda: self.now)
        self.controller = SessionController(scheduler=self.scheduler)
        self.ui_server = _RecordingUIServer()
        self.hook_calls: list[RuntimeEngine] = []
        self.engine = self._build_engine(self.ui_server)

    def _build_engine(self, ui_server: Optional[_RecordingUIServer]) -> RuntimeEngine:
        return RuntimeEngine(
            RuntimeBootstrap(
                logger=logging.getLogger("test.runtime"),
                app_config=default_app_config(),
                scheduler=self.scheduler,
                controller=self.controller,
                ui_server=ui_server,
                hooks=RuntimeHooks(setup_signal_handlers=self.hook_calls.append),
            )
        )

    def _advance(self, seconds: int) -> None:
        for _ in range(seconds):
            self.now += 1.0
            self.scheduler.poll()

    def test_engine_registers_itself_as_command_handler(self) -> None:
        self.assertEqual(self.engine.submit, self.ui_server.command_handler)

    def test_start_command_publishes_countdown_session(self) -> None:
        self.engine.submit(SessionCommand(action="start", duration_minutes=1, title="Core"))

        self.engine.run_once()

        sessions = self.ui_server.of_type("session")
        self.assertEqual(1, len(sessions))
        self.assertEqual("countdown", sessions[0]["state"])
        self.assertEqual(60, sessions[0]["remaining_seconds"])
        self.assertEqual(3, sessions[0]["countdown_value"])
        self.assertEqual("Core", sessions[0]["title"])
        self.assertEqual("Starting in 3", sessions[0]["message"])
        self.assertTrue(sessions[0]["accepted"])

    def test_full_session_publishes_ticks_and_completion(self) -> None:
        self.engine.start_workout(1, title="Core")
        self.engine.run_once()

        self._advance(3 + 60)

        sessions = self.ui_server.of_type("session")
        self.assertEqual("completed", sessions[-1]["state"])
        self.assertEqual("00:00", sessions[-1]["display"])
        self.assertEqual(0.0, sessions[-1]["progress"])
        self.assertEqual("01:00", sessions[3]["display"])
        completions = self.ui_server.of_type("completion")
        self.assertEqual(1, len(completions))
        self.assertEqual("Workout Complete!", completions[0]["title"])
        self.assertEqual("You've completed your Core workout!", completions[0]["message"])
        self.assertEqual(["session", "completion"], self.ui_server.replayed_types())

        self.engine.submit(SessionCommand(action="acknowledge"))
        self.engine.run_once()

        self.assertEqual("idle", self.ui_server.of_type("session")[-1]["state"])
        self.assertEqual(["session"], self.ui_server.replayed_types())

    def test_rejected_command_publishes_session_and_error(self) -> None:
        self.engine.submit(SessionCommand(action="pause"))

        self.engine.run_once()

        sessions = self.ui_server.of_type("session")
        self.assertEqual(1, len(sessions))
        self.assertFalse(sessions[0]["accepted"])
        self.assertEqual("not_running", sessions[0]["reason"])
        self.assertEqual(
            ["Nothing to pause: the workout is not running."],
            [payload["message"] for payload in self.ui_server.of_type("error")],
        )

    def test_commands_apply_in_arrival_order(self) -> None:
        self.engine.submit(SessionCommand(action="start", duration_minutes=5))
        self.engine.submit(SessionCommand(action="cancel"))

        self.engine.run_once()
        self.engine.run_once()

        states = [payload["state"] for payload in self.ui_server.of_type("session")]
        self.assertEqual(["countdown", "idle"], states)
        self.assertEqual(0, self.scheduler.armed_count)

    def test_run_publishes_startup_sync_and_shuts_down(self) -> None:
        self.controller.start(30)
        hooks = RuntimeHooks(setup_signal_handlers=lambda engine: engine.request_stop())
        engine = RuntimeEngine(
            RuntimeBootstrap(
                logger=logging.getLogger("test.runtime"),
                app_config=default_app_config(),
                scheduler=self.scheduler,
                controller=self.controller,
                ui_server=self.ui_server,
                hooks=hooks,
            )
        )
        self.ui_server.events.clear()

        exit_code = engine.run()

        self.assertEqual(0, exit_code)
        first_session = self.ui_server.of_type("session")[0]
        self.assertEqual("sync", first_session["action"])
        self.assertEqual("startup", first_session["reason"])
        self.assertEqual("idle", self.controller.current_state())
        self.assertEqual(0, self.scheduler.armed_count)
        self.assertTrue(self.ui_server.stopped)

    def test_engine_runs_without_ui_server(self) -> None:
        engine = self._build_engine(None)
        engine.submit(SessionCommand(action="start", duration_minutes=1))

        engine.run_once()

        self.assertEqual("countdown", self.controller.current_state())


if __name__ == "__main__":
    unittest.main()
