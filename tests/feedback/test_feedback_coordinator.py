import concurrent.futures
import logging
import threading
import unittest

from feedback import FeedbackCoordinator, FeedbackHandle, FeedbackUnavailableError


class _InlineExecutor(concurrent.futures.Executor):
    def submit(self, fn, /, *args, **kwargs):
        future: concurrent.futures.Future = concurrent.futures.Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as error:
            future.set_exception(error)
        return future


class _RecordingBackend:
    def __init__(self):
        self.live: dict[int, str] = {}
        self.started: list[str] = []
        self.stopped: list[str] = []
        self.fail_start: set[str] = set()
        self._next_id = 0

    def start(self, effect: str) -> FeedbackHandle:
        if effect in self.fail_start:
            raise FeedbackUnavailableError(f"{effect} unavailable")
        self._next_id += 1
        self.live[self._next_id] = effect
        self.started.append(effect)
        return FeedbackHandle(effect=effect, playback=self._next_id)

    def stop(self, handle: FeedbackHandle) -> None:
        self.live.pop(handle.playback, None)
        self.stopped.append(handle.effect)

    def live_effects(self) -> list[str]:
        return sorted(self.live.values())


class FeedbackCoordinatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.backend = _RecordingBackend()
        self.coordinator = FeedbackCoordinator(
            self.backend,
            executor=_InlineExecutor(),
            logger=logging.getLogger("test.feedback"),
        )

    def test_start_is_idempotent_per_effect(self) -> None:
        self.coordinator.start("ambient_tick")
        self.coordinator.start("ambient_tick")

        self.assertEqual(["ambient_tick"], self.backend.live_effects())
        self.assertTrue(self.coordinator.is_active("ambient_tick"))

    def test_stop_without_active_instance_is_noop(self) -> None:
        self.coordinator.stop("completion")

        self.assertEqual([], self.backend.stopped)
        self.assertFalse(self.coordinator.is_active("completion"))

    def test_stop_all_releases_every_effect(self) -> None:
        for effect in ("countdown_cue", "ambient_tick", "completion"):
            self.coordinator.start(effect)

        self.coordinator.stop_all()

        self.assertEqual([], self.backend.live_effects())
        self.assertEqual(frozenset(), self.coordinator.active_effects())

    def test_unavailable_backend_is_logged_and_not_raised(self) -> None:
        self.backend.fail_start.add("completion")

        with self.assertLogs("test.feedback", level="WARNING"):
            self.coordinator.start("completion")

        self.assertFalse(self.coordinator.is_active("completion"))
        self.coordinator.stop("completion")

    def test_unexpected_backend_error_is_logged(self) -> None:
        def explode(effect: str) -> FeedbackHandle:
            raise RuntimeError("device gone")

        self.backend.start = explode  # type: ignore[method-assign]

        with self.assertLogs("test.feedback", level="ERROR"):
            self.coordinator.start("ambient_tick")
        self.assertFalse(self.coordinator.is_active("ambient_tick"))

    def test_close_stops_effects_and_ignores_later_starts(self) -> None:
        self.coordinator.start("completion")

        self.coordinator.close()
        with self.assertLogs("test.feedback", level="WARNING"):
            self.coordinator.start("ambient_tick")

        self.assertEqual([], self.backend.live_effects())
        self.coordinator.close()


class _BlockingBackend(_RecordingBackend):
    def __init__(self):
        super().__init__()
        self.release = threading.Event()
        self.entered = threading.Event()

    def start(self, effect: str) -> FeedbackHandle:
        self.entered.set()
        self.release.wait(timeout=5.0)
        return super().start(effect)


class FeedbackCoordinatorRaceTests(unittest.TestCase):
    def test_stop_issued_while_start_in_flight_wins(self) -> None:
        backend = _BlockingBackend()
        coordinator = FeedbackCoordinator(backend)
        try:
            coordinator.start("ambient_tick")
            self.assertTrue(backend.entered.wait(timeout=5.0))

            coordinator.stop("ambient_tick")
            self.assertFalse(coordinator.is_active("ambient_tick"))
            backend.release.set()

            self.assertTrue(coordinator.wait_idle(timeout=5.0))
            self.assertEqual([], backend.live_effects())
            self.assertEqual(["ambient_tick"], backend.stopped)
        finally:
            backend.release.set()
            coordinator.close()

    def test_stop_all_while_completion_in_flight_leaves_nothing_playing(self) -> None:
        backend = _BlockingBackend()
        coordinator = FeedbackCoordinator(backend)
        try:
            coordinator.start("completion")
            self.assertTrue(backend.entered.wait(timeout=5.0))

            coordinator.stop_all()
            backend.release.set()

            self.assertTrue(coordinator.wait_idle(timeout=5.0))
            self.assertEqual([], backend.live_effects())
        finally:
            backend.release.set()
            coordinator.close()

    def test_restart_after_stop_keeps_latest_instance(self) -> None:
        backend = _BlockingBackend()
        coordinator = FeedbackCoordinator(backend)
        try:
            coordinator.start("ambient_tick")
            self.assertTrue(backend.entered.wait(timeout=5.0))
            coordinator.stop("ambient_tick")
            coordinator.start("ambient_tick")
            backend.release.set()

            self.assertTrue(coordinator.wait_idle(timeout=5.0))
            self.assertEqual(["ambient_tick"], backend.live_effects())
            self.assertTrue(coordinator.is_active("ambient_tick"))
        finally:
            backend.release.set()
            coordinator.close()


if __name__ == "__main__":
    unittest.main()
