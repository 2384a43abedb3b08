"""Idempotent, last-writer-wins coordination of feedback effects."""

from __future__ import annotations

import concurrent.futures
import logging
import threading
from typing import Optional

from workout_timer.constants import ALL_EFFECTS

from .backend import FeedbackBackend, FeedbackHandle
from .errors import FeedbackUnavailableError


class FeedbackCoordinator:
    """Starts and stops named effects without blocking the session thread.

    Backend calls run on a worker executor. Every `start`/`stop` bumps a
    per-effect generation; a start that resolves after its generation was
    superseded stops the instance it just created, so the last request wins.
    Backend failures are logged and never propagate to the caller.
    """

    def __init__(
        self,
        backend: FeedbackBackend,
        *,
        executor: Optional[concurrent.futures.Executor] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._backend = backend
        self._owns_executor = executor is None
        self._executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="feedback",
        )
        self._logger = logger or logging.getLogger("feedback")
        self._lock = threading.Lock()
        self._generations: dict[str, int] = {}
        self._handles: dict[str, FeedbackHandle] = {}
        self._pending: dict[str, int] = {}
        self._closed = False

    def start(self, effect: str) -> None:
        with self._lock:
            if self._closed:
                self._logger.warning("Ignoring %s start after close", effect)
                return
            previous = self._handles.pop(effect, None)
            generation = self._bump_locked(effect)
            self._pending[effect] = generation

        if previous is not None:
            self._submit(self._stop_job, previous)
        self._submit(self._start_job, effect, generation)

    def stop(self, effect: str) -> None:
        with self._lock:
            handle = self._handles.pop(effect, None)
            in_flight = self._pending.pop(effect, None) is not None
            if handle is None and not in_flight:
                return
            self._bump_locked(effect)

        if handle is not None:
            self._submit(self._stop_job, handle)

    def stop_all(self) -> None:
        with self._lock:
            effects = set(ALL_EFFECTS) | set(self._handles) | set(self._pending)
        for effect in sorted(effects):
            self.stop(effect)

    def is_active(self, effect: str) -> bool:
        with self._lock:
            return effect in self._handles or effect in self._pending

    def active_effects(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._handles) | frozenset(self._pending)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until queued backend calls finish (single-worker executors only)."""
        try:
            marker = self._executor.submit(lambda: None)
        except RuntimeError:
            return True
        try:
            marker.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            return False
        return True

    def close(self, timeout: Optional[float] = 5.0) -> None:
        self.stop_all()
        with self._lock:
            if self._closed:
                return
            self._closed = True
        if self._owns_executor:
            if not self.wait_idle(timeout):
                self._logger.error("Feedback worker did not finish within %.1fs", timeout)
            self._executor.shutdown(wait=False)

    def _bump_locked(self, effect: str) -> int:
        generation = self._generations.get(effect, 0) + 1
        self._generations[effect] = generation
        return generation

    def _submit(self, fn, *args) -> None:
        try:
            future = self._executor.submit(fn, *args)
        except RuntimeError as error:
            # Executor already shut down.
            self._logger.warning("Feedback call dropped: %s", error)
            return
        future.add_done_callback(self._consume_future_exception)

    def _start_job(self, effect: str, generation: int) -> None:
        try:
            handle = self._backend.start(effect)
        except FeedbackUnavailableError as error:
            self._logger.warning("Feedback %s unavailable: %s", effect, error)
            self._clear_pending(effect, generation)
            return
        except Exception as error:
            self._logger.error("Feedback %s failed to start: %s", effect, error, exc_info=True)
            self._clear_pending(effect, generation)
            return

        with self._lock:
            current = self._generations.get(effect) == generation and not self._closed
            if current:
                self._pending.pop(effect, None)
                self._handles[effect] = handle

        if not current:
            self._logger.debug("Feedback %s superseded while starting; stopping", effect)
            self._stop_job(handle)

    def _stop_job(self, handle: FeedbackHandle) -> None:
        try:
            self._backend.stop(handle)
        except FeedbackUnavailableError as error:
            self._logger.warning("Feedback %s stop failed: %s", handle.effect, error)
        except Exception as error:
            self._logger.error(
                "Feedback %s failed to stop: %s",
                handle.effect,
                error,
                exc_info=True,
            )

    def _clear_pending(self, effect: str, generation: int) -> None:
        with self._lock:
            if self._pending.get(effect) == generation:
                self._pending.pop(effect, None)

    def _consume_future_exception(self, future: concurrent.futures.Future) -> None:
        error = future.exception()
        if error is not None:
            self._logger.error("Feedback worker raised: %s", error)
