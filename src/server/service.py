from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlsplit

import websockets
from websockets.asyncio.server import ServerConnection, broadcast
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from contracts.ui_protocol import EVENT_ERROR, EVENT_HELLO

from .commands import CommandError, SessionCommand, parse_command
from .config import HEALTHZ_PATH, INDEX_PATH, ROOT_PATH, UIServerConfig
from .events import StickyEventStore, make_event

CommandHandler = Callable[[SessionCommand], None]


class UIServer:
    """Threaded asyncio server for session events and client commands.

    Commands are handed to `on_command` from the server thread; the handler
    must only enqueue them for the runtime thread.
    """

    def __init__(
        self,
        config: UIServerConfig,
        on_command: Optional[CommandHandler] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._on_command = on_command
        self._logger = logger or logging.getLogger("ui_server")
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_async: Optional[asyncio.Event] = None
        self._started = threading.Event()
        self._startup_error: Optional[Exception] = None
        self._connected_clients: set[ServerConnection] = set()
        self._sticky_events = StickyEventStore()
        self._routes: dict[str, tuple[bytes, str]] = {
            HEALTHZ_PATH: (b"ok\n", "text/plain; charset=utf-8"),
        }
        if self._config.index_file:
            index = (Path(self._config.index_file).read_bytes(), "text/html; charset=utf-8")
            self._routes[ROOT_PATH] = index
            self._routes[INDEX_PATH] = index

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        return self._config.port

    @property
    def websocket_path(self) -> str:
        return self._config.websocket_path

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._startup_error is None
        )

    def set_command_handler(self, on_command: Optional[CommandHandler]) -> None:
        self._on_command = on_command

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("UI server is already running")
            return

        self._startup_error = None
        self._started.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name="ui-server",
        )
        self._thread.start()

        if not self._started.wait(timeout_seconds):
            raise RuntimeError(
                f"UI server did not start within {timeout_seconds:.1f}s"
            )

        if self._startup_error is not None:
            raise RuntimeError(f"UI server startup failed: {self._startup_error}")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        if self._thread is None:
            return

        if self._loop and self._stop_async:
            self._loop.call_soon_threadsafe(self._stop_async.set)

        self._thread.join(timeout=timeout_seconds)
        if self._thread.is_alive():
            self._logger.error(
                "UI server thread did not stop within %.1fs",
                timeout_seconds,
            )

        self._thread = None
        self._loop = None
        self._stop_async = None

    def publish(self, event_type: str, **payload) -> None:
        message = make_event(event_type, **payload)
        self._sticky_events.remember(event_type, message)

        if not self.is_running or self._loop is None:
            return

        try:
            self._loop.call_soon_threadsafe(self._broadcast, message)
        except RuntimeError:
            # Loop may be shutting down.
            return

    def _run_loop(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._stop_async = asyncio.Event()

        try:
            self._loop.run_until_complete(self._serve())
        except Exception as error:  # pragma: no cover - exercised manually
            self._startup_error = error
            self._logger.error("UI server failed: %s", error, exc_info=True)
            self._started.set()
        finally:
            if self._loop is not None:
                pending = asyncio.all_tasks(self._loop)
                for task in pending:
                    task.cancel()
                with contextlib.suppress(Exception):
                    self._loop.run_until_complete(
                        asyncio.gather(*pending, return_exceptions=True)
                    )
                self._loop.close()

    async def _serve(self) -> None:
        async with websockets.serve(
            self._handler,
            host=self._config.host,
            port=self._config.port,
            process_request=self._process_request,
            logger=self._logger,
        ):
            self._logger.info(
                "UI server running at http://%s:%d (websocket: %s)",
                self._config.host,
                self._config.port,
                self._config.websocket_path,
            )
            self._started.set()
            await self._stop_async.wait()
            await self._close_clients()

    async def _handler(self, websocket: ServerConnection) -> None:
        request_path = (
            urlsplit(websocket.request.path).path
            if websocket.request is not None
            else ""
        )
        if request_path != self._config.websocket_path:
            await websocket.close(code=1008, reason="Invalid websocket path")
            return

        self._connected_clients.add(websocket)
        self._logger.info("Client connected: %s", websocket.remote_address)
        try:
            await websocket.send(make_event(EVENT_HELLO, message="UI websocket connected"))
            for message in self._sticky_events.snapshot():
                await websocket.send(message)
            async for message in websocket:
                self._logger.debug("Received from UI: %s", message)
                await self._handle_message(websocket, message)
        except websockets.exceptions.ConnectionClosed:
            self._logger.info("Client disconnected: %s", websocket.remote_address)
        finally:
            self._connected_clients.discard(websocket)

    async def _handle_message(self, websocket: ServerConnection, message) -> None:
        try:
            command = parse_command(message)
        except CommandError as error:
            self._logger.warning("Rejected UI command: %s", error)
            await websocket.send(make_event(EVENT_ERROR, message=str(error)))
            return

        if self._on_command is None:
            self._logger.warning("No command handler; dropping %s", command.action)
            return
        self._on_command(command)

    async def _process_request(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Response | None:
        path = urlsplit(request.path).path
        if path == self._config.websocket_path:
            return None

        route = self._routes.get(path)
        if route is None:
            return connection.respond(404, "not found\n")
        body, content_type = route
        headers = Headers(
            [
                ("Content-Type", content_type),
                ("Content-Length", str(len(body))),
                ("Cache-Control", "no-store"),
            ]
        )
        return Response(200, "OK", headers, body)

    async def _close_clients(self) -> None:
        clients = tuple(self._connected_clients)
        self._connected_clients.clear()
        await asyncio.gather(
            *(client.close(code=1001, reason="Server shutting down") for client in clients),
            return_exceptions=True,
        )

    def _broadcast(self, message: str) -> None:
        """Runs on the server loop; slow or closed clients are skipped."""
        if self._connected_clients:
            broadcast(self._connected_clients, message)
