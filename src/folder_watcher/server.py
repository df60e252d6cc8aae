"""WebSocket server exposing folder watches to clients (FastAPI edition)."""

import asyncio
import logging
import threading
from typing import Optional

from fastapi import FastAPI, WebSocket
from starlette.websockets import WebSocketDisconnect, WebSocketState

from .config import WatcherConfig
from .connection import ConnectionCoordinator, Frame, FrameType, Transport
from .exceptions import TransportClosedError

logger = logging.getLogger(__name__)


class WebSocketTransport(Transport):
    """
    Blocking adapter over an ASGI WebSocket.
    
    The coordinator's loops run on worker threads; each call is scheduled
    onto the event loop that owns the socket and waited for.
    """

    def __init__(self, websocket: WebSocket, loop: asyncio.AbstractEventLoop):
        self._websocket = websocket
        self._loop = loop

    def _call(self, coro):
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result()

    def is_closed(self) -> bool:
        return (
            self._websocket.client_state == WebSocketState.DISCONNECTED
            or self._websocket.application_state == WebSocketState.DISCONNECTED
        )

    def receive(self) -> Frame:
        try:
            message = self._call(self._websocket.receive())
        except RuntimeError as e:
            if self.is_closed():
                raise TransportClosedError(str(e)) from e
            raise
        
        if message["type"] == "websocket.disconnect":
            return Frame(FrameType.CLOSE)
        if message.get("text") is not None:
            return Frame(FrameType.TEXT, text=message["text"])
        return Frame(FrameType.BINARY, data=message.get("bytes") or b"")

    def send_text(self, text: str) -> None:
        try:
            self._call(self._websocket.send_text(text))
        except (WebSocketDisconnect, OSError) as e:
            raise TransportClosedError(str(e)) from e
        except RuntimeError as e:
            if self.is_closed():
                raise TransportClosedError(str(e)) from e
            raise

    def send_pong(self, data: bytes) -> None:
        # The ASGI server answers protocol-level pings itself.
        logger.debug("Ping handled by the ASGI server")

    def close(self) -> None:
        if self.is_closed():
            return
        try:
            self._call(self._websocket.close())
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            logger.debug(f"Close after disconnect: {e}")


def create_app(config: Optional[WatcherConfig] = None) -> FastAPI:
    """Build the FastAPI application serving watch connections."""
    cfg = config or WatcherConfig()
    app = FastAPI(title="Folder Watcher", docs_url=None, redoc_url=None)
    app.state.config = cfg
    app.state.connections = 0
    connections_lock = threading.Lock()

    @app.get("/health")
    async def health():
        with connections_lock:
            count = app.state.connections
        return {"status": "ok", "connections": count}

    @app.websocket("/")
    async def watch_socket(websocket: WebSocket):
        await websocket.accept()
        with connections_lock:
            app.state.connections += 1
        logger.info("New client connection")
        
        loop = asyncio.get_running_loop()
        transport = WebSocketTransport(websocket, loop)
        coordinator = ConnectionCoordinator(transport, cfg)
        done = asyncio.Event()

        def serve():
            try:
                coordinator.run()
            except Exception:
                logger.exception("Connection handler failed")
            finally:
                loop.call_soon_threadsafe(done.set)

        # Held for the connection lifetime, so kept off the shared executor.
        thread = threading.Thread(target=serve, name="ConnectionIntake", daemon=True)
        thread.start()
        try:
            await done.wait()
        finally:
            with connections_lock:
                app.state.connections -= 1
            logger.info("Client disconnected")

    return app


class WatcherServer:
    """Runs the FastAPI app with uvicorn."""

    def __init__(self, config: Optional[WatcherConfig] = None):
        self.config = config or WatcherConfig()
        self._server = None
        self._thread: Optional[threading.Thread] = None

    def _build(self):
        import uvicorn

        app = create_app(self.config)
        uv_config = uvicorn.Config(
            app,
            host=self.config.host,
            port=self.config.port,
            log_level="warning",
            access_log=False,
        )
        self._server = uvicorn.Server(uv_config)
        return self._server

    def run(self) -> None:
        """Serve until interrupted (blocking)."""
        server = self._build()
        logger.info(f"WebSocket server listening on ws://{self.config.host}:{self.config.port}")
        server.run()

    def start(self) -> None:
        """Serve on a background thread."""
        server = self._build()
        self._thread = threading.Thread(target=server.run, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._server:
            self._server.should_exit = True
            self._server = None
        if self._thread is not None:
            self._thread.join(timeout=self.config.join_timeout_s)
            self._thread = None
