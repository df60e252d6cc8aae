"""Per-connection coordination of command intake and event delivery."""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .config import WatcherConfig
from .event_queue import EventQueue
from .exceptions import ProtocolError, TransportClosedError, WatchError
from .models import Command, CommandType, ErrorEvent, Event, WatchListEvent
from .protocol import decode_command, encode_event
from .watch_registry import WatchRegistry

logger = logging.getLogger(__name__)


class FrameType(Enum):
    """Kinds of inbound frames a transport can produce."""
    TEXT = "text"
    BINARY = "binary"
    PING = "ping"
    CLOSE = "close"


@dataclass(frozen=True)
class Frame:
    """One inbound frame."""
    frame_type: FrameType
    text: Optional[str] = None
    data: bytes = b""


class Transport(ABC):
    """
    Full-duplex, ordered message connection to one client.
    
    ``receive`` is only called from the intake loop. Sends may come from
    either loop; the coordinator serializes them.
    """

    @abstractmethod
    def receive(self) -> Frame:
        """
        Block until the next frame arrives.
        
        Raises:
            TransportClosedError: If the peer has gone away
        """

    @abstractmethod
    def send_text(self, text: str) -> None:
        """
        Send one text frame.
        
        Raises:
            TransportClosedError: If the peer has already closed the connection
        """

    @abstractmethod
    def send_pong(self, data: bytes) -> None:
        """Answer a ping."""

    @abstractmethod
    def close(self) -> None:
        """Close the connection if it is still open."""


class ConnectionState(Enum):
    """Lifecycle of a client connection."""
    OPEN = "open"
    RUNNING = "running"
    CLOSING = "closing"
    CLOSED = "closed"


class ConnectionCoordinator:
    """
    Serves one client connection.
    
    Runs the command intake loop on the calling thread and the event
    delivery loop on a worker thread. Both observe a shared shutdown flag
    at every suspension point. On the way out all watches are cleared,
    so no further change callbacks fire, and the delivery thread is
    joined before ``run`` returns.
    """

    def __init__(
        self,
        transport: Transport,
        config: Optional[WatcherConfig] = None,
        registry: Optional[WatchRegistry] = None,
        event_queue: Optional[EventQueue] = None,
    ):
        """
        Initialize the coordinator.
        
        Args:
            transport: Connection to the client
            config: Watcher configuration
            registry: Watch registry to use; a fresh one by default
            event_queue: Outbound queue; must be the registry's queue if both are given
        """
        self.config = config or WatcherConfig()
        self.transport = transport
        self.events = event_queue or EventQueue()
        self.registry = registry or WatchRegistry(self.events, self.config)
        
        self._shutdown = threading.Event()
        self._send_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._state = ConnectionState.OPEN
        self._delivery_thread: Optional[threading.Thread] = None

    @property
    def state(self) -> ConnectionState:
        with self._state_lock:
            return self._state

    def _set_state(self, state: ConnectionState) -> None:
        with self._state_lock:
            self._state = state

    @property
    def is_shutting_down(self) -> bool:
        return self._shutdown.is_set()

    def run(self) -> None:
        """
        Serve the connection until the client leaves or sends SHUTDOWN.
        
        Blocks until both loops have stopped and every watch is released.
        """
        if self.state != ConnectionState.OPEN:
            raise RuntimeError(f"Connection cannot run from state {self.state.value}")
        
        self._set_state(ConnectionState.RUNNING)
        self._delivery_thread = threading.Thread(
            target=self._delivery_loop,
            name="EventDelivery",
            daemon=True,
        )
        self._delivery_thread.start()
        
        try:
            self._intake_loop()
        finally:
            self._close()

    def _close(self) -> None:
        """Release all watches and wait for the delivery loop."""
        self._set_state(ConnectionState.CLOSING)
        
        count = self.registry.clear()
        logger.debug(f"Released {count} watch(es) on close")
        self._shutdown.set()
        
        if self._delivery_thread is not None:
            self._delivery_thread.join()
        
        with self._send_lock:
            self.transport.close()
        
        self._set_state(ConnectionState.CLOSED)

    def _send(self, text: str) -> None:
        with self._send_lock:
            self.transport.send_text(text)

    def _intake_loop(self) -> None:
        """Worker loop that reads and dispatches client frames."""
        logger.debug("Command intake loop started")
        
        while not self._shutdown.is_set():
            try:
                frame = self.transport.receive()
            except TransportClosedError:
                logger.info("Connection closed by client")
                break
            except Exception as e:
                logger.error(f"Error reading from connection: {e}")
                break
            
            if frame.frame_type == FrameType.TEXT:
                logger.debug(f"Received: {frame.text}")
                self.handle_text(frame.text or "")
            elif frame.frame_type == FrameType.CLOSE:
                logger.info("Received close frame")
                break
            elif frame.frame_type == FrameType.PING:
                try:
                    with self._send_lock:
                        self.transport.send_pong(frame.data)
                except TransportClosedError:
                    break
            else:
                logger.debug(f"Ignoring {frame.frame_type.value} frame")
        
        self._shutdown.set()

    def handle_text(self, text: str) -> None:
        """Decode and execute one command frame."""
        try:
            command = decode_command(text)
        except ProtocolError as e:
            logger.warning(f"Failed to parse command: {text} - {e}")
            self.events.put(ErrorEvent(str(e)))
            return
        
        self.dispatch(command)

    def dispatch(self, command: Command) -> None:
        """Execute a decoded command; failures become error events."""
        if command.command_type == CommandType.ADD_WATCH:
            try:
                self.registry.add(command.watch_id, command.path)
            except WatchError as e:
                logger.warning(f"ADD_WATCH '{command.watch_id}' failed: {e}")
                self.events.put(ErrorEvent(str(e), watch_id=command.watch_id))
        elif command.command_type == CommandType.REMOVE_WATCH:
            try:
                self.registry.remove(command.watch_id)
            except WatchError as e:
                logger.warning(f"REMOVE_WATCH '{command.watch_id}' failed: {e}")
                self.events.put(ErrorEvent(str(e), watch_id=command.watch_id))
        elif command.command_type == CommandType.LIST_WATCHES:
            self.events.put(WatchListEvent(tuple(self.registry.list())))
        elif command.command_type == CommandType.SHUTDOWN:
            logger.info("Received shutdown command")
            self._shutdown.set()

    def _delivery_loop(self) -> None:
        """Worker loop that sends queued events to the client."""
        logger.debug("Event delivery loop started")
        poll = self.config.poll_interval_seconds
        
        while not self._shutdown.is_set():
            event = self.events.get(timeout=poll)
            if event is None:
                continue
            
            if not self._deliver(event):
                self._shutdown.set()
                # The intake side may stay blocked in receive(); stop the
                # watches now instead of at close.
                count = self.registry.clear()
                logger.debug(f"Released {count} watch(es) after write failure")
                break

    def _deliver(self, event: Event) -> bool:
        """Send one event; returns False if the connection must close."""
        text = encode_event(event)
        logger.debug(f"Sending: {text}")
        try:
            self._send(text)
        except TransportClosedError:
            logger.info("Connection already closed by client")
            return False
        except Exception as e:
            logger.error(f"Failed to send event: {e}")
            return False
        return True
