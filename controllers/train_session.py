import asyncio
from enum import Enum
from typing import AsyncIterator, Callable, List, Optional

from config import get_settings
from protocol.codec import decode, encode, format_frame
from protocol.commands import Color, Command, Direction, PlayEffect, SetDirection, SetLight, SetSpeed, Stop
from protocol.events import DisconnectedUnexpectedly, StatusEvent
from protocol.exceptions import DecodeError
from transport.ble_transport import BleakTransport, BleTransport
from transport.connection import ConnectionManager, DeviceHandle
from transport.exceptions import ConnectError, WriteError
from utils.logging_config import LogContext, get_logger

from .exceptions import NotConnectedError, SessionError, TransportFailureError

logger = get_logger(__name__)

EventCallback = Callable[[StatusEvent], None]
StateCallback = Callable[["SessionState"], None]


class SessionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"


class TrainSession:
    """
    Protocol state machine for one locomotive.

    Commands are only accepted while connected and are never queued or
    retried: the engine does not acknowledge commands, so after a failure
    there is no way to know whether it acted. Status notifications are
    decoded and handed to every event callback in arrival order.
    """

    def __init__(
        self,
        handle: DeviceHandle,
        transport: Optional[BleTransport] = None,
        connection: Optional[ConnectionManager] = None,
    ):
        self.handle = handle
        self.connection = connection or ConnectionManager(transport or BleakTransport())
        self.connection.set_frame_handler(self._handle_frame)
        self.connection.set_link_lost_handler(self._handle_link_lost)
        self._state = SessionState.DISCONNECTED
        self._direction = Direction.FORWARD
        self._event_callbacks: List[EventCallback] = []
        self._state_callbacks: List[StateCallback] = []
        self.decode_failures = 0

    def __repr__(self) -> str:
        return f"TrainSession({self.handle}, state={self._state.value})"

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def direction(self) -> Direction:
        """Direction sent with the last successful set_direction() call."""
        return self._direction

    def add_event_callback(self, callback: EventCallback):
        self._event_callbacks.append(callback)

    def remove_event_callback(self, callback: EventCallback):
        if callback in self._event_callbacks:
            self._event_callbacks.remove(callback)

    def add_state_callback(self, callback: StateCallback):
        self._state_callbacks.append(callback)

    def remove_state_callback(self, callback: StateCallback):
        if callback in self._state_callbacks:
            self._state_callbacks.remove(callback)

    def _update_state(self, new_state: SessionState):
        if new_state is self._state:
            return
        logger.debug(f"{self.handle}: {self._state.value} -> {new_state.value}")
        self._state = new_state
        for callback in list(self._state_callbacks):
            try:
                callback(new_state)
            except Exception:
                logger.exception(f"State callback {callback!r} failed")

    def _emit(self, event: StatusEvent):
        for callback in list(self._event_callbacks):
            try:
                callback(event)
            except Exception:
                logger.exception(f"Event callback {callback!r} failed on {event!r}")

    def _handle_frame(self, frame: bytes):
        try:
            event = decode(frame)
        except DecodeError as e:
            self.decode_failures += 1
            logger.warning(
                f"Dropping notification {format_frame(e.frame)} from {self.handle}: {e.detail}"
            )
            return
        logger.debug(f"{self.handle} reported {event!r}")
        self._emit(event)

    def _handle_link_lost(self):
        if self._state is not SessionState.CONNECTED:
            return
        logger.warning(f"{self.handle} disconnected unexpectedly")
        self._emit(DisconnectedUnexpectedly())
        self._update_state(SessionState.DISCONNECTED)

    async def connect(self, timeout: Optional[float] = None):
        """
        Connect to the locomotive and start receiving status events.

        Args:
            timeout: Seconds allowed for the link and subscription, defaults to
                the ``connect_timeout`` setting

        Raises:
            SessionError: The session is not disconnected
            ConnectError: The link could not be established
        """
        if self._state is not SessionState.DISCONNECTED:
            raise SessionError(f"Cannot connect while {self._state.value}")

        if timeout is None:
            timeout = get_settings().connect_timeout

        self._update_state(SessionState.CONNECTING)
        try:
            await self.connection.connect(self.handle, timeout)
        except ConnectError as e:
            logger.error(f"Connection to {self.handle} failed: {e}")
            self._update_state(SessionState.DISCONNECTED)
            raise
        except asyncio.CancelledError:
            self._update_state(SessionState.DISCONNECTED)
            raise

        self._update_state(SessionState.CONNECTED)

    async def disconnect(self):
        """Disconnect on request. Does nothing if already disconnected."""
        if self._state in (SessionState.DISCONNECTED, SessionState.DISCONNECTING):
            return
        if self._state is SessionState.CONNECTING:
            raise SessionError("Cannot disconnect while a connect is in progress")

        self._update_state(SessionState.DISCONNECTING)
        try:
            await self.connection.disconnect()
        finally:
            self._update_state(SessionState.DISCONNECTED)

    async def __aenter__(self) -> "TrainSession":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    async def _send(self, command: Command):
        if self._state is not SessionState.CONNECTED:
            raise NotConnectedError(f"Cannot send {command!r}: session is {self._state.value}")

        frame = encode(command)
        with LogContext(device=self.handle.address):
            logger.info(f"Sending {command!r}")
        try:
            await self.connection.write_command_frame(frame)
        except WriteError as e:
            raise TransportFailureError(f"Sending {command!r} failed: {e}") from e

    async def set_speed(self, level: int):
        """Set the motor speed, keeping the current direction."""
        await self._send(SetSpeed(level, self._direction))

    async def set_direction(self, direction: Direction):
        await self._send(SetDirection(direction))
        self._direction = direction

    async def play_effect(self, effect_id: int):
        await self._send(PlayEffect(effect_id))

    async def stop(self):
        await self._send(Stop(self._direction))

    async def set_light(self, color: Color, intensity: int):
        await self._send(SetLight(color, intensity))

    async def _drive(self, direction: Direction, level: int):
        # validate the speed before the direction frame goes out
        command = SetSpeed(level, direction)
        await self.set_direction(direction)
        await self._send(command)

    async def forward(self, level: int):
        """Drive forwards at ``level``."""
        await self._drive(Direction.FORWARD, level)

    async def backward(self, level: int):
        """Drive backwards at ``level``."""
        await self._drive(Direction.BACKWARD, level)

    async def events(self) -> AsyncIterator[StatusEvent]:
        """
        Iterate over status events as they arrive.

        Events delivered before iteration starts are not replayed. Stops after
        yielding ``DisconnectedUnexpectedly``.
        """
        queue: "asyncio.Queue[StatusEvent]" = asyncio.Queue()
        self.add_event_callback(queue.put_nowait)
        try:
            while True:
                event = await queue.get()
                yield event
                if isinstance(event, DisconnectedUnexpectedly):
                    return
        finally:
            self.remove_event_callback(queue.put_nowait)
