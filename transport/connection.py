"""
Connection manager for a single BLE link to one locomotive.

Wraps a ``BleTransport`` behind awaitable connect/write/disconnect calls and
routes raw notification frames and link loss to registered handlers.

Notifications are passed through exactly as the transport delivers them.
Duplicate or reordered delivery at the transport level is not corrected.
"""
import asyncio
from dataclasses import dataclass
from typing import Callable, Optional

from config import get_settings
from protocol.codec import format_frame
from utils.logging_config import LogContext, get_logger

from .ble_transport import BleTransport
from .exceptions import (
    ConnectError,
    ConnectTimeoutError,
    ConnectTransportError,
    WriteNotConnectedError,
    WriteTransportError,
)

logger = get_logger(__name__)

FrameHandler = Callable[[bytes], None]
LinkLostHandler = Callable[[], None]


@dataclass(frozen=True)
class DeviceHandle:
    """Identifies one physical locomotive by its transport address."""

    address: str
    name: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.name} ({self.address})" if self.name else self.address


class ConnectionManager:
    def __init__(
        self,
        transport: BleTransport,
        command_char_uuid: Optional[str] = None,
        notify_char_uuid: Optional[str] = None,
    ):
        settings = get_settings()
        self.command_char_uuid = command_char_uuid or settings.command_char_uuid
        self.notify_char_uuid = notify_char_uuid or settings.notify_char_uuid
        self._transport = transport
        self._handle: Optional[DeviceHandle] = None
        self._connected = False
        self._write_lock = asyncio.Lock()
        self._frame_handler: Optional[FrameHandler] = None
        self._link_lost_handler: Optional[LinkLostHandler] = None
        transport.on_state_change(self._handle_state_change)

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def handle(self) -> Optional[DeviceHandle]:
        return self._handle

    def set_frame_handler(self, handler: Optional[FrameHandler]):
        """Register the callable that receives every raw notification frame."""
        self._frame_handler = handler

    def set_link_lost_handler(self, handler: Optional[LinkLostHandler]):
        """Register the callable invoked when an established link drops on its own."""
        self._link_lost_handler = handler

    def _handle_notification(self, frame: bytes):
        logger.debug(f"Received frame: {format_frame(frame)}")
        if self._frame_handler is not None:
            self._frame_handler(frame)

    def _handle_state_change(self, connected: bool):
        if connected:
            return
        was_connected = self._connected
        self._connected = False
        # A caller-initiated disconnect clears _connected before tearing down
        if was_connected:
            logger.warning(f"Link to {self._handle} lost")
            if self._link_lost_handler is not None:
                self._link_lost_handler()

    async def _establish(self, handle: DeviceHandle):
        await self._transport.connect(handle.address)
        await self._transport.subscribe(self.notify_char_uuid, self._handle_notification)

    async def _abort(self):
        try:
            await self._transport.disconnect()
        except Exception as e:
            logger.warning(f"Error tearing down half-open link to {self._handle}: {e}")

    async def connect(self, handle: DeviceHandle, timeout: float):
        """
        Open the link and subscribe to notifications.

        The notification subscription is active before this returns, so no
        frame sent right after the link comes up is missed.

        Args:
            handle: The locomotive to connect to
            timeout: Seconds allowed for link establishment and subscription

        Raises:
            ConnectTimeoutError: The link was not ready within ``timeout``
            DeviceNotFoundError: The transport could not find the device
            ConnectTransportError: Any other transport failure
        """
        if self._connected:
            raise ConnectTransportError(f"Already connected to {self._handle}")

        self._handle = handle
        with LogContext(device=handle.address):
            logger.info(f"Connecting to {handle} (timeout {timeout}s)...")
        try:
            await asyncio.wait_for(self._establish(handle), timeout)
        except asyncio.CancelledError:
            await self._abort()
            raise
        except asyncio.TimeoutError as e:
            await self._abort()
            raise ConnectTimeoutError(f"Timed out after {timeout}s connecting to {handle}") from e
        except ConnectError:
            await self._abort()
            raise
        except Exception as e:
            await self._abort()
            raise ConnectTransportError(f"Connecting to {handle} failed: {e}") from e

        self._connected = True
        with LogContext(device=handle.address):
            logger.info(f"Connected to {handle}, notifications on {self.notify_char_uuid}")

    async def write_command_frame(self, frame: bytes):
        """
        Write one frame to the command characteristic.

        Writes are serialized: a second call waits for the first to finish, so
        frames reach the transport in call order. Completion only means the
        transport accepted the write, not that the locomotive acted on it.

        Raises:
            WriteNotConnectedError: No link is established
            WriteTransportError: The transport failed the write
        """
        async with self._write_lock:
            if not self._connected:
                raise WriteNotConnectedError("Cannot write: no link established")

            logger.debug(f"Sending command frame: {format_frame(frame)}")
            try:
                await self._transport.write(self.command_char_uuid, bytes(frame))
            except Exception as e:
                logger.error(f"Error writing command frame to {self._handle}: {e}")
                raise WriteTransportError(str(e) or type(e).__name__) from e

    async def disconnect(self):
        """Tear down the link. Safe to call when already disconnected."""
        if not self._connected and not self._transport.is_connected:
            return

        self._connected = False
        logger.info(f"Disconnecting from {self._handle}...")
        try:
            await self._transport.disconnect()
        except Exception as e:
            logger.warning(f"Disconnect error: {e}")
        else:
            logger.info(f"Disconnected from {self._handle}")
