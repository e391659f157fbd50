"""
BLE transport boundary.

``BleTransport`` is the minimal capability the connection manager needs from a
BLE stack. ``BleakTransport`` provides it on top of bleak's ``BleakClient``.
"""
from typing import Callable, List, Optional, Protocol

from bleak import BleakClient, BleakScanner
from bleak.exc import BleakDeviceNotFoundError

from config import get_settings
from utils.logging_config import get_logger

from .exceptions import DeviceNotFoundError

logger = get_logger(__name__)

FrameCallback = Callable[[bytes], None]
StateCallback = Callable[[bool], None]


class BleTransport(Protocol):
    """Connect, disconnect, write, subscribe and state-change primitives."""

    @property
    def is_connected(self) -> bool:
        ...

    async def connect(self, address: str) -> None:
        ...

    async def disconnect(self) -> None:
        ...

    async def write(self, uuid: str, data: bytes) -> None:
        ...

    async def subscribe(self, uuid: str, callback: FrameCallback) -> None:
        ...

    def on_state_change(self, callback: StateCallback) -> None:
        ...


class BleakTransport:
    """BleTransport backed by a single ``BleakClient``."""

    def __init__(
        self,
        discovery_timeout: Optional[float] = None,
        write_with_response: Optional[bool] = None,
    ):
        settings = get_settings()
        self.discovery_timeout = (
            discovery_timeout if discovery_timeout is not None else settings.discovery_timeout
        )
        self.write_with_response = (
            write_with_response if write_with_response is not None else settings.write_with_response
        )
        self.client: Optional[BleakClient] = None
        self._state_callbacks: List[StateCallback] = []

    @property
    def is_connected(self) -> bool:
        return self.client is not None and self.client.is_connected

    def on_state_change(self, callback: StateCallback):
        self._state_callbacks.append(callback)

    def _update_state(self, connected: bool):
        for callback in self._state_callbacks:
            callback(connected)

    def _handle_disconnect(self, client: BleakClient):
        logger.info(f"Link to {client.address} closed")
        self._update_state(False)

    async def connect(self, address: str):
        """Resolve ``address`` by scanning, then open the GATT link."""
        logger.debug(f"Looking for {address} (up to {self.discovery_timeout}s)")
        device = await BleakScanner.find_device_by_address(address, timeout=self.discovery_timeout)
        if device is None:
            raise DeviceNotFoundError(f"Device {address} is not advertising")

        # a client left over from an interrupted connect still holds the link
        await self.disconnect()
        self.client = BleakClient(device, disconnected_callback=self._handle_disconnect)
        try:
            await self.client.connect()
        except BleakDeviceNotFoundError as e:
            raise DeviceNotFoundError(f"Device {address} disappeared before connecting") from e

        logger.info(f"Link to {device.name or address} established")
        self._update_state(True)

    async def disconnect(self):
        if self.client is None:
            return
        client, self.client = self.client, None
        if client.is_connected:
            await client.disconnect()

    async def write(self, uuid: str, data: bytes):
        if self.client is None:
            raise RuntimeError("write() called before connect()")
        await self.client.write_gatt_char(uuid, data, response=self.write_with_response)

    async def subscribe(self, uuid: str, callback: FrameCallback):
        if self.client is None:
            raise RuntimeError("subscribe() called before connect()")

        def _notification_handler(_sender, data: bytearray):
            callback(bytes(data))

        await self.client.start_notify(uuid, _notification_handler)
