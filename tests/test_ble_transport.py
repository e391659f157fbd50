"""
Unit tests for the bleak-backed transport and the scanner.

bleak is mocked so no Bluetooth adapter is needed.
"""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bleak.exc import BleakDeviceNotFoundError

from transport.ble_transport import BleakTransport
from transport.bluetooth_scanner import TrainScanner
from transport.connection import DeviceHandle
from transport.exceptions import DeviceNotFoundError

ADDRESS = "AA:BB:CC:DD:EE:FF"


def _make_device(address=ADDRESS, name="Smart 2.0 Engine"):
    device = MagicMock()
    device.address = address
    device.name = name
    return device


@pytest.fixture
def mock_bleak():
    """Patch BleakScanner and BleakClient inside the transport module."""
    with patch("transport.ble_transport.BleakScanner") as scanner_cls, patch(
        "transport.ble_transport.BleakClient"
    ) as client_cls:
        device = _make_device()
        scanner_cls.find_device_by_address = AsyncMock(return_value=device)

        client = MagicMock()
        client.address = ADDRESS
        client.is_connected = True
        client.connect = AsyncMock()
        client.disconnect = AsyncMock()
        client.write_gatt_char = AsyncMock()
        client.start_notify = AsyncMock()
        client_cls.return_value = client

        yield scanner_cls, client_cls, client, device


class TestBleakTransport:
    """Test suite for BleakTransport."""

    @pytest.mark.asyncio
    async def test_connect_resolves_address(self, mock_bleak):
        """connect() scans for the address, then opens a client on the device."""
        scanner_cls, client_cls, client, device = mock_bleak
        transport = BleakTransport(discovery_timeout=2.0, write_with_response=False)
        states = []
        transport.on_state_change(states.append)

        await transport.connect(ADDRESS)

        scanner_cls.find_device_by_address.assert_awaited_once_with(ADDRESS, timeout=2.0)
        client_cls.assert_called_once_with(device, disconnected_callback=transport._handle_disconnect)
        client.connect.assert_awaited_once()
        assert transport.is_connected is True
        assert states == [True]

    @pytest.mark.asyncio
    async def test_connect_device_missing(self, mock_bleak):
        """An address that never advertises raises DeviceNotFoundError."""
        scanner_cls, client_cls, _, _ = mock_bleak
        scanner_cls.find_device_by_address = AsyncMock(return_value=None)
        transport = BleakTransport(discovery_timeout=0.1)

        with pytest.raises(DeviceNotFoundError):
            await transport.connect(ADDRESS)

        client_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_connect_bleak_not_found(self, mock_bleak):
        """bleak's own not-found error is translated."""
        _, _, client, _ = mock_bleak
        client.connect = AsyncMock(side_effect=BleakDeviceNotFoundError(ADDRESS))
        transport = BleakTransport()

        with pytest.raises(DeviceNotFoundError):
            await transport.connect(ADDRESS)

    @pytest.mark.asyncio
    async def test_write_uses_configured_response_mode(self, mock_bleak):
        """Frames are written with the configured response flag."""
        _, _, client, _ = mock_bleak
        transport = BleakTransport(write_with_response=True)
        await transport.connect(ADDRESS)

        await transport.write("char-uuid", b"\x01\x32\x00\xcd")

        client.write_gatt_char.assert_awaited_once_with("char-uuid", b"\x01\x32\x00\xcd", response=True)

    @pytest.mark.asyncio
    async def test_write_before_connect(self):
        """Writing without a client is a programming error."""
        transport = BleakTransport()

        with pytest.raises(RuntimeError):
            await transport.write("char-uuid", b"\x00")

    @pytest.mark.asyncio
    async def test_subscribe_converts_bytearray(self, mock_bleak):
        """Notification payloads are handed on as bytes."""
        _, _, client, _ = mock_bleak
        transport = BleakTransport()
        await transport.connect(ADDRESS)
        received = []

        await transport.subscribe("char-uuid", received.append)
        uuid, handler = client.start_notify.await_args.args
        handler(MagicMock(), bytearray(b"\x10\x4b"))

        assert uuid == "char-uuid"
        assert received == [b"\x10\x4b"]
        assert isinstance(received[0], bytes)

    @pytest.mark.asyncio
    async def test_disconnected_callback_reports_state(self, mock_bleak):
        """bleak's disconnected callback is forwarded as a state change."""
        _, _, client, _ = mock_bleak
        transport = BleakTransport()
        states = []
        transport.on_state_change(states.append)
        await transport.connect(ADDRESS)

        transport._handle_disconnect(client)

        assert states == [True, False]

    @pytest.mark.asyncio
    async def test_disconnect_is_idempotent(self, mock_bleak):
        """disconnect() closes the client once."""
        _, _, client, _ = mock_bleak
        transport = BleakTransport()
        await transport.disconnect()
        await transport.connect(ADDRESS)

        await transport.disconnect()
        await transport.disconnect()

        client.disconnect.assert_awaited_once()
        assert transport.is_connected is False

    @pytest.mark.asyncio
    async def test_connect_closes_previous_client(self, mock_bleak):
        """A second connect() closes the client left by the first."""
        _, client_cls, client, _ = mock_bleak
        transport = BleakTransport()
        await transport.connect(ADDRESS)

        await transport.connect(ADDRESS)

        client.disconnect.assert_awaited_once()
        assert client_cls.call_count == 2


class TestTrainScanner:
    """Test suite for TrainScanner."""

    @pytest.mark.asyncio
    async def test_scan_filters_by_name(self):
        """Only devices whose name contains the filter are returned."""
        devices = [
            _make_device("11:11:11:11:11:11", "Smart 2.0 Engine"),
            _make_device("22:22:22:22:22:22", "Headphones"),
            _make_device("33:33:33:33:33:33", None),
            _make_device("11:11:11:11:11:11", "Smart 2.0 Engine"),
        ]
        with patch("transport.bluetooth_scanner.BleakScanner") as scanner_cls:
            scanner_cls.discover = AsyncMock(return_value=devices)
            scanner = TrainScanner(name_filter="Smart 2.0")

            handles = await scanner.scan(timeout=1.0)

        scanner_cls.discover.assert_awaited_once_with(timeout=1.0)
        assert handles == [DeviceHandle(address="11:11:11:11:11:11", name="Smart 2.0 Engine")]

    @pytest.mark.asyncio
    async def test_find_first_none(self):
        """find_first() returns None when nothing matches."""
        with patch("transport.bluetooth_scanner.BleakScanner") as scanner_cls:
            scanner_cls.discover = AsyncMock(return_value=[_make_device(name="Speaker")])

            assert await TrainScanner().find_first(timeout=0.5) is None

    def test_default_filter_from_settings(self):
        """The name filter defaults to the configured value."""
        assert TrainScanner().name_filter == "Smart 2.0"
