"""
BLE transport package.

Wraps the bleak BLE stack behind a small capability interface and manages
the lifecycle of a single link to one locomotive.
"""

from .ble_transport import BleakTransport, BleTransport
from .bluetooth_scanner import TrainScanner
from .connection import ConnectionManager, DeviceHandle
from .exceptions import (
    ConnectError,
    ConnectTimeoutError,
    ConnectTransportError,
    DeviceNotFoundError,
    TransportError,
    WriteError,
    WriteNotConnectedError,
    WriteTransportError,
)

__all__ = [
    "BleakTransport",
    "BleTransport",
    "TrainScanner",
    "ConnectionManager",
    "DeviceHandle",
    "ConnectError",
    "ConnectTimeoutError",
    "ConnectTransportError",
    "DeviceNotFoundError",
    "TransportError",
    "WriteError",
    "WriteNotConnectedError",
    "WriteTransportError",
]
