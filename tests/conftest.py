"""
Pytest configuration and shared fixtures for the train controller tests.

Provides a recording transport double so the connection manager and session
can be exercised without a Bluetooth adapter.
"""

import asyncio
import os
from typing import Callable, Dict, List, Optional, Tuple

import pytest

# Set test environment before importing application modules
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_FORMAT"] = "text"
os.environ["CONNECT_TIMEOUT"] = "5.0"

from transport.connection import ConnectionManager, DeviceHandle  # noqa: E402
from utils.constants import BRIO_CHAR_UUID  # noqa: E402

TEST_ADDRESS = "AA:BB:CC:DD:EE:FF"


class FakeTransport:
    """
    In-memory BleTransport that records every call.

    Behaves like bleak in that tearing down a live link fires the
    state-change callbacks with ``False``.
    """

    def __init__(self):
        self.writes: List[Tuple[str, bytes]] = []
        self.subscriptions: Dict[str, Callable[[bytes], None]] = {}
        self.calls: List[str] = []
        self.connect_addresses: List[str] = []
        self.disconnect_calls = 0
        self.connect_error: Optional[BaseException] = None
        self.subscribe_error: Optional[BaseException] = None
        self.write_error: Optional[BaseException] = None
        self.connect_delay = 0.0
        self.subscribe_delay = 0.0
        self.write_delay = 0.0
        self.in_flight = 0
        self.max_in_flight = 0
        self._connected = False
        self._state_callbacks: List[Callable[[bool], None]] = []

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def frames(self) -> List[bytes]:
        return [data for _, data in self.writes]

    def on_state_change(self, callback):
        self._state_callbacks.append(callback)

    def _fire_state(self, connected: bool):
        for callback in self._state_callbacks:
            callback(connected)

    async def connect(self, address: str):
        self.calls.append("connect")
        self.connect_addresses.append(address)
        if self.connect_delay:
            await asyncio.sleep(self.connect_delay)
        if self.connect_error is not None:
            raise self.connect_error
        self._connected = True
        self._fire_state(True)

    async def disconnect(self):
        self.calls.append("disconnect")
        self.disconnect_calls += 1
        if self._connected:
            self._connected = False
            self._fire_state(False)

    async def write(self, uuid: str, data: bytes):
        self.calls.append("write")
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.write_delay:
                await asyncio.sleep(self.write_delay)
            if self.write_error is not None:
                raise self.write_error
            self.writes.append((uuid, bytes(data)))
        finally:
            self.in_flight -= 1

    async def subscribe(self, uuid: str, callback):
        self.calls.append("subscribe")
        if self.subscribe_delay:
            await asyncio.sleep(self.subscribe_delay)
        if self.subscribe_error is not None:
            raise self.subscribe_error
        self.subscriptions[uuid] = callback

    def notify(self, frame: bytes, uuid: str = BRIO_CHAR_UUID):
        """Deliver a notification as the locomotive would."""
        self.subscriptions[uuid](bytes(frame))

    def drop_link(self):
        """Simulate the locomotive going out of range."""
        self._connected = False
        self._fire_state(False)


@pytest.fixture
def device_handle() -> DeviceHandle:
    """Handle for the locomotive used throughout the tests."""
    return DeviceHandle(address=TEST_ADDRESS, name="Smart 2.0 Engine")


@pytest.fixture
def fake_transport() -> FakeTransport:
    """Recording transport double."""
    return FakeTransport()


@pytest.fixture
def connection(fake_transport) -> ConnectionManager:
    """Connection manager wired to the fake transport."""
    return ConnectionManager(fake_transport)


@pytest.fixture
def session(device_handle, fake_transport):
    """Train session wired to the fake transport."""
    from controllers.train_session import TrainSession

    return TrainSession(device_handle, transport=fake_transport)


@pytest.fixture
def recorded_events(session) -> list:
    """List that collects every event the session emits."""
    events = []
    session.add_event_callback(events.append)
    return events
