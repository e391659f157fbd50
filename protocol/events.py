"""Status events decoded from locomotive notifications."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class BatteryLevel:
    percent: int


@dataclass(frozen=True)
class SpeedReport:
    level: int


@dataclass(frozen=True)
class BumpDetected:
    pass


@dataclass(frozen=True)
class DisconnectedUnexpectedly:
    """Emitted by a session when the link drops without being asked to."""

    pass


@dataclass(frozen=True)
class Unknown:
    """A structurally valid notification with an unrecognised marker."""

    raw: bytes

    def __repr__(self) -> str:
        return f"Unknown(raw={self.raw.hex(' ')})"


StatusEvent = Union[BatteryLevel, SpeedReport, BumpDetected, DisconnectedUnexpectedly, Unknown]
