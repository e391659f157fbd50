"""Byte-level codec for the BRIO Smart Tech GATT protocol.

Command frame layout (written to the command characteristic)::

    +--------+-------+-------+----------+
    | Marker | Arg 0 | Arg 1 | Checksum |
    | 1 byte | 1 byte| 1 byte|  1 byte  |
    +--------+-------+-------+----------+

- Marker: command kind (speed, light, direction, effect)
- Checksum: two's complement of the low byte of the sum of the first three bytes

Notification frame layout (pushed on the notify characteristic)::

    +--------+--------+
    | Marker | Value  |
    | 1 byte | 1 byte |
    +--------+--------+
"""

from __future__ import annotations

from utils.constants import (
    BATTERY_MAX,
    COMMAND_FRAME_LENGTH,
    COMMAND_MARKER,
    NOTIFICATION_FRAME_LENGTH,
    NOTIFICATION_MARKER,
    SPEED_MAX,
)

from .commands import Command, PlayEffect, SetDirection, SetLight, SetSpeed, Stop
from .events import BatteryLevel, BumpDetected, SpeedReport, StatusEvent, Unknown
from .exceptions import InvalidFieldValueError, UnexpectedLengthError


def checksum(body: bytes) -> int:
    """Return the byte that makes ``body`` plus itself sum to zero mod 256."""
    return (0x100 - (sum(body) & 0xFF)) & 0xFF


def format_frame(frame: bytes) -> str:
    """Render a frame the way it is logged, e.g. ``0x01 0x32 0x00 0xcd``."""
    return " ".join(f"0x{b:02x}" for b in frame)


def _frame(marker: int, arg0: int, arg1: int = 0x00) -> bytes:
    body = bytes([marker, arg0, arg1])
    frame = body + bytes([checksum(body)])
    assert len(frame) == COMMAND_FRAME_LENGTH
    return frame


def encode(command: Command) -> bytes:
    """Encode a command into its fixed four-byte frame.

    Args:
        command: Any command value. Its arguments were validated when it was built.

    Returns:
        The frame to write to the command characteristic.

    Raises:
        TypeError: If ``command`` is not a known command type.
    """
    if isinstance(command, SetSpeed):
        return _frame(COMMAND_MARKER["SPEED"], command.level, command.direction.flag)
    if isinstance(command, Stop):
        return _frame(COMMAND_MARKER["SPEED"], 0x00, command.direction.flag)
    if isinstance(command, SetDirection):
        return _frame(COMMAND_MARKER["DIRECTION"], command.direction.flag)
    if isinstance(command, PlayEffect):
        return _frame(COMMAND_MARKER["EFFECT"], command.effect_id)
    if isinstance(command, SetLight):
        return _frame(COMMAND_MARKER["LIGHT"], int(command.color), command.intensity)
    raise TypeError(f"Cannot encode {type(command).__name__}")


def decode(frame: bytes) -> StatusEvent:
    """Decode a notification frame into a status event.

    Unrecognised markers on a correctly sized frame decode to ``Unknown`` so
    newer firmware never breaks an older controller.

    Raises:
        UnexpectedLengthError: If the frame is not a notification-sized frame.
        InvalidFieldValueError: If a known field is out of range.
    """
    frame = bytes(frame)
    if len(frame) != NOTIFICATION_FRAME_LENGTH:
        raise UnexpectedLengthError(
            f"Expected {NOTIFICATION_FRAME_LENGTH} byte notification, got {len(frame)}", frame
        )

    marker, value = frame[0], frame[1]

    if marker == NOTIFICATION_MARKER["BATTERY"]:
        if value > BATTERY_MAX:
            raise InvalidFieldValueError(f"Battery level {value}% out of range", frame)
        return BatteryLevel(percent=value)

    if marker == NOTIFICATION_MARKER["SPEED"]:
        if value > SPEED_MAX:
            raise InvalidFieldValueError(f"Speed level {value} out of range", frame)
        return SpeedReport(level=value)

    if marker == NOTIFICATION_MARKER["BUMP"]:
        # value byte is reserved
        return BumpDetected()

    return Unknown(raw=frame)
