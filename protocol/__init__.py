"""
BRIO Smart Tech protocol package.

Pure, I/O-free encoding of commands and decoding of status notifications.
"""

from .codec import checksum, decode, encode, format_frame
from .commands import Color, Command, Direction, PlayEffect, SetDirection, SetLight, SetSpeed, Stop
from .events import (
    BatteryLevel,
    BumpDetected,
    DisconnectedUnexpectedly,
    SpeedReport,
    StatusEvent,
    Unknown,
)
from .exceptions import (
    DecodeError,
    InvalidArgumentError,
    InvalidFieldValueError,
    ProtocolError,
    UnexpectedLengthError,
)

__all__ = [
    "checksum",
    "decode",
    "encode",
    "format_frame",
    "Color",
    "Command",
    "Direction",
    "PlayEffect",
    "SetDirection",
    "SetLight",
    "SetSpeed",
    "Stop",
    "BatteryLevel",
    "BumpDetected",
    "DisconnectedUnexpectedly",
    "SpeedReport",
    "StatusEvent",
    "Unknown",
    "DecodeError",
    "InvalidArgumentError",
    "InvalidFieldValueError",
    "ProtocolError",
    "UnexpectedLengthError",
]
