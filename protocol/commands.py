"""Outgoing locomotive commands.

Commands are immutable values validated when they are built, so encoding
never has to reject one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Union

from utils.constants import EFFECT_ID_MAX, LIGHT_INTENSITY_MAX, SPEED_MAX, SPEED_MIN

from .exceptions import InvalidArgumentError


class Direction(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"

    @property
    def flag(self) -> int:
        """Wire value of the direction flag byte."""
        return 0x00 if self is Direction.FORWARD else 0x01


class Color(IntEnum):
    """Head light colours understood by the engine."""

    OFF = 0
    RED = 1
    GREEN = 2
    BLUE = 3
    YELLOW = 4
    CYAN = 5
    PURPLE = 6
    WHITE = 7


def _check_range(name: str, value: int, low: int, high: int) -> None:
    # bool is an int subclass but never a meaningful level
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")
    if not low <= value <= high:
        raise InvalidArgumentError(f"{name} must be between {low} and {high}, got {value}")


def _check_direction(direction) -> None:
    if not isinstance(direction, Direction):
        raise InvalidArgumentError(f"direction must be a Direction, got {direction!r}")


@dataclass(frozen=True)
class SetSpeed:
    level: int
    direction: Direction = Direction.FORWARD

    def __post_init__(self):
        _check_range("speed level", self.level, SPEED_MIN, SPEED_MAX)
        _check_direction(self.direction)


@dataclass(frozen=True)
class SetDirection:
    direction: Direction

    def __post_init__(self):
        _check_direction(self.direction)


@dataclass(frozen=True)
class PlayEffect:
    effect_id: int

    def __post_init__(self):
        _check_range("effect id", self.effect_id, 0, EFFECT_ID_MAX)


@dataclass(frozen=True)
class Stop:
    """Speed zero; the direction flag is kept so the engine does not flip."""

    direction: Direction = Direction.FORWARD

    def __post_init__(self):
        _check_direction(self.direction)


@dataclass(frozen=True)
class SetLight:
    color: Color
    intensity: int

    def __post_init__(self):
        try:
            object.__setattr__(self, "color", Color(self.color))
        except ValueError as e:
            raise InvalidArgumentError(f"unknown light colour {self.color!r}") from e
        _check_range("light intensity", self.intensity, 0, LIGHT_INTENSITY_MAX)


Command = Union[SetSpeed, SetDirection, PlayEffect, Stop, SetLight]
