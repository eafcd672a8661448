"""Outcome and position codes shared with the FlightMarket contract."""

from __future__ import annotations

from enum import Enum, IntEnum


class Outcome(IntEnum):
    """Resolved result of a flight against its schedule.

    Integer values are the contract's ``uint8`` outcome encoding.
    """

    NOT_FOUND = 0
    ON_TIME = 1
    DELAY_SHORT = 2
    DELAY_LONG = 3
    CANCELLED = 4

    @property
    def is_final(self) -> bool:
        return self is not Outcome.NOT_FOUND


class Position(IntEnum):
    """Side of an outcome market."""

    YES = 0
    NO = 1


class CoverageType(str, Enum):
    """Risk a traveller asks to be covered against."""

    DELAY = "DELAY"
    CANCEL = "CANCEL"


DELAY_SHORT_MINUTES = 30
DELAY_LONG_MINUTES = 120

__all__ = [
    "CoverageType",
    "DELAY_LONG_MINUTES",
    "DELAY_SHORT_MINUTES",
    "Outcome",
    "Position",
]
