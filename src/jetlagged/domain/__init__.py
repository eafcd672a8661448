"""Domain models shared across the resolver and contract client."""

from .flights import FlightQuery, FlightRecord
from .outcomes import CoverageType, Outcome, Position

__all__ = [
    "CoverageType",
    "FlightQuery",
    "FlightRecord",
    "Outcome",
    "Position",
]
