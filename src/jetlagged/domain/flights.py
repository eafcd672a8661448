"""Flight lookup keys and provider records."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class FlightQuery(BaseModel):
    """Lookup key for one scheduled departure."""

    flight_id: str = Field(..., description="Market identifier the flight is traded under.")
    departure_code: str = Field(..., description="IATA code of the departure station.")
    airline_code: str = Field(..., description="IATA airline designator, e.g. AF.")
    flight_number: str = Field(..., description="Numeric part of the flight number.")
    scheduled: str = Field(
        ...,
        description="Scheduled departure as YYYY-MM-DDTHH:MM or YYYY-MM-DD HH:MM.",
    )


def _parse_delay(value: Any) -> int:
    if value is None or value == "":
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


class FlightRecord(BaseModel):
    """One historical departure as reported by the flight-status provider.

    ``payload`` is kept untouched so it can be echoed back to callers.
    """

    payload: dict[str, Any]
    scheduled_time: str | None = None
    delay_minutes: int = 0
    status: str | None = None

    @property
    def cancelled(self) -> bool:
        return (self.status or "").lower() == "cancelled"

    @classmethod
    def from_payload(cls, payload: Any) -> FlightRecord:
        if not isinstance(payload, dict):
            return cls(payload={"value": payload})
        departure = payload.get("departure")
        if not isinstance(departure, dict):
            departure = {}
        scheduled = departure.get("scheduledTime")
        status = payload.get("status")
        return cls(
            payload=payload,
            scheduled_time=scheduled if isinstance(scheduled, str) else None,
            delay_minutes=_parse_delay(departure.get("delay")),
            status=status if isinstance(status, str) else None,
        )


__all__ = ["FlightQuery", "FlightRecord"]
