"""Match a scheduled departure against provider records and classify it."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog

from jetlagged.domain.flights import FlightRecord
from jetlagged.domain.outcomes import DELAY_LONG_MINUTES, DELAY_SHORT_MINUTES, Outcome

logger = structlog.get_logger(__name__)

MATCH_TOLERANCE = timedelta(minutes=5)


class InvalidScheduleError(ValueError):
    """Raised when a scheduled departure cannot be parsed."""


def extract_query_date(raw: str) -> str:
    """Return the calendar day of ``raw``; the provider indexes history by day."""

    return raw.strip().upper().split("T")[0].split(" ")[0]


def parse_scheduled_time(raw: str) -> datetime:
    """Parse a scheduled departure into a naive instant.

    Accepts ``T``, ``t`` or a space as separator. Offset-aware values are
    converted to UTC; naive values stay in the local time they were given in,
    which is how both callers and the provider report departures.
    """

    text = (raw or "").strip()
    if not text:
        raise InvalidScheduleError("Scheduled time is empty")
    text = text.upper().replace(" ", "T", 1)
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise InvalidScheduleError(f"Unrecognised scheduled time '{raw}'") from exc
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


def _record_time(record: FlightRecord) -> datetime | None:
    if not record.scheduled_time:
        return None
    try:
        return parse_scheduled_time(record.scheduled_time)
    except InvalidScheduleError:
        return None


def match_flight(
    records: Iterable[FlightRecord],
    scheduled_at: datetime,
    tolerance: timedelta = MATCH_TOLERANCE,
) -> FlightRecord | None:
    """Return the first record scheduled strictly within ``tolerance`` of ``scheduled_at``.

    Provider order decides between several candidates.
    """

    candidates = [
        record
        for record in records
        if (when := _record_time(record)) is not None and abs(when - scheduled_at) < tolerance
    ]
    if not candidates:
        return None
    if len(candidates) > 1:
        # TODO: replace first-match with a product-approved tie-break once one is agreed.
        logger.warning(
            "ambiguous_flight_match",
            candidates=len(candidates),
            scheduled_at=scheduled_at.isoformat(),
        )
    return candidates[0]


def classify_outcome(record: FlightRecord) -> Outcome:
    """Map a matched record to its outcome; cancellation outranks any delay."""

    if record.cancelled:
        return Outcome.CANCELLED
    if record.delay_minutes >= DELAY_LONG_MINUTES:
        return Outcome.DELAY_LONG
    if record.delay_minutes >= DELAY_SHORT_MINUTES:
        return Outcome.DELAY_SHORT
    return Outcome.ON_TIME


def resolve_records(
    payload: Any,
    scheduled_at: datetime,
    tolerance: timedelta = MATCH_TOLERANCE,
) -> tuple[FlightRecord | None, Outcome]:
    """Match and classify a raw provider payload.

    Anything other than a non-empty list resolves to ``NOT_FOUND``.
    """

    if not isinstance(payload, list) or not payload:
        return None, Outcome.NOT_FOUND
    records = [FlightRecord.from_payload(item) for item in payload]
    matched = match_flight(records, scheduled_at, tolerance)
    if matched is None:
        return None, Outcome.NOT_FOUND
    return matched, classify_outcome(matched)


__all__ = [
    "InvalidScheduleError",
    "MATCH_TOLERANCE",
    "classify_outcome",
    "extract_query_date",
    "match_flight",
    "parse_scheduled_time",
    "resolve_records",
]
