"""Flight-status provider abstractions and errors."""

from __future__ import annotations

from typing import Any, Protocol

from jetlagged.domain.flights import FlightQuery


class ProviderError(RuntimeError):
    """Base class for flight-status provider failures."""


class ProviderConfigurationError(ProviderError):
    """Raised when the provider cannot be called with the current configuration."""


class ProviderResponseError(ProviderError):
    """Raised when the provider answers with a non-success status."""

    def __init__(self, status: int, status_text: str) -> None:
        super().__init__(f"Provider returned {status} {status_text}".strip())
        self.status = status
        self.status_text = status_text


class ProviderUnavailableError(ProviderError):
    """Raised when the provider times out or cannot be reached."""


class FlightStatusProvider(Protocol):
    """Source of historical departures for a station, airline and day."""

    async def fetch_departures(self, query: FlightQuery, query_date: str) -> Any:
        """Return the decoded provider payload, normally a list of departures."""
        ...

    async def close(self) -> None:
        ...


__all__ = [
    "FlightStatusProvider",
    "ProviderConfigurationError",
    "ProviderError",
    "ProviderResponseError",
    "ProviderUnavailableError",
]
