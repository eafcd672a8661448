"""Aviation Edge flight-history client."""

from __future__ import annotations

from typing import Any

import httpx
from structlog import get_logger
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from jetlagged.config.settings import AviationEdgeSettings
from jetlagged.domain.flights import FlightQuery
from jetlagged.providers.base import (
    ProviderConfigurationError,
    ProviderResponseError,
    ProviderUnavailableError,
)

logger = get_logger(__name__)


class AviationEdgeClient:
    """Query departures from ``/flightsHistory``."""

    HISTORY_PATH = "/flightsHistory"

    def __init__(
        self,
        api_key: str | None,
        settings: AviationEdgeSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AviationEdgeSettings()
        self._api_key = api_key
        self._client_provided = client is not None
        self._client = client or httpx.AsyncClient(
            base_url=self._settings.base_url,
            headers={"accept": "application/json"},
            timeout=self._settings.timeout_seconds,
        )

    async def close(self) -> None:
        """Dispose the HTTP client if this instance created it."""

        if not self._client_provided:
            await self._client.aclose()

    async def fetch_departures(self, query: FlightQuery, query_date: str) -> Any:
        """Fetch every departure of the flight from its station on ``query_date``.

        Returns the decoded JSON body as-is; the provider answers with an
        object instead of a list when it has no records.
        """

        if not self._api_key:
            raise ProviderConfigurationError("AVIATION_EDGE_API_KEY is not configured")

        params = {
            "key": self._api_key,
            "code": query.departure_code,
            "type": "departure",
            "date_from": query_date,
            "airline_iata": query.airline_code,
            "flight_num": query.flight_number,
        }
        logger.info(
            "fetching_flight_history",
            departure_code=query.departure_code,
            airline_code=query.airline_code,
            flight_number=query.flight_number,
            date=query_date,
        )

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._settings.max_attempts),
                wait=wait_exponential(multiplier=0.5, max=4.0),
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    response = await self._client.get(self.HISTORY_PATH, params=params)
        except httpx.TimeoutException as exc:
            raise ProviderUnavailableError(
                f"Aviation Edge did not respond within {self._settings.timeout_seconds}s",
            ) from exc
        except httpx.TransportError as exc:
            raise ProviderUnavailableError(f"Aviation Edge unreachable: {exc}") from exc

        if not response.is_success:
            logger.warning(
                "flight_history_request_failed",
                status=response.status_code,
                reason=response.reason_phrase,
            )
            raise ProviderResponseError(response.status_code, response.reason_phrase)

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderResponseError(502, "Invalid JSON from Aviation Edge") from exc

        logger.info(
            "fetched_flight_history",
            records=len(payload) if isinstance(payload, list) else 0,
        )
        return payload


__all__ = ["AviationEdgeClient"]
