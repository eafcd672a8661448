"""FastAPI application for the flight resolver service."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from jetlagged.config import Settings, UnknownNetworkError, get_settings
from jetlagged.domain.flights import FlightQuery, FlightRecord
from jetlagged.providers.base import (
    ProviderConfigurationError,
    ProviderResponseError,
    ProviderUnavailableError,
)
from jetlagged.resolution.matching import InvalidScheduleError
from jetlagged.resolution.service import ResolutionResult, ResolverService, SubmissionState
from jetlagged.services.base import create_app

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Resolution"])

REQUIRED_PARAMETERS = ["flightId", "departureCode", "date", "airlineCode", "flightNumber"]


def _not_found_body(result: ResolutionResult) -> dict[str, object]:
    query = result.query
    return {
        "error": "No matching flight found",
        "flightId": query.flight_id,
        "departureCode": query.departure_code,
        "date": query.scheduled,
        "queryDate": result.query_date,
        "scheduledDateTime": query.scheduled,
        "airlineCode": query.airline_code,
        "flightNumber": query.flight_number,
        "outcome": int(result.outcome),
    }


def _resolved_body(result: ResolutionResult, record: FlightRecord) -> dict[str, object]:
    body: dict[str, object] = {
        "flightId": result.query.flight_id,
        "flight": record.payload,
        "outcome": int(result.outcome),
        "outcomeName": result.outcome.name,
    }
    if result.submission.state in (SubmissionState.SUBMITTED, SubmissionState.FAILED):
        body["blockchain"] = result.submission.to_payload()
    return body


@router.get("/resolve")
async def resolve_flight(
    request: Request,
    flight_id: str | None = Query(None, alias="flightId"),
    departure_code: str | None = Query(None, alias="departureCode"),
    date: str | None = Query(None, description="YYYY-MM-DDTHH:MM or YYYY-MM-DD HH:MM"),
    airline_code: str | None = Query(None, alias="airlineCode"),
    flight_number: str | None = Query(None, alias="flightNumber"),
    chain: str | None = Query(None, description="Network letter code or name"),
    submit: bool | None = Query(None, description="Override on-chain submission"),
) -> JSONResponse:
    """Resolve one flight market and, when enabled, settle it on-chain."""

    if not all((flight_id, departure_code, date, airline_code, flight_number)):
        return JSONResponse(
            {"error": "Missing required parameters", "required": REQUIRED_PARAMETERS},
            status_code=400,
        )

    service: ResolverService = request.app.state.resolver
    query = FlightQuery(
        flight_id=flight_id,
        departure_code=departure_code,
        airline_code=airline_code,
        flight_number=flight_number,
        scheduled=date,
    )

    try:
        network = service.select_network(chain)
        result = await service.resolve(query, network=network, submit=submit)
    except UnknownNetworkError as exc:
        return JSONResponse({"error": "Unknown chain", "message": str(exc)}, status_code=400)
    except InvalidScheduleError as exc:
        return JSONResponse(
            {"error": "Invalid date", "message": str(exc), "date": date},
            status_code=400,
        )
    except ProviderResponseError as exc:
        return JSONResponse(
            {
                "error": "Aviation Edge API error",
                "status": exc.status,
                "statusText": exc.status_text,
            },
            status_code=exc.status,
        )
    except ProviderUnavailableError as exc:
        return JSONResponse(
            {"error": "Flight status provider unavailable", "message": str(exc)},
            status_code=504,
        )
    except ProviderConfigurationError as exc:
        return JSONResponse(
            {"error": "Flight status provider not configured", "message": str(exc)},
            status_code=500,
        )
    except Exception as exc:
        logger.exception("resolve_failed", flight_id=flight_id)
        return JSONResponse(
            {"error": "Internal server error", "message": str(exc) or type(exc).__name__},
            status_code=500,
        )

    record = result.record
    if record is None:
        return JSONResponse(_not_found_body(result), status_code=404)

    body = _resolved_body(result, record)
    if result.submission.state is SubmissionState.FAILED:
        return JSONResponse(
            {"error": "Blockchain submission failed", **body},
            status_code=500,
        )
    return JSONResponse(body, status_code=200)


def build_app(
    settings: Settings | None = None,
    service: ResolverService | None = None,
) -> FastAPI:
    """Return configured FastAPI application."""

    settings = settings or get_settings()
    service = service or ResolverService(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await service.close()

    app = create_app("resolver", settings, lifespan=lifespan)
    app.state.resolver = service
    app.include_router(router)
    return app
