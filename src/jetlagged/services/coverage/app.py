"""FastAPI application for the coverage desk."""

from __future__ import annotations

from fastapi import APIRouter, FastAPI, HTTPException, Request
from pydantic import BaseModel, Field

from jetlagged.config import Settings
from jetlagged.coverage.book import (
    CoverageBook,
    CoverageError,
    CoverageMarket,
    CoverageTicket,
    PremiumQuote,
    quote_premium,
    seed_markets,
)
from jetlagged.domain.outcomes import CoverageType
from jetlagged.services.base import create_app

router = APIRouter(prefix="/coverage", tags=["Coverage"])


class QuoteRequest(BaseModel):
    outcome_type: CoverageType = CoverageType.DELAY
    coverage: float = Field(0, ge=0)


class CoverageRequest(QuoteRequest):
    flight_number: str
    departure_date: str
    route: str = ""


@router.get("/markets")
async def list_markets(request: Request, limit: int = 50) -> list[CoverageMarket]:
    """Open markets sorted by implied probability."""

    book: CoverageBook = request.app.state.coverage_book
    return book.markets()[:limit]


@router.post("/quote")
async def quote(body: QuoteRequest) -> PremiumQuote:
    return quote_premium(body.outcome_type, body.coverage)


@router.post("/requests")
async def request_coverage(request: Request, body: CoverageRequest) -> CoverageTicket:
    """Route a coverage request to its flight market."""

    book: CoverageBook = request.app.state.coverage_book
    try:
        return book.request(
            body.flight_number,
            body.departure_date,
            body.coverage,
            body.outcome_type,
            body.route,
        )
    except CoverageError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def build_app(settings: Settings | None = None, book: CoverageBook | None = None) -> FastAPI:
    """Return configured FastAPI application."""

    app = create_app("coverage", settings)
    app.state.coverage_book = book or CoverageBook(seed_markets())
    app.include_router(router)
    return app
