"""Coverage quotes and the in-memory book of requested flight markets."""

from __future__ import annotations

import random
from decimal import ROUND_HALF_UP, Decimal

import structlog
from pydantic import BaseModel, Field

from jetlagged.domain.outcomes import CoverageType

logger = structlog.get_logger(__name__)

BASE_PRICE = {
    CoverageType.DELAY: Decimal("0.18"),
    CoverageType.CANCEL: Decimal("0.12"),
}
MAX_COVERAGE_LOADING = Decimal("0.08")
COVERAGE_LOADING_DIVISOR = Decimal(5000)
BASE_LIQUIDITY = 12000
LIQUIDITY_SPREAD = 6000
SEED_DEMAND = 5000

CENT = Decimal("0.01")


class CoverageError(ValueError):
    """Raised when a coverage request is incomplete."""


class PremiumQuote(BaseModel):
    yes_price: float
    implied_probability: int
    premium: float


class CoverageMarket(BaseModel):
    """A flight market as the coverage desk lists it."""

    id: str
    flight_number: str
    departure_date: str
    route: str
    yes_price: float = Field(..., gt=0, lt=1)
    implied_probability: int
    total_liquidity: int
    coverage_demand: float
    outcome_type: CoverageType


class CoverageTicket(BaseModel):
    market: CoverageMarket
    created: bool
    message: str


def quote_premium(coverage_type: CoverageType, coverage: float) -> PremiumQuote:
    """Price ``coverage`` dollars of protection against ``coverage_type``.

    Larger tickets load the price by up to eight cents.
    """

    amount = Decimal(str(coverage or 0))
    loading = min(MAX_COVERAGE_LOADING, amount / COVERAGE_LOADING_DIVISOR)
    price = (BASE_PRICE[coverage_type] + loading).quantize(CENT, rounding=ROUND_HALF_UP)
    premium = (amount * price).quantize(CENT, rounding=ROUND_HALF_UP)
    implied = int((price * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return PremiumQuote(yes_price=float(price), implied_probability=implied, premium=float(premium))


SEED_MARKETS: tuple[CoverageMarket, ...] = (
    CoverageMarket(
        id="DL104-2024-12-01",
        flight_number="DL104",
        departure_date="2024-12-01",
        route="JFK → LAX",
        yes_price=0.22,
        implied_probability=22,
        total_liquidity=32500,
        coverage_demand=12800,
        outcome_type=CoverageType.DELAY,
    ),
    CoverageMarket(
        id="UA881-2024-12-02",
        flight_number="UA881",
        departure_date="2024-12-02",
        route="SFO → NRT",
        yes_price=0.17,
        implied_probability=17,
        total_liquidity=41200,
        coverage_demand=9800,
        outcome_type=CoverageType.CANCEL,
    ),
    CoverageMarket(
        id="AF008-2024-12-03",
        flight_number="AF008",
        departure_date="2024-12-03",
        route="CDG → JFK",
        yes_price=0.29,
        implied_probability=29,
        total_liquidity=28750,
        coverage_demand=16500,
        outcome_type=CoverageType.DELAY,
    ),
)


def seed_markets() -> list[CoverageMarket]:
    """Fresh copies of the markets a new desk opens with."""

    return [market.model_copy() for market in SEED_MARKETS]


def market_key(flight_number: str, departure_date: str) -> str:
    return f"{flight_number.strip().upper()}-{departure_date}"


class CoverageBook:
    """Markets opened by coverage requests, newest first."""

    def __init__(
        self,
        markets: list[CoverageMarket] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._markets: list[CoverageMarket] = list(markets or [])
        self._rng = rng or random.Random()

    def markets(self) -> list[CoverageMarket]:
        """Open markets, most likely to pay out first."""

        return sorted(self._markets, key=lambda m: m.implied_probability, reverse=True)

    def get(self, market_id: str) -> CoverageMarket | None:
        return next((m for m in self._markets if m.id == market_id), None)

    def request(
        self,
        flight_number: str,
        departure_date: str,
        coverage: float,
        coverage_type: CoverageType = CoverageType.DELAY,
        route: str = "",
    ) -> CoverageTicket:
        """Route a request to the flight's open market, opening one if needed."""

        normalized = flight_number.strip().upper()
        if not normalized:
            raise CoverageError("Please enter a flight number to continue.")
        if not departure_date:
            raise CoverageError("Add a departure date so we can match the right flight.")

        market_id = market_key(normalized, departure_date)
        existing = self.get(market_id)
        if existing is not None:
            return CoverageTicket(
                market=existing,
                created=False,
                message=(
                    f"Great news! There is already an open {existing.outcome_type.value.lower()} "
                    f"market for {existing.flight_number} on {existing.departure_date}. "
                    "Your bet is routed there."
                ),
            )

        quote = quote_premium(coverage_type, coverage)
        market = CoverageMarket(
            id=market_id,
            flight_number=normalized,
            departure_date=departure_date,
            route=route or "Route pending",
            yes_price=quote.yes_price,
            implied_probability=quote.implied_probability,
            total_liquidity=BASE_LIQUIDITY + round(self._rng.random() * LIQUIDITY_SPREAD),
            coverage_demand=(coverage or 0) + SEED_DEMAND,
            outcome_type=coverage_type,
        )
        self._markets.insert(0, market)
        logger.info("coverage_market_opened", market_id=market_id, outcome_type=coverage_type.value)
        return CoverageTicket(
            market=market,
            created=True,
            message=(
                f"New market created for {normalized} ({coverage_type.value.lower()}). "
                "You are the first to request coverage on this flight!"
            ),
        )


__all__ = [
    "CoverageBook",
    "CoverageError",
    "CoverageMarket",
    "CoverageTicket",
    "PremiumQuote",
    "market_key",
    "quote_premium",
    "seed_markets",
]
