"""Coverage requests for flight markets."""

from jetlagged.coverage.book import (
    CoverageBook,
    CoverageError,
    CoverageMarket,
    quote_premium,
    seed_markets,
)

__all__ = ["CoverageBook", "CoverageError", "CoverageMarket", "quote_premium", "seed_markets"]
