"""
Filter module for the FDA Calendar Scraper.

This module holds the acceptance criteria applied to each calendar row:
- Price ceiling (inclusive): keep rows priced at or below the limit
- Date ceiling (exclusive): keep rows dated strictly before the limit

Either ceiling may be left unset, in which case every row passes it.
"""

from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Dict, Optional

from fda_calendar.currency import USD


@dataclass(frozen=True)
class ScrapePredicates:
    """
    Price and date ceilings for calendar rows.

    Attributes:
        price_limit: Highest accepted price, inclusive. None for no limit.
        date_limit: First rejected catalyst date, exclusive. None for no limit.
    """
    price_limit: Optional[USD] = None
    date_limit: Optional[date] = None

    def with_price_limit(self, price_limit: USD) -> "ScrapePredicates":
        return replace(self, price_limit=price_limit)

    def with_date_limit(self, date_limit: date) -> "ScrapePredicates":
        return replace(self, date_limit=date_limit)

    def test_price(self, price: USD) -> bool:
        """Return True if ``price`` is within the price ceiling."""
        if self.price_limit is None:
            return True
        return price <= self.price_limit

    def test_date(self, catalyst_date: date) -> bool:
        """Return True if ``catalyst_date`` falls before the date ceiling."""
        if self.date_limit is None:
            return True
        return catalyst_date < self.date_limit

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "price_limit": str(self.price_limit) if self.price_limit is not None else None,
            "date_limit": self.date_limit.isoformat() if self.date_limit is not None else None,
        }


# Accepts every row
NO_LIMITS = ScrapePredicates()
