"""
Parse module for the FDA Calendar Scraper.

This module turns one calendar table row into a validated CatalystRow:
the price and date are parsed first and checked against the caller's
ceilings, then the remaining fields are extracted. Rows outside the
ceilings are dropped; any missing or malformed field raises.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional

from bs4 import BeautifulSoup, Tag

from fda_calendar.currency import USD, USDParseError
from fda_calendar.errors import CurrencyParseError, DateParseFailure
from fda_calendar.extract import (
    CATALYST_DATE_FORMAT,
    PHASE_LABEL_ATTRIBUTE,
    URL_ATTRIBUTE,
    CatalystSelectors,
    get_selectors,
    retrieve_attribute,
    retrieve_text,
    select_first_element,
    select_first_text,
)


PricePredicate = Callable[[USD], bool]
DatePredicate = Callable[[date], bool]


@dataclass(frozen=True, order=True)
class PhaseLabel:
    """Machine-readable phase key (e.g. ``phase3``) used to group catalysts."""
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CatalystRow:
    """
    One catalyst event from the calendar.

    Attributes:
        price: Share price listed for the company.
        url: Link to the company page.
        symbol: Ticker symbol.
        catalyst_date: Date of the event.
        drug_name: Name of the drug.
        drug_indication: Condition the drug treats.
        catalyst_note: Free-text description of the event.
        phase: Human-readable trial stage (e.g. ``Phase 1/2``).
    """
    price: USD
    url: str
    symbol: str
    catalyst_date: date
    drug_name: str
    drug_indication: str
    catalyst_note: str
    phase: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "price": str(self.price),
            "url": self.url,
            "symbol": self.symbol,
            "catalyst_date": self.catalyst_date.isoformat(),
            "drug_name": self.drug_name,
            "drug_indication": self.drug_indication,
            "catalyst_note": self.catalyst_note,
            "phase": self.phase,
        }


def parse_document(html: str) -> BeautifulSoup:
    """Parse raw calendar HTML into a queryable tree."""
    return BeautifulSoup(html, "html.parser")


def parse_price(text: str) -> USD:
    """
    Parse a price cell.

    Raises:
        CurrencyParseError: If the text is not a valid dollar amount.
    """
    try:
        return USD.parse(text)
    except USDParseError as e:
        raise CurrencyParseError(e) from e


def parse_catalyst_date(text: str) -> date:
    """
    Parse a MM/DD/YYYY date cell.

    Raises:
        DateParseFailure: If the text does not match the format.
    """
    try:
        return datetime.strptime(text, CATALYST_DATE_FORMAT).date()
    except ValueError as e:
        raise DateParseFailure(text, e) from e


def extract_phase_label(row: Tag, selectors: Optional[CatalystSelectors] = None) -> PhaseLabel:
    """Return the grouping label stored on the row's phase cell."""
    selectors = selectors or get_selectors()
    phase_element = select_first_element(row, selectors.phase)
    return PhaseLabel(retrieve_attribute(phase_element, PHASE_LABEL_ATTRIBUTE, selectors.phase))


def assemble_row(
    row: Tag,
    price_predicate: PricePredicate,
    date_predicate: DatePredicate,
    selectors: Optional[CatalystSelectors] = None
) -> Optional[CatalystRow]:
    """
    Build a CatalystRow from one calendar table row.

    Args:
        row: The ``<tr>`` element for one event.
        price_predicate: Returns True if a price is acceptable.
        date_predicate: Returns True if a catalyst date is acceptable.
        selectors: Compiled selector bundle. Uses the shared bundle if None.

    Returns:
        The assembled row, or None if it was rejected by a predicate.

    Raises:
        CurrencyParseError: If the price cell is malformed.
        DateParseFailure: If the date cell is malformed.
        ExpectedFieldNotFound: If any field is missing from the row.
    """
    selectors = selectors or get_selectors()

    price = parse_price(select_first_text(row, selectors.price))
    catalyst_date = parse_catalyst_date(select_first_text(row, selectors.catalyst_date))

    if not price_predicate(price) or not date_predicate(catalyst_date):
        return None

    anchor = select_first_element(row, selectors.symbol_and_url)
    url = retrieve_attribute(anchor, URL_ATTRIBUTE, selectors.symbol_and_url)
    symbol = retrieve_text(anchor, selectors.symbol_and_url)

    drug_name = select_first_text(row, selectors.drug_name)
    drug_indication = select_first_text(row, selectors.drug_indication)
    catalyst_note = select_first_text(row, selectors.catalyst_note)
    phase = select_first_text(row, selectors.phase)

    return CatalystRow(
        price=price,
        url=url,
        symbol=symbol,
        catalyst_date=catalyst_date,
        drug_name=drug_name,
        drug_indication=drug_indication,
        catalyst_note=catalyst_note,
        phase=phase,
    )
