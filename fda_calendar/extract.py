"""
Field extraction for the FDA Calendar Scraper.

This module holds the fixed CSS selectors that describe the shape of the
calendar page, compiled once with soupsieve, and the helpers that pull a
single text value or attribute out of one table row.
"""

from dataclasses import dataclass
from functools import lru_cache

import soupsieve
from bs4 import Tag

from fda_calendar.errors import ExpectedFieldNotFound, InvalidSelector


# Selector strings are part of the contract with the source page markup
ROW_SELECTOR = "tr.js-tr.js-drug"
PRICE_SELECTOR = "div[class=price]"
SYMBOL_AND_URL_SELECTOR = "td a[href]"
CATALYST_DATE_SELECTOR = "time[class=catalyst-date]"
DRUG_NAME_SELECTOR = "strong[class=drug]"
DRUG_INDICATION_SELECTOR = "div[class=indication]"
CATALYST_NOTE_SELECTOR = "div[class=catalyst-note]"
PHASE_SELECTOR = "td.js-td--stage[data-value]"

URL_ATTRIBUTE = "href"
PHASE_LABEL_ATTRIBUTE = "data-value"

# Date cells are formatted as MM/DD/YYYY
CATALYST_DATE_FORMAT = "%m/%d/%Y"


def compile_selector(selector: str) -> soupsieve.SoupSieve:
    """
    Compile a CSS selector.

    Args:
        selector: CSS selector string.

    Returns:
        Compiled soupsieve pattern.

    Raises:
        InvalidSelector: If the selector cannot be compiled.
    """
    try:
        return soupsieve.compile(selector)
    except soupsieve.SelectorSyntaxError as e:
        raise InvalidSelector(selector, e) from e


@dataclass(frozen=True)
class CatalystSelectors:
    """Compiled selectors for one calendar row and its fields."""
    row: soupsieve.SoupSieve
    price: soupsieve.SoupSieve
    symbol_and_url: soupsieve.SoupSieve
    catalyst_date: soupsieve.SoupSieve
    drug_name: soupsieve.SoupSieve
    drug_indication: soupsieve.SoupSieve
    catalyst_note: soupsieve.SoupSieve
    phase: soupsieve.SoupSieve

    @classmethod
    def compile(cls) -> "CatalystSelectors":
        return cls(
            row=compile_selector(ROW_SELECTOR),
            price=compile_selector(PRICE_SELECTOR),
            symbol_and_url=compile_selector(SYMBOL_AND_URL_SELECTOR),
            catalyst_date=compile_selector(CATALYST_DATE_SELECTOR),
            drug_name=compile_selector(DRUG_NAME_SELECTOR),
            drug_indication=compile_selector(DRUG_INDICATION_SELECTOR),
            catalyst_note=compile_selector(CATALYST_NOTE_SELECTOR),
            phase=compile_selector(PHASE_SELECTOR),
        )


@lru_cache(maxsize=None)
def get_selectors() -> CatalystSelectors:
    """Return the process-wide compiled selector bundle."""
    return CatalystSelectors.compile()


def select_first_element(row: Tag, selector: soupsieve.SoupSieve) -> Tag:
    """
    Return the first descendant of ``row`` matching ``selector``.

    Raises:
        ExpectedFieldNotFound: If nothing matches.
    """
    element = selector.select_one(row)
    if element is None:
        raise ExpectedFieldNotFound(selector.pattern)
    return element


def retrieve_text(element: Tag, selector: soupsieve.SoupSieve) -> str:
    """
    Return the first non-blank text fragment of ``element``, trimmed.

    Only leading and trailing whitespace is removed; interior spacing is
    kept as it appears in the page.

    Raises:
        ExpectedFieldNotFound: If the element has no text.
    """
    text = next(element.stripped_strings, None)
    if text is None:
        raise ExpectedFieldNotFound(selector.pattern)
    return text


def retrieve_attribute(element: Tag, attribute: str, selector: soupsieve.SoupSieve) -> str:
    """
    Return the value of ``attribute`` on ``element``.

    Raises:
        ExpectedFieldNotFound: If the attribute is missing or blank.
    """
    value = element.get(attribute)
    if isinstance(value, list):
        value = " ".join(value)
    if value is None or not value.strip():
        raise ExpectedFieldNotFound(selector.pattern, attribute)
    return value.strip()


def select_first_text(row: Tag, selector: soupsieve.SoupSieve) -> str:
    """Return the trimmed text of the first match of ``selector`` in ``row``."""
    return retrieve_text(select_first_element(row, selector), selector)


def select_first_attribute(row: Tag, selector: soupsieve.SoupSieve, attribute: str) -> str:
    """Return ``attribute`` of the first match of ``selector`` in ``row``."""
    return retrieve_attribute(select_first_element(row, selector), attribute, selector)
