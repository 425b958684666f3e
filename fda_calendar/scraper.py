"""
Scraper module for the FDA Calendar Scraper.

This module wires the pipeline together:
fetch -> stage to disk -> read -> parse -> build catalog

Each stage logs how long it took. A source may be an http(s) URL or a
path to a page already on disk.
"""

import os
import time
from pathlib import Path
from typing import Optional, Union

from fda_calendar.catalog import Catalog, build
from fda_calendar.errors import ScrapeError
from fda_calendar.fetch import (
    DEFAULT_CALENDAR_URL,
    fetch_calendar_page,
    is_remote_source,
    read_document,
    stage_document,
)
from fda_calendar.filter import NO_LIMITS, ScrapePredicates
from fda_calendar.parse import parse_document
from fda_calendar.utils import get_logger, millis_since


# Module logger
logger = get_logger("scraper")


def parse_file(path: Union[str, Path], predicates: ScrapePredicates = NO_LIMITS) -> Catalog:
    """
    Read a calendar page from disk and build its catalog.

    Args:
        path: Page to read.
        predicates: Price and date ceilings.

    Returns:
        Catalog of accepted rows.

    Raises:
        ScrapeError: If the file cannot be read or any row is malformed.
    """
    try:
        document = parse_document(read_document(path))
        catalog = build(document, predicates)
    except ScrapeError as e:
        logger.error(f"Failed to parse {path}: {e}. Cause: {e.original_error!r}")
        raise

    logger.info(f"Parsed {catalog!r} from {path}")
    logger.debug(f"Catalog: {catalog.to_dict()}")
    return catalog


def scrape_url(url: str, predicates: ScrapePredicates = NO_LIMITS) -> Catalog:
    """
    Download the calendar page, stage it to disk and build its catalog.

    Raises:
        FileReadError: If the page could not be downloaded or staged.
        ScrapeError: If any row is malformed.
    """
    download_start = time.monotonic()
    body = fetch_calendar_page(url)
    logger.info(f"Download took {millis_since(download_start)} millis")

    write_start = time.monotonic()
    staged = stage_document(body)
    logger.info(f"Write took {millis_since(write_start)} millis")

    try:
        parse_start = time.monotonic()
        catalog = parse_file(staged, predicates)
        logger.info(f"Parsing took {millis_since(parse_start)} millis")
        return catalog
    finally:
        os.unlink(staged)


def scrape(source: str = DEFAULT_CALENDAR_URL, predicates: Optional[ScrapePredicates] = None) -> Catalog:
    """
    Build a catalog from a calendar page URL or local file path.

    Args:
        source: http(s) URL or file path.
        predicates: Price and date ceilings. No ceilings if None.

    Returns:
        Catalog of accepted rows.

    Raises:
        ScrapeError: On any fetch, read or parse failure.
    """
    predicates = predicates or NO_LIMITS
    logger.info(f"Scraping {source} with limits {predicates.to_dict()}")

    if is_remote_source(source):
        return scrape_url(source, predicates)

    parse_start = time.monotonic()
    catalog = parse_file(source, predicates)
    logger.info(f"Parsing took {millis_since(parse_start)} millis")
    return catalog
