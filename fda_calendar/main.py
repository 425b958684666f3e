#!/usr/bin/env python3
"""
Main orchestration module for the FDA Calendar Scraper.

This module coordinates the complete pipeline:
configure -> scrape -> notify

It handles environment validation, logging setup, and error handling
for the entire workflow.
"""

import os
import sys
import time
from datetime import date, timedelta
from typing import Optional

from fda_calendar.currency import USD, USDParseError
from fda_calendar.errors import ScrapeError
from fda_calendar.fetch import DEFAULT_CALENDAR_URL
from fda_calendar.filter import ScrapePredicates
from fda_calendar.notify import send_email_notification
from fda_calendar.scraper import scrape
from fda_calendar.utils import get_env_var, get_logger, is_truthy, millis_since, setup_logging


# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_ENV_ERROR = 2

DEFAULT_DATE_LIMIT_DAYS = 7


def get_predicates(today: Optional[date] = None) -> ScrapePredicates:
    """
    Build the price and date ceilings from the environment.

    PRICE_LIMIT is an optional dollar amount (e.g. ``$6.00``).
    DATE_LIMIT_DAYS is the number of days from today to look ahead.

    Args:
        today: Reference date. Defaults to the current date.

    Returns:
        Configured ScrapePredicates.

    Raises:
        ValueError: If either variable is malformed.
    """
    today = today or date.today()
    predicates = ScrapePredicates()

    price_text = get_env_var("PRICE_LIMIT", required=False)
    if price_text is not None:
        try:
            predicates = predicates.with_price_limit(USD.parse(price_text))
        except USDParseError as e:
            raise ValueError(f"PRICE_LIMIT is not a valid dollar amount: {e}") from e

    days_text = get_env_var("DATE_LIMIT_DAYS", required=False, default=str(DEFAULT_DATE_LIMIT_DAYS))
    try:
        days = int(days_text)
    except ValueError:
        raise ValueError(f"DATE_LIMIT_DAYS must be a valid integer, got: {days_text}")

    return predicates.with_date_limit(today + timedelta(days=days))


def get_calendar_source() -> str:
    """Return the calendar URL or file path to scrape."""
    return get_env_var("CALENDAR_SOURCE", required=False, default=DEFAULT_CALENDAR_URL)


def run_pipeline(dry_run: bool = False) -> int:
    """
    Execute the complete scraper pipeline.

    Pipeline stages:
    1. Read limits from the environment
    2. Scrape the calendar into a catalog
    3. Email the catalog report

    Args:
        dry_run: If True, log the report instead of sending it.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    logger = get_logger("main")

    logger.info("[Stage 1/3] Reading configuration...")
    try:
        predicates = get_predicates()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_ENV_ERROR

    logger.info("[Stage 2/3] Scraping calendar...")
    try:
        catalog = scrape(get_calendar_source(), predicates)
    except ScrapeError as e:
        logger.error(f"Scraping failed: {e}. Cause: {e.__cause__!r}")
        if e.retryable:
            logger.info("Failure is transient, the next scheduled run may succeed")
        return EXIT_FAILURE

    logger.info(f"Found {catalog.record_count} catalyst(s) in {len(catalog)} group(s)")

    logger.info("[Stage 3/3] Sending report...")
    if not send_email_notification(catalog, dry_run=dry_run):
        logger.error("Email report could not be sent (see logs above)")
        return EXIT_FAILURE

    return EXIT_SUCCESS


def main() -> int:
    """
    Main entry point for the FDA Calendar Scraper.

    Sets up logging and runs the pipeline with proper error handling.

    Returns:
        Exit code for the process.
    """
    overall_start = time.monotonic()

    setup_logging(os.environ.get("LOG_LEVEL", "INFO").upper())
    logger = get_logger("main")

    dry_run = is_truthy(os.environ.get("DRY_RUN"))
    if dry_run:
        logger.info("Running in DRY RUN mode - email will not be sent")

    try:
        return run_pipeline(dry_run=dry_run)

    except KeyboardInterrupt:
        logger.warning("Pipeline interrupted by user")
        return EXIT_FAILURE

    except Exception as e:
        logger.exception(f"Unexpected error in pipeline: {e}")
        return EXIT_FAILURE

    finally:
        logger.info(f"Overall took {millis_since(overall_start)} millis")


if __name__ == "__main__":
    sys.exit(main())
