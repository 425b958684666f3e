"""
Catalog module for the FDA Calendar Scraper.

This module walks every event row of a calendar page and groups the
accepted rows by (phase label, catalyst date). Keys iterate in natural
order (phase label first, then date); rows within a group keep the order
they had on the page.
"""

from collections.abc import Mapping
from datetime import date
from typing import Any, Dict, Iterator, List, Optional, Tuple

from bs4 import Tag

from fda_calendar.errors import ScrapeError
from fda_calendar.extract import CatalystSelectors, get_selectors
from fda_calendar.filter import NO_LIMITS, ScrapePredicates
from fda_calendar.parse import CatalystRow, PhaseLabel, assemble_row, extract_phase_label
from fda_calendar.utils import get_logger


# Module logger
logger = get_logger("catalog")

CatalogKey = Tuple[PhaseLabel, date]


class Catalog(Mapping):
    """
    Read-only mapping of (phase label, catalyst date) to catalyst rows.

    Iteration follows sorted key order regardless of insertion order.
    """

    def __init__(self, groups: Optional[Dict[CatalogKey, List[CatalystRow]]] = None):
        groups = groups or {}
        self._groups: Dict[CatalogKey, Tuple[CatalystRow, ...]] = {
            key: tuple(groups[key]) for key in sorted(groups)
        }

    def __getitem__(self, key: CatalogKey) -> Tuple[CatalystRow, ...]:
        return self._groups[key]

    def __iter__(self) -> Iterator[CatalogKey]:
        return iter(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def __repr__(self) -> str:
        return f"Catalog(groups={len(self)}, rows={self.record_count})"

    @property
    def record_count(self) -> int:
        """Total number of rows across all groups."""
        return sum(len(rows) for rows in self._groups.values())

    def rows(self) -> List[CatalystRow]:
        """Return every row in catalog order."""
        return [row for rows in self._groups.values() for row in rows]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "count": self.record_count,
            "groups": [
                {
                    "phase_label": str(label),
                    "catalyst_date": catalyst_date.isoformat(),
                    "catalysts": [row.to_dict() for row in rows],
                }
                for (label, catalyst_date), rows in self._groups.items()
            ],
        }


def build(
    document: Tag,
    predicates: ScrapePredicates = NO_LIMITS,
    selectors: Optional[CatalystSelectors] = None
) -> Catalog:
    """
    Build a catalog from every event row of a parsed calendar page.

    Args:
        document: Parsed calendar page.
        predicates: Price and date ceilings applied to each row.
        selectors: Compiled selector bundle. Uses the shared bundle if None.

    Returns:
        Catalog of all rows accepted by ``predicates``.

    Raises:
        ScrapeError: On the first malformed or incomplete row. No partial
            catalog is returned.
    """
    selectors = selectors or get_selectors()
    groups: Dict[CatalogKey, List[CatalystRow]] = {}

    for row in selectors.row.select(document):
        catalyst = assemble_row(row, predicates.test_price, predicates.test_date, selectors)
        if catalyst is None:
            continue
        key = (extract_phase_label(row, selectors), catalyst.catalyst_date)
        groups.setdefault(key, []).append(catalyst)

    return Catalog(groups)


def build_partial(
    document: Tag,
    predicates: ScrapePredicates = NO_LIMITS,
    selectors: Optional[CatalystSelectors] = None
) -> Tuple[Catalog, List[ScrapeError]]:
    """
    Build a catalog, skipping rows that fail instead of aborting.

    Args:
        document: Parsed calendar page.
        predicates: Price and date ceilings applied to each row.
        selectors: Compiled selector bundle. Uses the shared bundle if None.

    Returns:
        Tuple of (catalog of good rows, errors for skipped rows in page order).
    """
    selectors = selectors or get_selectors()
    groups: Dict[CatalogKey, List[CatalystRow]] = {}
    skipped: List[ScrapeError] = []

    for row in selectors.row.select(document):
        try:
            catalyst = assemble_row(row, predicates.test_price, predicates.test_date, selectors)
            if catalyst is None:
                continue
            key = (extract_phase_label(row, selectors), catalyst.catalyst_date)
        except ScrapeError as e:
            logger.debug(f"Skipping row: {e}")
            skipped.append(e)
            continue
        groups.setdefault(key, []).append(catalyst)

    if skipped:
        logger.warning(f"Skipped {len(skipped)} malformed row(s)")

    return Catalog(groups), skipped
