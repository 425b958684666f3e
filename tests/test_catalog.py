"""
Tests for the catalog module.

Tests cover:
- Grouping by (phase label, catalyst date)
- Price and date ceilings
- Fail-fast on malformed rows
- Key and row ordering
- The tolerant build_partial mode
"""

from datetime import date

import pytest

from fda_calendar.catalog import Catalog, build, build_partial
from fda_calendar.currency import USD, InvalidStructure
from fda_calendar.errors import CurrencyParseError, DateParseFailure, ExpectedFieldNotFound
from fda_calendar.filter import ScrapePredicates
from fda_calendar.parse import PhaseLabel, parse_document
from tests.helpers import BTX, EYEN, GWPH, make_document, make_row


BTX_KEY = (PhaseLabel("phase1.5"), date(2019, 5, 2))
PHASE3_KEY = (PhaseLabel("phase3"), date(2019, 5, 3))


def symbols(rows):
    return [row.symbol for row in rows]


class TestBuild:
    """Tests for building a catalog from a page."""

    def test_parse_single_row(self, single_row_html):
        """Test that one row makes one group."""
        catalog = build(parse_document(single_row_html))

        assert list(catalog) == [BTX_KEY]
        assert symbols(catalog[BTX_KEY]) == ["BTX"]

    def test_parse_multiple_rows(self, multiple_rows_html):
        """Test that rows sharing label and date share a group."""
        catalog = build(parse_document(multiple_rows_html))

        assert list(catalog) == [BTX_KEY, PHASE3_KEY]
        assert symbols(catalog[BTX_KEY]) == ["BTX"]
        assert symbols(catalog[PHASE3_KEY]) == ["GWPH", "EYEN"]
        assert catalog.record_count == 3

    def test_parse_with_price_ceiling(self, multiple_rows_html):
        """Test that rows above the price ceiling are left out."""
        predicates = ScrapePredicates().with_price_limit(USD.parse("$6"))
        catalog = build(parse_document(multiple_rows_html), predicates)

        assert list(catalog) == [BTX_KEY, PHASE3_KEY]
        assert symbols(catalog[BTX_KEY]) == ["BTX"]
        assert symbols(catalog[PHASE3_KEY]) == ["EYEN"]

    def test_parse_with_date_ceiling(self, multiple_rows_html):
        """Test that rows on or after the date ceiling are left out."""
        predicates = ScrapePredicates().with_date_limit(date(2019, 5, 3))
        catalog = build(parse_document(multiple_rows_html), predicates)

        assert list(catalog) == [BTX_KEY]
        assert symbols(catalog[BTX_KEY]) == ["BTX"]

    def test_parse_with_price_and_date_ceiling(self, multiple_rows_html):
        """Test that both ceilings together can leave the catalog empty."""
        predicates = ScrapePredicates(price_limit=USD.parse("$1"), date_limit=date(2019, 5, 3))
        catalog = build(parse_document(multiple_rows_html), predicates)

        assert len(catalog) == 0
        assert catalog == Catalog()

    def test_empty_page(self):
        """Test that a page without rows gives an empty catalog."""
        catalog = build(parse_document("<html><body><p>No events</p></body></html>"))
        assert len(catalog) == 0
        assert catalog.rows() == []

    def test_rows_without_row_classes_are_ignored(self):
        """Test that only js-tr js-drug rows are read."""
        html = make_document(make_row(**BTX)).replace('class="js-tr js-drug"', 'class="js-tr"')
        assert len(build(parse_document(html))) == 0


class TestFailFast:
    """Tests that one bad row aborts the whole build."""

    def test_parse_malformed_date(self):
        """Test that a bad date in the middle aborts the build."""
        html = make_document(make_row(**BTX), make_row(**dict(GWPH, date="05-03-2019")), make_row(**EYEN))
        with pytest.raises(DateParseFailure):
            build(parse_document(html))

    def test_parse_malformed_price(self):
        """Test that a bad price aborts the build."""
        html = make_document(make_row(**BTX), make_row(**dict(EYEN, price="6.00")))
        with pytest.raises(CurrencyParseError):
            build(parse_document(html))

    def test_parse_oversized_price(self):
        """Test that a price with thousands of digits raises a scrape error."""
        html = make_document(make_row(**dict(BTX, price="$" + "1" * 5000)))
        with pytest.raises(CurrencyParseError) as exc_info:
            build(parse_document(html))
        assert isinstance(exc_info.value.__cause__, InvalidStructure)

    def test_missing_field_in_accepted_row(self):
        """Test that a missing field in an accepted row aborts the build."""
        html = make_document(make_row(**BTX), make_row(**dict(GWPH, note=None)))
        with pytest.raises(ExpectedFieldNotFound):
            build(parse_document(html))

    def test_missing_field_in_rejected_row_is_ignored(self):
        """Test that rejected rows are not checked for missing fields."""
        html = make_document(make_row(**BTX), make_row(**dict(GWPH, note=None)))
        predicates = ScrapePredicates(price_limit=USD.parse("$6"))

        catalog = build(parse_document(html), predicates)

        assert symbols(catalog.rows()) == ["BTX"]

    def test_malformed_price_fails_even_if_it_would_be_rejected(self):
        """Test that prices are validated before the ceilings apply."""
        html = make_document(make_row(**dict(GWPH, price="$173.1")))
        predicates = ScrapePredicates(date_limit=date(2000, 1, 1))
        with pytest.raises(CurrencyParseError):
            build(parse_document(html), predicates)


class TestOrdering:
    """Tests for key order and row order."""

    def test_keys_sorted_by_label_then_date(self):
        """Test that keys iterate by label, then by date."""
        html = make_document(
            make_row(**dict(GWPH, date="06/01/2019")),
            make_row(**dict(BTX, label="phase3", date="05/01/2019")),
            make_row(**dict(EYEN, label="approval", date="07/01/2019")),
        )
        catalog = build(parse_document(html))

        assert list(catalog) == [
            (PhaseLabel("approval"), date(2019, 7, 1)),
            (PhaseLabel("phase3"), date(2019, 5, 1)),
            (PhaseLabel("phase3"), date(2019, 6, 1)),
        ]

    def test_rows_keep_document_order(self):
        """Test that rows inside a group stay in page order."""
        html = make_document(
            make_row(**dict(EYEN, symbol="AAA")),
            make_row(**BTX),
            make_row(**dict(EYEN, symbol="ZZZ")),
            make_row(**dict(EYEN, symbol="MMM")),
        )
        catalog = build(parse_document(html))

        assert symbols(catalog[PHASE3_KEY]) == ["AAA", "ZZZ", "MMM"]
        assert symbols(catalog.rows()) == ["BTX", "AAA", "ZZZ", "MMM"]

    def test_label_is_independent_of_display_phase(self):
        """Test that grouping uses the label, not the displayed phase."""
        html = make_document(
            make_row(**dict(BTX, phase="Phase 3", label="phase3", date="05/03/2019")),
            make_row(**dict(GWPH, phase="Phase 3 (topline)")),
        )
        catalog = build(parse_document(html))

        assert list(catalog) == [PHASE3_KEY]
        assert [row.phase for row in catalog[PHASE3_KEY]] == ["Phase 3", "Phase 3 (topline)"]


class TestCatalog:
    """Tests for the catalog container."""

    def test_read_only(self, single_row_html):
        """Test that groups cannot be replaced or appended to."""
        catalog = build(parse_document(single_row_html))
        with pytest.raises(TypeError):
            catalog[BTX_KEY] = ()
        assert isinstance(catalog[BTX_KEY], tuple)

    def test_equality(self, multiple_rows_html):
        """Test that the same page builds equal catalogs."""
        first = build(parse_document(multiple_rows_html))
        second = build(parse_document(multiple_rows_html))
        assert first == second

    def test_sorts_keys_given_out_of_order(self):
        """Test that a catalog built directly still iterates in key order."""
        catalog = Catalog({PHASE3_KEY: [], BTX_KEY: []})
        assert list(catalog) == [BTX_KEY, PHASE3_KEY]

    def test_to_dict(self, multiple_rows_html):
        """Test the JSON-friendly summary."""
        result = build(parse_document(multiple_rows_html)).to_dict()

        assert result["count"] == 3
        assert [g["phase_label"] for g in result["groups"]] == ["phase1.5", "phase3"]
        assert result["groups"][1]["catalyst_date"] == "2019-05-03"
        assert [c["symbol"] for c in result["groups"][1]["catalysts"]] == ["GWPH", "EYEN"]

    def test_repr(self, multiple_rows_html):
        """Test the short representation used in logs."""
        assert repr(build(parse_document(multiple_rows_html))) == "Catalog(groups=2, rows=3)"


class TestBuildPartial:
    """Tests for the tolerant build mode."""

    def test_skips_bad_rows(self):
        """Test that bad rows are skipped and reported in page order."""
        html = make_document(
            make_row(**BTX),
            make_row(**dict(GWPH, date="05-03-2019")),
            make_row(**dict(EYEN, indication=None)),
            make_row(**dict(EYEN, symbol="OK")),
        )
        catalog, skipped = build_partial(parse_document(html))

        assert symbols(catalog.rows()) == ["BTX", "OK"]
        assert [type(e) for e in skipped] == [DateParseFailure, ExpectedFieldNotFound]

    def test_skips_oversized_price(self):
        """Test that an oversized price is skipped like any other bad row."""
        html = make_document(make_row(**dict(GWPH, price="$" + "9" * 5000)), make_row(**BTX))
        catalog, skipped = build_partial(parse_document(html))

        assert symbols(catalog.rows()) == ["BTX"]
        assert [type(e) for e in skipped] == [CurrencyParseError]

    def test_clean_page_matches_build(self, multiple_rows_html):
        """Test that a clean page gives the same result as build."""
        document = parse_document(multiple_rows_html)
        catalog, skipped = build_partial(document)

        assert skipped == []
        assert catalog == build(document)
