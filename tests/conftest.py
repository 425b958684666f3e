"""
Shared fixtures for the test suite.
"""

import pytest

from tests.helpers import BTX, EYEN, GWPH, make_document, make_row


@pytest.fixture
def single_row_html():
    """Calendar page with one event."""
    return make_document(make_row(**BTX))


@pytest.fixture
def multiple_rows_html():
    """Calendar page with three events across two phases and two dates."""
    return make_document(make_row(**BTX), make_row(**GWPH), make_row(**EYEN))
