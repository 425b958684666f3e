"""
Fetch module for the FDA Calendar Scraper.

Gets the raw calendar page onto disk: the page is downloaded over HTTP
(retrying throttled and 5xx responses with exponential backoff), staged
in a temporary file and read back. Every failure here is a FileReadError
whose cause is the underlying requests or OS exception.
"""

import tempfile
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from fda_calendar.errors import FileReadError
from fda_calendar.utils import get_logger


# Module logger
logger = get_logger("fetch")

DEFAULT_CALENDAR_URL = "https://www.biopharmcatalyst.com/calendars/fda-calendar"

DEFAULT_TIMEOUT = 30  # seconds
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 1.0

REMOTE_SCHEMES = ("http", "https")
RETRY_STATUSES = (429, 500, 502, 503, 504)
STAGED_PREFIX = "fda_calendar_"

# Browser-like request headers
REQUEST_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


def create_session(
    max_retries: int = DEFAULT_MAX_RETRIES,
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR
) -> requests.Session:
    """
    Build a session for calendar downloads.

    GET requests are retried on connection errors and on the statuses in
    RETRY_STATUSES. Once retries run out the last response is returned
    as-is, so the caller sees the final status code.

    Args:
        max_retries: Maximum number of retry attempts.
        backoff_factor: Backoff multiplier, see urllib3 ``Retry``.

    Returns:
        Configured requests.Session.
    """
    retries = Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=("GET",),
        raise_on_status=False
    )

    session = requests.Session()
    for scheme in REMOTE_SCHEMES:
        session.mount(f"{scheme}://", HTTPAdapter(max_retries=retries))
    session.headers.update(REQUEST_HEADERS)
    return session


def is_remote_source(source: str) -> bool:
    """Return True if ``source`` is an http(s) URL rather than a file path."""
    try:
        parsed = urlparse(source)
    except ValueError:
        return False
    return parsed.scheme in REMOTE_SCHEMES and bool(parsed.netloc)


def fetch_calendar_page(
    url: str = DEFAULT_CALENDAR_URL,
    session: Optional[requests.Session] = None,
    timeout: int = DEFAULT_TIMEOUT
) -> str:
    """
    Download the calendar page.

    Args:
        url: Page URL.
        session: Session to use. A session is created, and closed
                 afterwards, if None.
        timeout: Request timeout in seconds.

    Returns:
        The page body.

    Raises:
        FileReadError: If the URL is not http(s), the request fails or the
            final response is not a success. ``original_error`` is the
            requests exception.
    """
    if not is_remote_source(url):
        error = requests.exceptions.InvalidURL(f"Not an http(s) URL: {url!r}")
        raise FileReadError(url, error) from error

    owns_session = session is None
    if session is None:
        session = create_session()

    logger.debug(f"GET {url} (timeout {timeout}s)")
    try:
        response = session.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.warning(f"Failed to fetch {url}: {e}")
        raise FileReadError(url, e) from e
    finally:
        if owns_session:
            session.close()

    body = response.text
    logger.info(f"Fetched {url}: HTTP {response.status_code}, {len(body)} characters")
    return body


def stage_document(body: str, directory: Optional[str] = None) -> Path:
    """
    Write a downloaded page to a temporary file.

    The caller deletes the file. If writing fails, the partial file is
    removed before the error is raised.

    Args:
        body: Page content.
        directory: Directory for the file. Uses the system temp dir if None.

    Returns:
        Path of the staged file.

    Raises:
        FileReadError: If the file cannot be created or written.
    """
    try:
        handle = tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            suffix=".html",
            prefix=STAGED_PREFIX,
            dir=directory,
            delete=False
        )
    except OSError as e:
        raise FileReadError(str(directory or tempfile.gettempdir()), e) from e

    path = Path(handle.name)
    try:
        with handle:
            handle.write(body)
    except (OSError, UnicodeEncodeError) as e:
        path.unlink(missing_ok=True)
        raise FileReadError(str(path), e) from e

    logger.debug(f"Staged {len(body)} characters to {path}")
    return path


def read_document(path: Union[str, Path]) -> str:
    """
    Read a calendar page from disk.

    Raises:
        FileReadError: If the file cannot be read or is not UTF-8.
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(str(path), e) from e
