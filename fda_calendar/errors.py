"""
Error types for the FDA Calendar Scraper.

Every failure while turning a calendar page into a catalog is raised as a
subclass of ScrapeError. Any one of them aborts the whole parse; callers
decide what to retry by checking the kind (or its ``retryable`` flag).
"""

from typing import Optional


class ScrapeError(Exception):
    """Base exception for calendar scraping failures."""

    retryable = False

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


class InvalidSelector(ScrapeError):
    """A fixed CSS selector failed to compile."""

    def __init__(self, selector: str, original_error: Optional[Exception] = None):
        super().__init__(f"Malformed CSS selector {selector!r}", original_error)
        self.selector = selector


class ExpectedFieldNotFound(ScrapeError):
    """A selector matched nothing, or its match had no usable content."""

    def __init__(self, selector: str, attribute: Optional[str] = None):
        if attribute:
            message = f"Didn't match CSS selector {selector!r} (attribute {attribute!r})"
        else:
            message = f"Didn't match CSS selector {selector!r}"
        super().__init__(message)
        self.selector = selector
        self.attribute = attribute


class DateParseFailure(ScrapeError):
    """A catalyst date did not match the MM/DD/YYYY format."""

    def __init__(self, text: str, original_error: Optional[Exception] = None):
        super().__init__(f"Failed to parse date {text!r}: {original_error}", original_error)
        self.text = text


class CurrencyParseError(ScrapeError):
    """A price cell did not follow the dollar amount grammar."""

    def __init__(self, original_error: Exception):
        super().__init__(str(original_error), original_error)

    @property
    def text(self) -> Optional[str]:
        return getattr(self.original_error, "malformed_input", None)


class FileReadError(ScrapeError):
    """The raw calendar document could not be obtained."""

    retryable = True

    def __init__(self, path: str, original_error: Optional[Exception] = None):
        super().__init__(f"Could not read calendar document {path}: {original_error}", original_error)
        self.path = path
