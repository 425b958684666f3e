"""
Currency module for the FDA Calendar Scraper.

This module provides an exact, sign-and-magnitude US dollar value stored
as integer cents, together with its strict textual grammar:

    [-]$<dollars>[.<cents>]

where <dollars> may be empty (``$.05``) and <cents>, when present, must be
exactly two digits.
"""

import re
from dataclasses import dataclass
from typing import Tuple


# Largest magnitude representable as an unsigned 64-bit count of cents
MAX_CENTS = 2 ** 64 - 1
MAX_DOLLAR_DIGITS = len(str(MAX_CENTS // 100))

_DIGITS = re.compile(r"[0-9]+")


class USDParseError(ValueError):
    """Base exception for malformed dollar amounts."""

    description = "Malformed dollar amount"

    def __init__(self, malformed_input: str):
        super().__init__(f"{self.description} {malformed_input}")
        self.malformed_input = malformed_input


class NoDollarSign(USDParseError):
    """The amount did not start with ``$`` (after an optional ``-``)."""

    description = "No dollar sign"


class InvalidStructure(USDParseError):
    """The amount had a non-numeric part, no digits, or more than one ``.``."""

    description = "Invalid structure"


class DecimalWithInsufficientCents(USDParseError):
    """The fractional part was present but not exactly two digits long."""

    description = "Not enough decimal places"


@dataclass(frozen=True)
class USD:
    """
    An immutable US dollar amount.

    Attributes:
        is_negative: Sign of the amount.
        cents: Total magnitude in cents (dollars * 100 + cents).

    ``USD(True, 0)`` and ``USD(False, 0)`` are distinct values; the negative
    zero sorts immediately below the positive one.
    """
    is_negative: bool
    cents: int

    def __post_init__(self):
        if not 0 <= self.cents <= MAX_CENTS:
            raise ValueError(f"cents out of range: {self.cents}")

    @classmethod
    def parse(cls, text: str) -> "USD":
        """
        Parse a dollar amount such as ``$1.01``, ``-$1.01``, ``$.05`` or ``$101``.

        Args:
            text: Amount text, used exactly as given (no trimming).

        Returns:
            Parsed USD value.

        Raises:
            NoDollarSign: If ``$`` does not follow the optional sign.
            InvalidStructure: If the amount is empty, has more than one
                decimal point, or contains non-digit characters.
            DecimalWithInsufficientCents: If the fractional part is not
                exactly two characters long.
        """
        remainder = text
        is_negative = remainder.startswith("-")
        if is_negative:
            remainder = remainder[1:]

        if not remainder.startswith("$"):
            raise NoDollarSign(text)
        remainder = remainder[1:]

        if not remainder:
            raise InvalidStructure(text)

        pieces = remainder.split(".")
        if len(pieces) > 2:
            raise InvalidStructure(text)

        dollars = pieces[0]
        if dollars and not _DIGITS.fullmatch(dollars):
            raise InvalidStructure(text)

        cents = 0
        if len(pieces) == 2:
            fraction = pieces[1]
            if len(fraction) != 2:
                raise DecimalWithInsufficientCents(text)
            if not _DIGITS.fullmatch(fraction):
                raise InvalidStructure(text)
            cents = int(fraction)

        # Reject oversized amounts before converting them to int
        dollars = dollars.lstrip("0")
        if len(dollars) > MAX_DOLLAR_DIGITS:
            raise InvalidStructure(text)

        total = int(dollars or "0") * 100 + cents
        if total > MAX_CENTS:
            raise InvalidStructure(text)

        return cls(is_negative=is_negative, cents=total)

    @property
    def dollars(self) -> int:
        """Whole-dollar part of the magnitude."""
        return self.cents // 100

    def _sort_key(self) -> Tuple[int, int]:
        # Larger negative magnitudes sort lower.
        if self.is_negative:
            return (0, -self.cents)
        return (1, self.cents)

    def __lt__(self, other):
        if not isinstance(other, USD):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __le__(self, other):
        if not isinstance(other, USD):
            return NotImplemented
        return self._sort_key() <= other._sort_key()

    def __gt__(self, other):
        if not isinstance(other, USD):
            return NotImplemented
        return self._sort_key() > other._sort_key()

    def __ge__(self, other):
        if not isinstance(other, USD):
            return NotImplemented
        return self._sort_key() >= other._sort_key()

    def __str__(self) -> str:
        sign = "-" if self.is_negative else ""
        return f"{sign}${self.cents // 100}.{self.cents % 100:02d}"


def parse_usd(text: str) -> USD:
    """Shorthand for ``USD.parse``."""
    return USD.parse(text)
