"""
Date Locator Module.

Finds the issued and expiration dates inside free-form OCR text. Every
``M/D/YYYY`` (or ``M-D-YYYY``) token is collected with its character
offset, then each keyword ("issue", "expir") independently takes the
token whose start offset is nearest to the keyword's first occurrence.

Dates are built with calendar rollover instead of validation, so a token
such as ``13/45/2022`` still yields a value (2023-02-14). Only a result
that falls outside the representable date range becomes INVALID_DATE.

Author: ML Engineering Team
"""

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Union

from dateutil.relativedelta import relativedelta

# Month, day, year in positional order; separators may differ.
DATE_TOKEN_PATTERN = re.compile(r'(\d{1,2})[/-](\d{1,2})[/-](\d{4})', re.ASCII)

ISSUED_KEYWORD = "issue"
EXPIRATION_KEYWORD = "expir"


class _InvalidDate:
    """Sentinel for a date token whose rolled-over value is out of range."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "INVALID_DATE"

    def isoformat(self) -> None:
        return None


INVALID_DATE = _InvalidDate()

LocatedDate = Union[date, _InvalidDate]


@dataclass(frozen=True)
class DateToken:
    """
    A date-like substring found in the text.

    Attributes:
        start: Character offset of the first digit
        text: The matched substring, e.g. "01/15/2022"
        month: First numeric group
        day: Second numeric group
        year: Four-digit group
    """
    start: int
    text: str
    month: int
    day: int
    year: int

    def to_date(self) -> LocatedDate:
        return build_date(self.year, self.month, self.day)


@dataclass(frozen=True)
class LocatedDates:
    """Dates assigned to the issued and expiration keywords; None when absent."""
    issued: Optional[LocatedDate] = None
    expiration: Optional[LocatedDate] = None


def build_date(year: int, month: int, day: int) -> LocatedDate:
    """
    Build a date from 1-based month/day, rolling over out-of-range parts.

    Years 0-99 are read as 1900-1999. Month 13 is January of the next
    year, day 0 is the last day of the previous month, and so on.

    Example:
        >>> build_date(2022, 13, 45)
        datetime.date(2023, 2, 14)
        >>> build_date(9999, 99, 99)
        INVALID_DATE
    """
    if 0 <= year <= 99:
        year += 1900

    try:
        return date(year, 1, 1) + relativedelta(months=month - 1) + timedelta(days=day - 1)
    except (OverflowError, ValueError):
        return INVALID_DATE


def find_date_tokens(text: str) -> List[DateToken]:
    """Return every date-like token in scan order."""
    return [
        DateToken(
            start=match.start(),
            text=match.group(0),
            month=int(match.group(1)),
            day=int(match.group(2)),
            year=int(match.group(3)),
        )
        for match in DATE_TOKEN_PATTERN.finditer(text)
    ]


def nearest_token(tokens: List[DateToken], offset: int) -> Optional[DateToken]:
    """
    Pick the token whose start is closest to ``offset``.

    Ties keep the leftmost token.
    """
    closest = None
    min_distance = None

    for token in tokens:
        distance = abs(token.start - offset)
        if min_distance is None or distance < min_distance:
            min_distance = distance
            closest = token

    return closest


def _date_near_keyword(
    lowered_text: str,
    tokens: List[DateToken],
    keyword: str
) -> Optional[LocatedDate]:
    keyword_index = lowered_text.find(keyword)
    if keyword_index == -1:
        return None

    token = nearest_token(tokens, keyword_index)
    return token.to_date() if token else None


def locate_dates(text: str) -> LocatedDates:
    """
    Locate the issued and expiration dates in extracted text.

    Both lookups run against the full token list, so one token can end
    up in both fields. There is no distance limit.

    Args:
        text: Raw transcript; may be empty.

    Returns:
        LocatedDates with absent fields set to None.

    Example:
        >>> locate_dates("ID CARD issued 01/15/2022 expires 01/15/2025")
        LocatedDates(issued=datetime.date(2022, 1, 15), expiration=datetime.date(2025, 1, 15))
    """
    if not text:
        return LocatedDates()

    tokens = find_date_tokens(text)
    if not tokens:
        return LocatedDates()

    lowered = text.lower()

    return LocatedDates(
        issued=_date_near_keyword(lowered, tokens, ISSUED_KEYWORD),
        expiration=_date_near_keyword(lowered, tokens, EXPIRATION_KEYWORD),
    )
