"""
Data Normalizers Module.

Parses dates typed by an operator (CLI overrides, edited form values)
into calendar dates.

Author: ML Engineering Team
"""

import re
from datetime import date, datetime
from typing import Optional, Union

from dateutil import parser as date_parser

from config import get_config
from annotator.utils.logger import get_logger

logger = get_logger(__name__)


class DateNormalizer:
    """
    Normalizes date strings to calendar dates.

    Explicit formats from configuration are tried first (ISO first, then
    US month-first forms); dateutil's parser is the fallback. Unlike the
    date locator, this path validates: "13/45/2022" is rejected.

    Attributes:
        input_formats: Explicit formats tried before dateutil

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.parse("01/15/2026")
        datetime.date(2026, 1, 15)
    """

    def __init__(self) -> None:
        self.input_formats = get_config(
            "postprocessing.date.input_formats",
            [
                "%Y-%m-%d",
                "%m/%d/%Y",
                "%m-%d-%Y",
                "%B %d, %Y",
                "%b %d, %Y",
                "%d %B %Y",
            ]
        )

        logger.debug(f"DateNormalizer initialized ({len(self.input_formats)} explicit formats)")

    def parse(self, value: Union[str, date, datetime, None]) -> Optional[date]:
        """
        Convert operator input into a date.

        Args:
            value: A date string, a date/datetime, or None.

        Returns:
            The calendar date, or None for empty or unparseable input.
        """
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value

        cleaned = self._clean_date_string(value)
        if not cleaned:
            return None

        parsed = self._try_explicit_formats(cleaned)
        if parsed is None:
            parsed = self._try_dateutil_parser(cleaned)

        if parsed is None:
            logger.debug(f"Could not parse date: {value!r}")
            return None
        return parsed.date()

    def _clean_date_string(self, date_str: str) -> str:
        date_str = ' '.join(date_str.split())

        # Remove ordinal suffixes (1st, 2nd, 3rd, 4th, etc.)
        date_str = re.sub(r'(\d+)(st|nd|rd|th)\b', r'\1', date_str, flags=re.IGNORECASE)

        return date_str.strip()

    def _try_explicit_formats(self, date_str: str) -> Optional[datetime]:
        for fmt in self.input_formats:
            try:
                return datetime.strptime(date_str, fmt)
            except ValueError:
                continue
        return None

    def _try_dateutil_parser(self, date_str: str) -> Optional[datetime]:
        try:
            # US month-first, matching the locator's token order
            return date_parser.parse(date_str, dayfirst=False)
        except (ValueError, OverflowError):
            return None
