"""
Post-Processing Module for the Document Date Annotator.

This module provides functionality for:
    - Locating issued/expiration dates in extracted text
    - Normalizing operator-entered dates

Author: ML Engineering Team
"""

from .date_locator import (
    INVALID_DATE,
    DateToken,
    LocatedDates,
    build_date,
    find_date_tokens,
    locate_dates,
)
from .normalizers import DateNormalizer

__all__ = [
    'INVALID_DATE',
    'DateToken',
    'LocatedDates',
    'build_date',
    'find_date_tokens',
    'locate_dates',
    'DateNormalizer'
]
