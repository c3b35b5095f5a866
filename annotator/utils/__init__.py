"""
Utility Module for the Document Date Annotator.

Common utilities used across all other modules:
    - Logging configuration
    - Exception hierarchy
    - File and timestamp helpers
"""

from .logger import setup_logger, get_logger
from .helpers import ensure_directory, get_file_extension, utc_timestamp, safe_filename

__all__ = [
    'setup_logger',
    'get_logger',
    'ensure_directory',
    'get_file_extension',
    'utc_timestamp',
    'safe_filename'
]
