"""
Helper Utilities Module.

Small generic helpers shared by the CLI, the exporter and the image
loader.

Functions:
    - ensure_directory: Create directory if it doesn't exist
    - get_file_extension: Extract file extension safely
    - utc_timestamp: ISO 8601 instant for exported annotations
    - safe_filename: Sanitize filenames for filesystem
"""

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Union, Optional


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists.

    Returns:
        Path object pointing to the directory.

    Example:
        >>> ensure_directory("outputs/annotations")
        PosixPath('outputs/annotations')
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Extract the lowercase file extension (with the dot) from a filepath.

    Example:
        >>> get_file_extension("scan.PNG")
        '.png'
        >>> get_file_extension("noextension")
        ''
    """
    return Path(filepath).suffix.lower()


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """
    Format an instant as ISO 8601 UTC with millisecond precision.

    Args:
        moment: Instant to format. Defaults to now. Naive values are
                taken to be UTC.

    Returns:
        Timestamp such as "2026-01-21T14:30:22.123Z".
    """
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    else:
        moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def safe_filename(filename: str, replacement: str = "_") -> str:
    """
    Sanitize a filename by replacing characters not allowed on common
    filesystems.

    Example:
        >>> safe_filename("id:cards/1.json")
        'id_cards_1.json'
    """
    invalid_chars = r'[<>:"/\\|?*\x00-\x1f]'
    sanitized = re.sub(invalid_chars, replacement, filename)

    sanitized = sanitized.strip('. ')

    if not sanitized:
        sanitized = "unnamed"

    return sanitized
