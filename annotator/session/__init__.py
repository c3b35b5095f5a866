"""
Annotation Session Module for the Document Date Annotator.

This module provides:
    - The immutable session snapshot and its states
    - The controller implementing session transitions
    - Export and import of downloaded annotation files

Author: ML Engineering Team
"""

from .state import AnnotationSession, SessionState
from .controller import SessionController
from .export import (
    AnnotationExport,
    build_export,
    dumps_export,
    export_filename,
    load_export,
    write_export,
)

__all__ = [
    'AnnotationSession',
    'SessionState',
    'SessionController',
    'AnnotationExport',
    'build_export',
    'dumps_export',
    'export_filename',
    'load_export',
    'write_export'
]
