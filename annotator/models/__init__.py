"""
Data model for the Document Date Annotator.

Author: ML Engineering Team
"""

from .document import (
    DATASETS,
    DocumentRecord,
    dataset_display_name,
    dataset_ids,
    is_known_dataset,
)

__all__ = [
    'DATASETS',
    'DocumentRecord',
    'dataset_display_name',
    'dataset_ids',
    'is_known_dataset'
]
