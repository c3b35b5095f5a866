"""
Annotation session state.

An AnnotationSession is an immutable snapshot of one operator's editing
pass: which dataset and document index are selected, the record being
edited, and any message to show. The controller takes a session and
returns the next one.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from config import get_config
from annotator.models.document import DocumentRecord, is_known_dataset, dataset_ids
from annotator.utils.exceptions import ValidationError


class SessionState(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    LOADED = "loaded"


@dataclass(frozen=True)
class AnnotationSession:
    """
    Snapshot of an annotation session.

    Attributes:
        dataset: Selected dataset id
        document_id: Selected document index (1-based)
        max_id: Largest index known for the dataset, 0 if empty
        state: EMPTY, LOADING or LOADED
        record: Record being edited; set only while LOADED
        error: Message from the last failed request
        notice: Informational message from the last request
    """
    dataset: str
    document_id: int = 1
    max_id: int = 0
    state: SessionState = SessionState.EMPTY
    record: Optional[DocumentRecord] = None
    error: Optional[str] = None
    notice: Optional[str] = None

    @classmethod
    def new(cls, dataset: Optional[str] = None, max_id: int = 0) -> 'AnnotationSession':
        """Start an empty session on ``dataset`` (default: ``session.default_dataset``)."""
        dataset = dataset or get_config("session.default_dataset", "id_cards")
        if not is_known_dataset(dataset):
            raise ValidationError("dataset", dataset, f"must be one of {dataset_ids()}")
        return cls(dataset=dataset, max_id=max_id)

    @property
    def is_busy(self) -> bool:
        return self.state is SessionState.LOADING

    @property
    def is_loaded(self) -> bool:
        return self.state is SessionState.LOADED and self.record is not None

    @property
    def can_go_previous(self) -> bool:
        return self.is_loaded and self.document_id > 1

    @property
    def can_go_next(self) -> bool:
        return self.is_loaded and self.document_id < self.max_id

    @property
    def can_upload(self) -> bool:
        return not self.is_busy

    @property
    def can_edit(self) -> bool:
        return self.is_loaded

    @property
    def can_download(self) -> bool:
        return self.is_loaded
