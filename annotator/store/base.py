from abc import ABC, abstractmethod
from typing import Optional

from annotator.models.document import DocumentRecord


class DocumentStore(ABC):
    """Contract for every document store backend."""

    @abstractmethod
    def fetch(self, dataset_id: str, document_id: int) -> Optional[DocumentRecord]:
        """Return the record, or None when the dataset or document does not exist.

        A missing document is not an error.
        """

    @abstractmethod
    def save(self, record: DocumentRecord) -> bool:
        """Persist an annotated record.

        Returns:
            True on success, False for a recoverable failure.
        """

    @abstractmethod
    def max_id(self, dataset_id: str) -> int:
        """Return the largest document id in the dataset, 0 if empty or unknown."""
