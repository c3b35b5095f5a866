"""
Document Record Data Class.

This module defines the annotated unit of the system and the closed set
of datasets records belong to.

Author: ML Engineering Team
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Dict, Any, Optional, List
import json

from annotator.utils.exceptions import ValidationError

# Closed dataset catalogue: id -> display name, in UI order
DATASETS: Dict[str, str] = {
    "invoices": "Invoices",
    "receipts": "Receipts",
    "id_cards": "ID Cards",
    "passports": "Passports",
    "certificates": "Certificates",
}


def dataset_ids() -> List[str]:
    """Return the dataset ids in display order."""
    return list(DATASETS)


def dataset_display_name(dataset_id: str) -> str:
    """
    Return the human-readable name of a dataset.

    Unknown ids are returned unchanged.
    """
    return DATASETS.get(dataset_id, dataset_id)


def is_known_dataset(dataset_id: str) -> bool:
    return dataset_id in DATASETS


def _parse_iso_date(field_name: str, value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as e:
        raise ValidationError(field_name, value, str(e))


@dataclass(frozen=True)
class DocumentRecord:
    """
    A document in a dataset together with its annotation.

    Records are immutable; edits produce a new record through
    ``with_changes``.

    Attributes:
        id: Positive identifier, unique within the dataset
        dataset_id: One of DATASETS
        screenshot: Image URI or data URI, None if unavailable
        extracted_text: Raw OCR transcript
        ocr_confidence: Extraction quality signal in [0, 100]
        issued_date: Date the document was issued
        expiration_date: Date the document expires
        status: Operator-set active/inactive flag

    Example:
        >>> record = DocumentRecord(id=1, dataset_id="id_cards")
        >>> record.with_changes(status=True).status
        True
    """
    id: int
    dataset_id: str
    screenshot: Optional[str] = None
    extracted_text: Optional[str] = None
    ocr_confidence: Optional[float] = None
    issued_date: Optional[date] = None
    expiration_date: Optional[date] = None
    status: bool = False

    def __post_init__(self):
        """Enforce the record invariants."""
        if isinstance(self.id, bool) or not isinstance(self.id, int) or self.id < 1:
            raise ValidationError("id", self.id, "must be a positive integer")

        if not is_known_dataset(self.dataset_id):
            raise ValidationError(
                "dataset_id", self.dataset_id, f"must be one of {dataset_ids()}"
            )

        if self.ocr_confidence is not None:
            if isinstance(self.ocr_confidence, bool) or not isinstance(self.ocr_confidence, (int, float)):
                raise ValidationError("ocr_confidence", self.ocr_confidence, "must be a number")
            if not 0 <= self.ocr_confidence <= 100:
                raise ValidationError("ocr_confidence", self.ocr_confidence, "must be within [0, 100]")

        for field_name in ("issued_date", "expiration_date"):
            value = getattr(self, field_name)
            # Plain dates only; datetime is a date subclass
            if value is not None and (isinstance(value, datetime) or not isinstance(value, date)):
                raise ValidationError(field_name, value, "must be a calendar date")

        if not isinstance(self.status, bool):
            raise ValidationError("status", self.status, "must be a boolean")

    def with_changes(self, **changes: Any) -> 'DocumentRecord':
        """Return a copy with the given fields replaced (and re-validated)."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the camelCase wire format with ISO date strings.

        Returns:
            Dictionary representation of the record.
        """
        return {
            'id': self.id,
            'datasetId': self.dataset_id,
            'screenshot': self.screenshot,
            'extractedText': self.extracted_text,
            'ocrConfidence': self.ocr_confidence,
            'issuedDate': self.issued_date.isoformat() if self.issued_date else None,
            'expirationDate': self.expiration_date.isoformat() if self.expiration_date else None,
            'status': self.status
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], dataset_id: Optional[str] = None) -> 'DocumentRecord':
        """
        Create a DocumentRecord from its wire format.

        Args:
            data: Dictionary with camelCase keys.
            dataset_id: Dataset to use when ``datasetId`` is missing
                        (seed files group records by dataset).

        Returns:
            DocumentRecord instance.

        Raises:
            ValidationError: If a field violates its invariant.
        """
        return cls(
            id=data.get('id'),
            dataset_id=data.get('datasetId', dataset_id),
            screenshot=data.get('screenshot'),
            extracted_text=data.get('extractedText'),
            ocr_confidence=data.get('ocrConfidence'),
            issued_date=_parse_iso_date('issuedDate', data.get('issuedDate')),
            expiration_date=_parse_iso_date('expirationDate', data.get('expirationDate')),
            status=bool(data.get('status', False))
        )

    def __repr__(self) -> str:
        return (
            f"DocumentRecord("
            f"{self.dataset_id}#{self.id}, "
            f"issued={self.issued_date}, "
            f"expires={self.expiration_date}, "
            f"status={self.status})"
        )
