"""
Annotation export.

Builds the "download annotations" JSON document from a session, writes
it under the ``{dataset}_{documentId}_annotated.json`` name, and reads
downloaded files back.

Exported keys, in order:
    dataset, documentId, extractedText, issuedDate, expirationDate,
    ocrConfidence, status (optional), timestamp
"""

import json
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from config import get_config
from annotator.utils.logger import get_logger
from annotator.utils.helpers import ensure_directory, safe_filename, utc_timestamp
from annotator.utils.exceptions import ExportError
from annotator.models.document import DocumentRecord
from .state import AnnotationSession

logger = get_logger(__name__)

REQUIRED_KEYS = (
    'dataset',
    'documentId',
    'extractedText',
    'issuedDate',
    'expirationDate',
    'ocrConfidence',
    'timestamp',
)


@dataclass(frozen=True)
class AnnotationExport:
    """
    Contents of a downloaded annotation file.

    ``status`` is None when the file was written without it.
    """
    dataset: str
    document_id: int
    extracted_text: Optional[str]
    issued_date: Optional[date]
    expiration_date: Optional[date]
    ocr_confidence: Optional[float]
    timestamp: str
    status: Optional[bool] = None

    def to_dict(self, include_status: bool = True) -> Dict[str, Any]:
        data = {
            'dataset': self.dataset,
            'documentId': self.document_id,
            'extractedText': self.extracted_text,
            'issuedDate': self.issued_date.isoformat() if self.issued_date else None,
            'expirationDate': self.expiration_date.isoformat() if self.expiration_date else None,
            'ocrConfidence': self.ocr_confidence,
        }
        if include_status:
            data['status'] = self.status
        data['timestamp'] = self.timestamp
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnnotationExport':
        """
        Parse an exported document.

        Raises:
            ExportError: If a key is missing or a value has the wrong type.
        """
        if not isinstance(data, dict):
            raise ExportError("annotation file", "top-level value must be an object")

        missing = [key for key in REQUIRED_KEYS if key not in data]
        if missing:
            raise ExportError("annotation file", f"missing keys: {missing}")

        document_id = data['documentId']
        if isinstance(document_id, bool) or not isinstance(document_id, int):
            raise ExportError("annotation file", "documentId must be an integer")

        status = data.get('status')
        if status is not None and not isinstance(status, bool):
            raise ExportError("annotation file", "status must be a boolean")

        return cls(
            dataset=data['dataset'],
            document_id=document_id,
            extracted_text=data['extractedText'],
            issued_date=_read_date('issuedDate', data['issuedDate']),
            expiration_date=_read_date('expirationDate', data['expirationDate']),
            ocr_confidence=data['ocrConfidence'],
            timestamp=data['timestamp'],
            status=status,
        )

    def to_record(self, screenshot: Optional[str] = None) -> DocumentRecord:
        """
        Rebuild a DocumentRecord from the exported values.

        Raises:
            ValidationError: If the exported values violate record invariants.
        """
        return DocumentRecord(
            id=self.document_id,
            dataset_id=self.dataset,
            screenshot=screenshot,
            extracted_text=self.extracted_text,
            ocr_confidence=self.ocr_confidence,
            issued_date=self.issued_date,
            expiration_date=self.expiration_date,
            status=bool(self.status),
        )


def _read_date(key: str, value: Any) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ExportError("annotation file", f"{key} must be an ISO date or null")


def build_export(session: AnnotationSession, moment: Optional[datetime] = None) -> AnnotationExport:
    """
    Snapshot the session's record for download.

    Args:
        session: A LOADED session.
        moment: Export instant; defaults to now.

    Raises:
        ExportError: If no record is loaded.
    """
    record = session.record
    if record is None:
        raise ExportError(f"{session.dataset}#{session.document_id}", "no document loaded")

    return AnnotationExport(
        dataset=record.dataset_id,
        document_id=record.id,
        extracted_text=record.extracted_text,
        issued_date=record.issued_date,
        expiration_date=record.expiration_date,
        ocr_confidence=record.ocr_confidence,
        timestamp=utc_timestamp(moment),
        status=record.status,
    )


def export_filename(export: AnnotationExport) -> str:
    return safe_filename(f"{export.dataset}_{export.document_id}_annotated.json")


def dumps_export(export: AnnotationExport, include_status: Optional[bool] = None) -> str:
    """Serialize an export as indented JSON."""
    if include_status is None:
        include_status = get_config("export.include_status", True)
    indent = get_config("export.indent", 2)
    return json.dumps(export.to_dict(include_status=include_status), indent=indent)


def write_export(
    export: AnnotationExport,
    output_dir: Union[str, Path, None] = None,
    include_status: Optional[bool] = None
) -> Path:
    """
    Write an export file and return its path.

    Args:
        export: Export to write.
        output_dir: Target directory; defaults to ``paths.output_dir``.
        include_status: Override ``export.include_status``.

    Raises:
        ExportError: If the file cannot be written.
    """
    directory = ensure_directory(output_dir or get_config("paths.output_dir", "outputs"))
    path = directory / export_filename(export)

    try:
        path.write_text(dumps_export(export, include_status), encoding='utf-8')
    except OSError as e:
        raise ExportError(str(path), str(e))

    logger.info(f"Annotations written to {path}")
    return path


def load_export(source: Union[str, bytes, Path]) -> AnnotationExport:
    """
    Read a downloaded annotation file.

    Args:
        source: Path to the file, or its JSON content as str/bytes.

    Raises:
        ExportError: If the file is unreadable or malformed.
    """
    if isinstance(source, Path):
        try:
            source = source.read_text(encoding='utf-8')
        except OSError as e:
            raise ExportError(str(source), str(e))

    try:
        data = json.loads(source)
    except (TypeError, ValueError) as e:
        raise ExportError("annotation file", f"invalid JSON: {e}")

    return AnnotationExport.from_dict(data)


__all__ = [
    'AnnotationExport',
    'build_export',
    'dumps_export',
    'export_filename',
    'load_export',
    'write_export',
]
