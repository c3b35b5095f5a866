"""
Custom Exceptions Module.

All errors raised by the annotator derive from AnnotatorError so callers
can catch the whole family at once. The session controller recovers
ExtractionError and StoreError into a user-facing message; the others
signal bad input or programming errors.

Exception Hierarchy:
    AnnotatorError (base)
    ├── InputError
    │   ├── UnsupportedFileTypeError
    │   └── CorruptedFileError
    ├── ExtractionError
    │   ├── OCREngineNotAvailableError
    │   └── OCRProcessingError
    ├── StoreError
    │   ├── DocumentNotFoundError
    │   └── SaveFailedError
    ├── ValidationError
    ├── ExportError
    └── SessionBusyError
"""


class AnnotatorError(Exception):
    """
    Base exception for all annotator errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(AnnotatorError):
    """Base exception for input handling errors."""
    pass


class UnsupportedFileTypeError(InputError):
    """
    Raised when an uploaded file is not a supported image type.

    Example:
        >>> raise UnsupportedFileTypeError(".pdf", [".png", ".jpg"])
    """

    def __init__(self, file_type: str, supported_types: list):
        message = f"Unsupported file type: '{file_type}'"
        details = {"file_type": file_type, "supported_types": supported_types}
        super().__init__(message, details)


class CorruptedFileError(InputError):
    """Raised when an image cannot be decoded."""

    def __init__(self, source: str, reason: str = None):
        message = f"Corrupted or unreadable image: {source}"
        details = {"source": source, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# EXTRACTION ERRORS
# =============================================================================

class ExtractionError(AnnotatorError):
    """Base exception for image-to-text extraction failures."""
    pass


class OCREngineNotAvailableError(ExtractionError):
    """Raised when the configured OCR engine is not available."""

    def __init__(self, engine_name: str):
        message = f"OCR engine not available: {engine_name}"
        details = {"engine": engine_name}
        super().__init__(message, details)


class OCRProcessingError(ExtractionError):
    """Raised when OCR processing fails."""

    def __init__(self, source: str, reason: str = None):
        message = f"OCR processing failed for: {source}"
        details = {"source": source, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# STORE ERRORS
# =============================================================================

class StoreError(AnnotatorError):
    """Base exception for document store fetch/save failures."""
    pass


class DocumentNotFoundError(StoreError):
    """Raised when a fetch returns no record."""

    def __init__(self, dataset_id: str, document_id: int):
        message = f"Document {document_id} not found in dataset '{dataset_id}'"
        details = {"dataset": dataset_id, "document_id": document_id}
        super().__init__(message, details)


class SaveFailedError(StoreError):
    """Raised when the store reports that a save did not complete."""

    def __init__(self, dataset_id: str, document_id: int, reason: str = None):
        message = f"Failed to save document {document_id} in dataset '{dataset_id}'"
        details = {"dataset": dataset_id, "document_id": document_id, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# DATA AND SESSION ERRORS
# =============================================================================

class ValidationError(AnnotatorError):
    """Raised when a record field violates its invariant."""

    def __init__(self, field: str, value, reason: str = None):
        message = f"Validation failed for field '{field}'"
        details = {"field": field, "value": value, "reason": reason}
        super().__init__(message, details)


class ExportError(AnnotatorError):
    """Raised when an annotation export cannot be written or read."""

    def __init__(self, source: str, reason: str = None):
        message = f"Annotation export failed: {source}"
        details = {"source": source, "reason": reason}
        super().__init__(message, details)


class SessionBusyError(AnnotatorError):
    """Raised when an action starts while a request is still outstanding."""

    def __init__(self, action: str):
        message = f"Cannot {action} while a request is in progress"
        details = {"action": action}
        super().__init__(message, details)


__all__ = [
    'AnnotatorError',
    'InputError',
    'UnsupportedFileTypeError',
    'CorruptedFileError',
    'ExtractionError',
    'OCREngineNotAvailableError',
    'OCRProcessingError',
    'StoreError',
    'DocumentNotFoundError',
    'SaveFailedError',
    'ValidationError',
    'ExportError',
    'SessionBusyError',
]
