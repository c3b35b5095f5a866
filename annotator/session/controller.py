"""
Annotation Session Controller.

Drives the EMPTY -> LOADING -> LOADED state machine over the document
store and the extraction engine. Every transition takes an
AnnotationSession and returns a new one; store and extraction failures
are turned into a short message on the returned session instead of
being raised.

Usage:
    controller = SessionController(InMemoryDocumentStore.from_config())
    session = controller.start("id_cards")
    session = controller.load(session)
    session = controller.edit(session, status=True)
    session = controller.confirm(session)

Author: ML Engineering Team
"""

from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Optional, Protocol, Union

from PIL import Image

from annotator.utils.logger import get_logger
from annotator.utils.exceptions import (
    DocumentNotFoundError,
    ExtractionError,
    InputError,
    SaveFailedError,
    SessionBusyError,
    StoreError,
    ValidationError,
)
from annotator.models.document import DocumentRecord, dataset_ids, is_known_dataset
from annotator.store.base import DocumentStore
from annotator.input_handler.image_loader import ImageLoader, ImageSource
from annotator.postprocessor.date_locator import INVALID_DATE, locate_dates
from annotator.postprocessor.normalizers import DateNormalizer
from .state import AnnotationSession, SessionState

logger = get_logger(__name__)

EXTRACTION_FAILED_MESSAGE = "Failed to extract text from the image. Please try a clearer image."
EMPTY_DATASET_MESSAGE = "Dataset '{dataset}' has no documents."
SAVED_MESSAGE = "Annotations saved."
LAST_DOCUMENT_MESSAGE = "Annotations saved. This is the last document in the dataset."

_UNSET = object()


class Extractor(Protocol):
    """Anything that turns an image into text plus a confidence score."""

    def extract(self, image: ImageSource):
        ...


class SessionController:
    """
    Transition functions for annotation sessions.

    Only one request runs per session: any transition attempted while the
    session is LOADING raises SessionBusyError. Navigation is clamped to
    [1, max_id] and is a no-op at the bounds.

    Attributes:
        store: Document store collaborator
        loader: Image loader used to build screenshots for uploads
        normalizer: Parses operator-entered date strings

    Example:
        >>> controller = SessionController(store, extractor=fake_engine)
        >>> session = controller.load(controller.start("invoices"), 2)
        >>> session.record.id
        2
    """

    def __init__(
        self,
        store: DocumentStore,
        extractor: Optional[Extractor] = None,
        loader: Optional[ImageLoader] = None,
        normalizer: Optional[DateNormalizer] = None
    ) -> None:
        self.store = store
        self._extractor = extractor
        self.loader = loader or ImageLoader()
        self.normalizer = normalizer or DateNormalizer()

    @property
    def extractor(self) -> Extractor:
        """Get or create the OCR engine."""
        if self._extractor is None:
            from annotator.ocr_engine.engine import OCREngine
            self._extractor = OCREngine(loader=self.loader)
        return self._extractor

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start(self, dataset: Optional[str] = None, document_id: int = 1) -> AnnotationSession:
        """Create an empty session with the dataset's max index filled in."""
        session = AnnotationSession.new(dataset)
        return replace(
            session,
            document_id=max(int(document_id), 1),
            max_id=self.store.max_id(session.dataset)
        )

    def begin(self, session: AnnotationSession, action: str) -> AnnotationSession:
        """
        Enter LOADING for ``action``.

        Raises:
            SessionBusyError: If a request is already outstanding.
        """
        if session.is_busy:
            raise SessionBusyError(action)
        logger.debug(f"{action}: {session.dataset}#{session.document_id} -> loading")
        return replace(session, state=SessionState.LOADING, error=None, notice=None)

    def reset(self, session: AnnotationSession) -> AnnotationSession:
        """Discard the loaded record and any message."""
        if session.is_busy:
            raise SessionBusyError("reset")
        return AnnotationSession(
            dataset=session.dataset,
            document_id=session.document_id,
            max_id=session.max_id
        )

    def select_dataset(self, session: AnnotationSession, dataset: str) -> AnnotationSession:
        """
        Switch to another dataset at index 1, discarding the current record.

        Raises:
            ValidationError: If the dataset is not in the catalogue.
        """
        if session.is_busy:
            raise SessionBusyError("select a dataset")
        if not is_known_dataset(dataset):
            raise ValidationError("dataset", dataset, f"must be one of {dataset_ids()}")

        logger.info(f"Selected dataset '{dataset}'")
        return AnnotationSession(dataset=dataset, max_id=self.store.max_id(dataset))

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def load(self, session: AnnotationSession, document_id: Optional[int] = None) -> AnnotationSession:
        """
        Fetch the document at ``document_id`` (default: the current index).

        An explicit ``document_id`` is fetched as given; only the current
        index is clamped to [1, max_id]. A missing document or empty
        dataset leaves the session EMPTY with an error.
        """
        if document_id is None:
            return self._fetch(self.begin(session, "load"), session.document_id)
        return self._fetch(self.begin(session, "load"), document_id, clamp=False)

    def previous(self, session: AnnotationSession) -> AnnotationSession:
        """Load the document before the current one; no-op at index 1."""
        if session.is_busy:
            raise SessionBusyError("go to the previous document")
        if not session.can_go_previous:
            return session
        return self._fetch(self.begin(session, "previous"), session.document_id - 1)

    def next(self, session: AnnotationSession) -> AnnotationSession:
        """Load the document after the current one; no-op at the last index."""
        if session.is_busy:
            raise SessionBusyError("go to the next document")
        if not session.can_go_next:
            return session
        return self._fetch(self.begin(session, "next"), session.document_id + 1)

    def skip(self, session: AnnotationSession) -> AnnotationSession:
        """Move on without saving the current edits."""
        if session.is_loaded:
            logger.info(f"Skipped {session.dataset}#{session.document_id}")
        return self.next(session)

    def _fetch(self, loading: AnnotationSession, target: int, clamp: bool = True) -> AnnotationSession:
        max_id = loading.max_id
        try:
            max_id = self.store.max_id(loading.dataset)
            if max_id < 1:
                raise StoreError(EMPTY_DATASET_MESSAGE.format(dataset=loading.dataset))

            if clamp:
                target = min(max(target, 1), max_id)
            elif not 1 <= target <= max_id:
                raise DocumentNotFoundError(loading.dataset, target)

            record = self.store.fetch(loading.dataset, target)
            if record is None:
                raise DocumentNotFoundError(loading.dataset, target)

        except StoreError as e:
            logger.warning(f"Fetch failed: {e}")
            return replace(
                loading,
                state=SessionState.EMPTY,
                document_id=max(target, 1),
                max_id=max_id,
                record=None,
                error=e.message
            )

        logger.info(f"Loaded {record.dataset_id}#{record.id}")
        return replace(
            loading,
            state=SessionState.LOADED,
            document_id=target,
            max_id=max_id,
            record=record
        )

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def upload(self, session: AnnotationSession, image: ImageSource) -> AnnotationSession:
        """
        Run extraction on an uploaded image and propose dates.

        The new record takes the session's dataset and document index.
        Extraction failures leave the session EMPTY with an error.
        """
        loading = self.begin(session, "upload")

        try:
            result = self.extractor.extract(image)
        except ExtractionError as e:
            logger.error(f"Extraction failed: {e}")
            return replace(
                loading,
                state=SessionState.EMPTY,
                record=None,
                error=EXTRACTION_FAILED_MESSAGE
            )

        text = result.text or ""
        located = locate_dates(text)
        confidence = min(max(float(result.confidence), 0.0), 100.0)

        record = DocumentRecord(
            id=max(loading.document_id, 1),
            dataset_id=loading.dataset,
            screenshot=self._screenshot_for(image),
            extracted_text=text,
            ocr_confidence=confidence,
            issued_date=self._usable_date(located.issued, "issued"),
            expiration_date=self._usable_date(located.expiration, "expiration"),
        )

        logger.info(
            f"Extracted {len(text)} characters ({confidence:.1f}% confidence); "
            f"issued={record.issued_date}, expires={record.expiration_date}"
        )
        return replace(loading, state=SessionState.LOADED, record=record)

    def _screenshot_for(self, image: ImageSource) -> Optional[str]:
        if isinstance(image, str):
            return image
        if isinstance(image, Path):
            return str(image)
        try:
            pil_image = image if isinstance(image, Image.Image) else self.loader.load(image)
            return self.loader.to_data_uri(pil_image)
        except (InputError, OSError, ValueError) as e:
            logger.debug(f"No screenshot kept for upload: {e}")
            return None

    @staticmethod
    def _usable_date(value, label: str) -> Optional[date]:
        if value is INVALID_DATE:
            logger.warning(f"Located {label} date is out of range; leaving it empty")
            return None
        return value

    # ------------------------------------------------------------------
    # Editing and saving
    # ------------------------------------------------------------------

    def edit(
        self,
        session: AnnotationSession,
        issued_date: Union[date, str, None] = _UNSET,
        expiration_date: Union[date, str, None] = _UNSET,
        status: bool = _UNSET
    ) -> AnnotationSession:
        """
        Change the editable fields of the loaded record.

        Dates may be given as dates or as strings; None clears a date.
        Outside LOADED this is a no-op.

        Raises:
            ValidationError: If a date string cannot be parsed or status
                             is not a boolean.
        """
        if session.is_busy:
            raise SessionBusyError("edit")
        if not session.can_edit:
            return session

        changes = {}
        if issued_date is not _UNSET:
            changes['issued_date'] = self._parse_date('issued_date', issued_date)
        if expiration_date is not _UNSET:
            changes['expiration_date'] = self._parse_date('expiration_date', expiration_date)
        if status is not _UNSET:
            changes['status'] = status

        if not changes:
            return session

        return replace(session, record=session.record.with_changes(**changes), notice=None)

    def _parse_date(self, field_name: str, value) -> Optional[date]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        parsed = self.normalizer.parse(value)
        if parsed is None:
            raise ValidationError(field_name, value, "not a recognizable date")
        return parsed

    def confirm(self, session: AnnotationSession) -> AnnotationSession:
        """
        Save the loaded record, then advance to the next document.

        At the last index the session stays on the saved record with a
        notice. A failed save keeps the edits and reports an error.
        """
        if session.is_busy:
            raise SessionBusyError("confirm")
        if not session.is_loaded:
            return session

        loading = self.begin(session, "confirm")
        record = session.record

        try:
            if not self.store.save(record):
                raise SaveFailedError(record.dataset_id, record.id)
        except StoreError as e:
            logger.error(f"Save failed: {e}")
            return replace(loading, state=SessionState.LOADED, error=e.message)

        max_id = self.store.max_id(loading.dataset)
        if loading.document_id >= max_id:
            return replace(
                loading,
                state=SessionState.LOADED,
                max_id=max_id,
                notice=LAST_DOCUMENT_MESSAGE
            )

        # The save stands even when the next fetch fails
        advanced = self._fetch(replace(loading, max_id=max_id), loading.document_id + 1)
        return replace(advanced, notice=SAVED_MESSAGE)
