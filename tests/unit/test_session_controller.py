from dataclasses import replace
from datetime import date
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from annotator.models.document import DocumentRecord
from annotator.session import AnnotationSession, SessionController, SessionState
from annotator.session.controller import (
    EXTRACTION_FAILED_MESSAGE,
    LAST_DOCUMENT_MESSAGE,
    SAVED_MESSAGE,
)
from annotator.utils.exceptions import (
    OCREngineNotAvailableError,
    OCRProcessingError,
    SessionBusyError,
    StoreError,
    ValidationError,
)


def make_ocr_result(text: str, confidence: float = 90.0) -> SimpleNamespace:
    return SimpleNamespace(text=text, confidence=confidence)


@pytest.fixture()
def extractor() -> MagicMock:
    engine = MagicMock()
    engine.extract.return_value = make_ocr_result(
        "ID CARD issued 01/15/2022 expires 01/15/2025", confidence=87.5
    )
    return engine


@pytest.fixture()
def controller(store, extractor) -> SessionController:
    return SessionController(store, extractor=extractor)


class TestStartAndSelect:
    def test_start_fills_max_id(self, controller) -> None:
        session = controller.start("invoices")
        assert session.state is SessionState.EMPTY
        assert session.document_id == 1
        assert session.max_id == 3

    def test_start_defaults_to_configured_dataset(self, controller) -> None:
        assert controller.start().dataset == "id_cards"

    def test_start_rejects_unknown_dataset(self, controller) -> None:
        with pytest.raises(ValidationError):
            controller.start("contracts")

    def test_select_dataset_resets_to_first_index(self, controller) -> None:
        session = controller.load(controller.start("invoices"), 3)
        session = controller.select_dataset(session, "receipts")
        assert session.dataset == "receipts"
        assert session.document_id == 1
        assert session.max_id == 2
        assert session.state is SessionState.EMPTY
        assert session.record is None

    def test_select_unknown_dataset(self, controller) -> None:
        with pytest.raises(ValidationError):
            controller.select_dataset(controller.start("invoices"), "unknown_dataset")


class TestNavigation:
    def test_load_current_index(self, controller) -> None:
        session = controller.load(controller.start("invoices"))
        assert session.state is SessionState.LOADED
        assert session.record.id == 1
        assert session.error is None

    @pytest.mark.parametrize("document_id", [0, 4, 99])
    def test_load_of_missing_index_reports_not_found(self, controller, document_id) -> None:
        session = controller.load(controller.start("invoices"), document_id)
        assert session.state is SessionState.EMPTY
        assert session.record is None
        assert "not found" in session.error

    def test_load_clamps_current_index(self, controller) -> None:
        session = replace(controller.start("invoices"), document_id=99)
        session = controller.load(session)
        assert session.document_id == 3
        assert session.record.id == 3

    def test_previous_at_first_is_noop(self, controller) -> None:
        session = controller.load(controller.start("invoices"), 1)
        assert controller.previous(session) is session

    def test_next_at_last_is_noop(self, controller) -> None:
        session = controller.load(controller.start("invoices"), 3)
        assert controller.next(session) is session

    def test_next_and_previous(self, controller) -> None:
        session = controller.load(controller.start("invoices"), 1)
        session = controller.next(session)
        assert session.record.id == 2
        session = controller.previous(session)
        assert session.record.id == 1

    def test_navigation_needs_a_loaded_record(self, controller) -> None:
        session = controller.start("invoices")
        assert controller.next(session) is session
        assert controller.previous(session) is session

    def test_skip_does_not_save(self, controller, store) -> None:
        session = controller.load(controller.start("receipts"), 1)
        session = controller.edit(session, status=False)
        session = controller.skip(session)
        assert session.record.id == 2
        assert store.fetch("receipts", 1).status is True

    def test_empty_dataset(self, extractor) -> None:
        store = MagicMock()
        store.max_id.return_value = 0
        controller = SessionController(store, extractor=extractor)
        session = controller.load(controller.start("passports"))
        assert session.state is SessionState.EMPTY
        assert "no documents" in session.error
        store.fetch.assert_not_called()

    def test_missing_document_reports_error(self, extractor) -> None:
        store = MagicMock()
        store.max_id.return_value = 4
        store.fetch.return_value = None
        controller = SessionController(store, extractor=extractor)
        session = controller.load(controller.start("invoices"), 2)
        assert session.state is SessionState.EMPTY
        assert session.record is None
        assert "not found" in session.error

    def test_store_error_reports_error(self, extractor) -> None:
        store = MagicMock()
        store.max_id.return_value = 2
        store.fetch.side_effect = StoreError("backend unavailable")
        controller = SessionController(store, extractor=extractor)
        session = controller.load(controller.start("invoices"))
        assert session.state is SessionState.EMPTY
        assert session.error == "backend unavailable"

    def test_reset_keeps_position(self, controller) -> None:
        session = controller.load(controller.start("invoices"), 2)
        session = controller.reset(session)
        assert session.state is SessionState.EMPTY
        assert session.record is None
        assert session.document_id == 2
        assert session.max_id == 3


class TestBusy:
    @pytest.fixture()
    def busy(self, controller) -> AnnotationSession:
        session = controller.load(controller.start("invoices"), 2)
        return replace(session, state=SessionState.LOADING)

    @pytest.mark.parametrize(
        "action",
        [
            lambda c, s: c.load(s),
            lambda c, s: c.next(s),
            lambda c, s: c.previous(s),
            lambda c, s: c.skip(s),
            lambda c, s: c.confirm(s),
            lambda c, s: c.reset(s),
            lambda c, s: c.edit(s, status=True),
            lambda c, s: c.upload(s, b"png"),
            lambda c, s: c.select_dataset(s, "receipts"),
        ],
    )
    def test_actions_rejected_while_loading(self, controller, busy, action) -> None:
        with pytest.raises(SessionBusyError):
            action(controller, busy)

    def test_begin_clears_messages(self, controller) -> None:
        session = replace(controller.start("invoices"), error="old", notice="older")
        loading = controller.begin(session, "load")
        assert loading.state is SessionState.LOADING
        assert loading.error is None
        assert loading.notice is None


class TestUpload:
    def test_upload_proposes_dates(self, controller, extractor, png_bytes) -> None:
        session = controller.start("id_cards", 3)
        session = controller.upload(session, png_bytes)

        extractor.extract.assert_called_once_with(png_bytes)
        assert session.state is SessionState.LOADED
        record = session.record
        assert record.id == 3
        assert record.dataset_id == "id_cards"
        assert record.issued_date == date(2022, 1, 15)
        assert record.expiration_date == date(2025, 1, 15)
        assert record.ocr_confidence == 87.5
        assert record.status is False
        assert record.screenshot.startswith("data:image/png;base64,")

    def test_upload_keeps_path_as_screenshot(self, controller, png_file) -> None:
        session = controller.upload(controller.start("id_cards"), str(png_file))
        assert session.record.screenshot == str(png_file)

    def test_upload_without_dates(self, controller, extractor, png_bytes) -> None:
        extractor.extract.return_value = make_ocr_result("RECEIPT\nTotal: $9.77", 60)
        session = controller.upload(controller.start("receipts"), png_bytes)
        assert session.record.issued_date is None
        assert session.record.expiration_date is None
        assert session.record.extracted_text == "RECEIPT\nTotal: $9.77"

    def test_out_of_range_located_date_is_left_empty(self, controller, extractor, png_bytes) -> None:
        extractor.extract.return_value = make_ocr_result("issued 99/99/9999", 50)
        session = controller.upload(controller.start("certificates"), png_bytes)
        assert session.state is SessionState.LOADED
        assert session.record.issued_date is None

    def test_confidence_is_clamped(self, controller, extractor, png_bytes) -> None:
        extractor.extract.return_value = make_ocr_result("text", 140)
        session = controller.upload(controller.start("receipts"), png_bytes)
        assert session.record.ocr_confidence == 100.0

    def test_extraction_failure(self, controller, extractor, png_bytes) -> None:
        extractor.extract.side_effect = OCRProcessingError("upload", "unreadable")
        session = controller.upload(controller.load(controller.start("invoices")), png_bytes)
        assert session.state is SessionState.EMPTY
        assert session.record is None
        assert session.error == EXTRACTION_FAILED_MESSAGE

    def test_missing_ocr_engine_is_an_extraction_failure(self, store, png_bytes) -> None:
        controller = SessionController(store)
        with patch(
            "annotator.ocr_engine.engine.OCREngine",
            side_effect=OCREngineNotAvailableError("Tesseract OCR"),
        ):
            session = controller.upload(controller.start("id_cards"), png_bytes)
        assert session.error == EXTRACTION_FAILED_MESSAGE


class TestEdit:
    @pytest.fixture()
    def loaded(self, controller) -> AnnotationSession:
        return controller.load(controller.start("receipts"), 1)

    def test_edit_parses_date_strings(self, controller, loaded) -> None:
        session = controller.edit(loaded, issued_date="06/01/2023", expiration_date="2024-06-01")
        assert session.record.issued_date == date(2023, 6, 1)
        assert session.record.expiration_date == date(2024, 6, 1)

    def test_edit_clears_dates(self, controller, loaded) -> None:
        session = controller.edit(loaded, issued_date=None, expiration_date="  ")
        assert session.record.issued_date is None
        assert session.record.expiration_date is None

    def test_edit_rejects_unparseable_date(self, controller, loaded) -> None:
        with pytest.raises(ValidationError):
            controller.edit(loaded, issued_date="sometime soon")

    def test_edit_status(self, controller, loaded) -> None:
        session = controller.edit(loaded, status=False)
        assert session.record.status is False
        assert loaded.record.status is True

    def test_edit_rejects_non_boolean_status(self, controller, loaded) -> None:
        with pytest.raises(ValidationError):
            controller.edit(loaded, status="yes")

    def test_edit_when_empty_is_noop(self, controller) -> None:
        session = controller.start("receipts")
        assert controller.edit(session, status=True) is session

    def test_edit_clears_notice(self, controller, loaded) -> None:
        session = controller.edit(replace(loaded, notice=SAVED_MESSAGE), status=False)
        assert session.notice is None


class TestConfirm:
    def test_confirm_saves_and_advances(self, controller, store) -> None:
        session = controller.load(controller.start("invoices"), 1)
        session = controller.edit(session, status=False, expiration_date="2023-03-01")
        session = controller.confirm(session)

        assert session.record.id == 2
        assert session.notice == SAVED_MESSAGE
        saved = store.fetch("invoices", 1)
        assert saved.status is False
        assert saved.expiration_date == date(2023, 3, 1)

    def test_confirm_on_last_document_stays(self, controller, store) -> None:
        session = controller.load(controller.start("passports"), 1)
        session = controller.edit(session, status=False)
        session = controller.confirm(session)

        assert session.state is SessionState.LOADED
        assert session.document_id == 1
        assert session.notice == LAST_DOCUMENT_MESSAGE
        assert store.fetch("passports", 1).status is False

    def test_confirm_uploaded_record_extends_dataset(self, controller, store, png_bytes) -> None:
        session = controller.upload(controller.start("passports", 2), png_bytes)
        session = controller.confirm(session)
        assert store.max_id("passports") == 2
        assert store.fetch("passports", 2).issued_date == date(2022, 1, 15)
        assert session.notice == LAST_DOCUMENT_MESSAGE

    def test_failed_save_keeps_edits(self, extractor) -> None:
        store = MagicMock()
        store.max_id.return_value = 2
        store.fetch.return_value = DocumentRecord(id=1, dataset_id="invoices")
        store.save.return_value = False
        controller = SessionController(store, extractor=extractor)

        session = controller.load(controller.start("invoices"), 1)
        session = controller.edit(session, status=True)
        session = controller.confirm(session)

        assert session.state is SessionState.LOADED
        assert session.record.status is True
        assert session.document_id == 1
        assert "Failed to save" in session.error

    def test_saved_notice_kept_when_next_fetch_fails(self, extractor) -> None:
        store = MagicMock()
        store.max_id.return_value = 2
        store.fetch.side_effect = [DocumentRecord(id=1, dataset_id="invoices"), None]
        store.save.return_value = True
        controller = SessionController(store, extractor=extractor)

        session = controller.confirm(controller.load(controller.start("invoices"), 1))

        store.save.assert_called_once()
        assert session.state is SessionState.EMPTY
        assert "not found" in session.error
        assert session.notice == SAVED_MESSAGE

    def test_save_raising_store_error(self, extractor) -> None:
        store = MagicMock()
        store.max_id.return_value = 1
        store.fetch.return_value = DocumentRecord(id=1, dataset_id="invoices")
        store.save.side_effect = StoreError("disk full")
        controller = SessionController(store, extractor=extractor)

        session = controller.confirm(controller.load(controller.start("invoices")))
        assert session.error == "disk full"
        assert session.is_loaded

    def test_confirm_without_record_is_noop(self, controller) -> None:
        session = controller.start("invoices")
        assert controller.confirm(session) is session
