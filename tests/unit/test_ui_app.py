from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from annotator.session import SessionState

APP_FILE = Path(__file__).resolve().parents[2] / "annotator" / "ui" / "app.py"


def click(at: AppTest, label: str) -> AppTest:
    button = next(b for b in at.button if b.label == label)
    return button.click().run()


@pytest.fixture()
def app() -> AppTest:
    at = AppTest.from_file(str(APP_FILE), default_timeout=30)
    at.run()
    assert not at.exception
    return at


class TestUploadWidgetLifecycle:
    def test_clear_returns_to_empty_with_a_fresh_uploader(self, app) -> None:
        click(app, "Load")
        assert app.session_state["session"].state == SessionState.LOADED
        upload_rev = app.session_state["upload_rev"]

        click(app, "Clear")

        assert not app.exception
        assert app.session_state["session"].state == SessionState.EMPTY
        assert app.session_state["session"].record is None
        assert app.session_state["upload_rev"] == upload_rev + 1
        assert app.session_state["processed_upload"] is None

    def test_dataset_change_discards_the_uploaded_file(self, app) -> None:
        upload_rev = app.session_state["upload_rev"]

        app.selectbox(key="dataset_select").select_index(1).run()

        assert not app.exception
        assert app.session_state["session"].dataset == "receipts"
        assert app.session_state["session"].state == SessionState.EMPTY
        assert app.session_state["upload_rev"] == upload_rev + 1

    def test_navigation_keeps_the_uploader(self, app) -> None:
        click(app, "Load")
        upload_rev = app.session_state["upload_rev"]
        click(app, "Next ➡️")
        assert app.session_state["session"].record.id == 2
        assert app.session_state["upload_rev"] == upload_rev
