# annotator/ui/app.py
# Run with: streamlit run annotator/ui/app.py
import sys
from pathlib import Path

import streamlit as st

# --- 1. Page Config ---
st.set_page_config(layout="wide", page_title="Document Date Annotator")

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from annotator.models.document import DATASETS, dataset_display_name
from annotator.session import (
    AnnotationSession,
    SessionController,
    build_export,
    dumps_export,
    export_filename,
)
from annotator.store import create_store
from annotator.utils.exceptions import ValidationError
from annotator.utils.logger import setup_logger_from_config


# --- Shared resources (one per server process) ---
@st.cache_resource
def get_controller() -> SessionController:
    setup_logger_from_config()
    # The OCR engine is created on the first upload
    return SessionController(create_store())


controller = get_controller()

if "session" not in st.session_state:
    st.session_state.session = controller.start()
    st.session_state.processed_upload = None
    st.session_state.form_rev = 0
    st.session_state.upload_rev = 0


def session() -> AnnotationSession:
    return st.session_state.session


def apply(transition, *args, **kwargs):
    with st.spinner("Loading..."):
        st.session_state.session = transition(session(), *args, **kwargs)
    # Fresh widget keys so the editor shows the new record's values
    st.session_state.form_rev += 1


# --- Callbacks ---
def discard_upload():
    # A new uploader key empties the widget, so the file is not re-imported
    st.session_state.upload_rev += 1
    st.session_state.processed_upload = None


def on_dataset_change():
    apply(controller.select_dataset, st.session_state.dataset_select)
    discard_upload()


def on_load():
    apply(controller.load, int(st.session_state[field_key("document")]))


def on_previous():
    apply(controller.previous)


def on_next():
    apply(controller.next)


def on_skip():
    apply(controller.skip)


def on_confirm():
    apply(controller.confirm)


def on_reset():
    apply(controller.reset)
    discard_upload()


def field_key(name: str) -> str:
    return f"{name}_{st.session_state.form_rev}"


def on_edit(field: str, key: str):
    try:
        st.session_state.session = controller.edit(session(), **{field: st.session_state[key]})
    except ValidationError as e:
        st.session_state.session_error = e.message


# --- Main App ---
current = session()
st.title("Document Date Annotator")

# Top panel: dataset, document id, navigation, download
col_ds, col_id, col_load, col_prev, col_next, col_dl = st.columns([2, 1, 1, 1, 1, 2])
busy = current.is_busy

with col_ds:
    dataset_options = list(DATASETS)
    st.selectbox(
        "Dataset",
        dataset_options,
        index=dataset_options.index(current.dataset),
        format_func=dataset_display_name,
        key="dataset_select",
        on_change=on_dataset_change,
        disabled=busy,
    )
with col_id:
    st.number_input(
        "Document ID",
        min_value=1,
        max_value=max(current.max_id, 1),
        value=min(max(current.document_id, 1), max(current.max_id, 1)),
        step=1,
        key=field_key("document"),
        disabled=busy,
    )
with col_load:
    st.button("Load", on_click=on_load, disabled=busy or current.max_id == 0)
with col_prev:
    st.button("⬅️ Previous", on_click=on_previous, disabled=not current.can_go_previous)
with col_next:
    st.button("Next ➡️", on_click=on_next, disabled=not current.can_go_next)
with col_dl:
    if current.can_download:
        export = build_export(current)
        st.download_button(
            "Download Annotations",
            data=dumps_export(export),
            file_name=export_filename(export),
            mime="application/json",
        )
    else:
        st.button("Download Annotations", disabled=True)

st.caption(f"{dataset_display_name(current.dataset)}: {current.max_id} document(s)")

if current.error:
    st.error(current.error)
if current.notice:
    st.success(current.notice)
if st.session_state.get("session_error"):
    st.warning(st.session_state.pop("session_error"))

col_img, col_text, col_edit = st.columns(3)

# Screenshot panel
with col_img:
    st.subheader("Screenshot")
    record = current.record
    if record and record.screenshot:
        st.image(record.screenshot, width="stretch")
    elif record:
        st.info("No screenshot available for this document.")

    uploaded = st.file_uploader(
        "Upload a screenshot to annotate",
        type=["png", "jpg", "jpeg", "tiff", "bmp", "webp"],
        key=f"upload_{st.session_state.upload_rev}",
        disabled=busy,
    )
    if uploaded is not None:
        upload_key = (uploaded.name, uploaded.size)
        if st.session_state.processed_upload != upload_key:
            st.session_state.processed_upload = upload_key
            apply(controller.upload, uploaded.getvalue())
            st.rerun()

    if record:
        st.button("Clear", on_click=on_reset, disabled=busy)

# Extracted text panel
with col_text:
    st.subheader("Extracted Text")
    if record and record.extracted_text:
        st.code(record.extracted_text, language=None)
        if record.ocr_confidence:
            st.markdown(f"**OCR Confidence:** {round(record.ocr_confidence)}%")
            st.progress(int(round(record.ocr_confidence)))
    else:
        st.info("No text extracted yet")

# Editor panel
with col_edit:
    st.subheader("Date Fields Editor")
    editable = current.can_edit

    issued_key = field_key("issued")
    st.date_input(
        "Issued Date",
        value=record.issued_date if record else None,
        key=issued_key,
        on_change=on_edit,
        args=("issued_date", issued_key),
        disabled=not editable,
    )

    expiration_key = field_key("expiration")
    st.date_input(
        "Expiration Date",
        value=record.expiration_date if record else None,
        key=expiration_key,
        on_change=on_edit,
        args=("expiration_date", expiration_key),
        disabled=not editable,
    )

    status_key = field_key("status")
    st.toggle(
        "Active",
        value=record.status if record else False,
        key=status_key,
        on_change=on_edit,
        args=("status", status_key),
        disabled=not editable,
    )

    col_confirm, col_skip = st.columns(2)
    with col_confirm:
        st.button("💾 Confirm", type="primary", on_click=on_confirm, disabled=not editable)
    with col_skip:
        st.button("Skip", on_click=on_skip, disabled=not current.can_go_next)
