"""
Document Date Annotator - Source Package.

Core modules for annotating document images with issued/expiration
dates and an active/inactive status.

Modules:
    - input_handler: Image loading from uploads, files and data URIs
    - ocr_engine: Text extraction (Tesseract)
    - postprocessor: Date location and normalization
    - models: Document records and the dataset catalogue
    - store: Document store contract and in-memory backend
    - session: Annotation session state, transitions and export
    - ui: Streamlit front end
    - utils: Logging, exceptions and helpers

Architecture:
    Upload → OCR → Date Locator ─┐
                                 ├→ Session → Store / JSON export
    Store  → fetch ──────────────┘
"""

__version__ = "1.0.0"
__author__ = "ML Engineering Team"

__all__ = [
    'input_handler',
    'ocr_engine',
    'postprocessor',
    'models',
    'store',
    'session',
    'ui',
    'utils'
]
