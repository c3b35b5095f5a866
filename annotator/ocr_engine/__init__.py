"""
OCR Engine Module for the Document Date Annotator.

This module provides the extraction collaborator:
    - Text extraction from images
    - A page-level confidence score
    - Word and line structure for display

Backend:
    - Tesseract (via pytesseract)

Author: ML Engineering Team
"""

from .engine import OCREngine
from .tesseract_backend import TesseractBackend
from .ocr_result import OCRResult, OCRWord, OCRLine

__all__ = ['OCREngine', 'TesseractBackend', 'OCRResult', 'OCRWord', 'OCRLine']
