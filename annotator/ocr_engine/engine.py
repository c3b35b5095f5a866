"""
Main OCR Engine Module.

OCREngine is the extraction collaborator used by the annotation session:
it accepts any image source an upload can produce, runs the configured
backend, and reports failures as ExtractionError subclasses.

Usage:
    from annotator.ocr_engine import OCREngine

    engine = OCREngine()
    result = engine.extract(uploaded_bytes)
    print(result.text, result.confidence)

Author: ML Engineering Team
"""

from typing import Optional

from config import get_config
from annotator.utils.logger import get_logger
from annotator.utils.exceptions import InputError, OCRProcessingError
from annotator.input_handler.image_loader import ImageLoader, ImageSource
from .ocr_result import OCRResult
from .tesseract_backend import TesseractBackend

logger = get_logger(__name__)


class OCREngine:
    """
    Unified interface for text extraction.

    Attributes:
        backend_name: Name of the active OCR backend
        backend: The active OCR backend instance
        loader: ImageLoader used to decode inputs

    Example:
        >>> engine = OCREngine()
        >>> result = engine.extract("scans/passport.png")
        >>> print(f"{result.confidence:.0f}%")
    """

    SUPPORTED_BACKENDS = ['tesseract']

    def __init__(self, backend: Optional[str] = None, loader: Optional[ImageLoader] = None) -> None:
        """
        Initialize the OCR engine.

        Args:
            backend: OCR backend to use. If None, uses ``ocr.engine``.
            loader: Image loader; a default one is created when omitted.

        Raises:
            OCREngineNotAvailableError: If the backend cannot start.
        """
        self.backend_name = backend or get_config("ocr.engine", "tesseract")

        if self.backend_name == "pytesseract":
            self.backend_name = "tesseract"

        if self.backend_name not in self.SUPPORTED_BACKENDS:
            logger.warning(
                f"Unknown backend '{self.backend_name}', falling back to tesseract"
            )
            self.backend_name = "tesseract"

        self.backend = TesseractBackend()
        self.loader = loader or ImageLoader()

        logger.info(f"OCR Engine initialized with backend: {self.backend_name}")

    def extract(self, image: ImageSource) -> OCRResult:
        """
        Extract text and a confidence score from an image.

        Args:
            image: PIL Image, path, raw bytes or data URI.

        Returns:
            OCRResult with ``text`` and ``confidence``.

        Raises:
            OCRProcessingError: If the image cannot be decoded or read.
        """
        try:
            pil_image = self.loader.load(image)
        except InputError as e:
            raise OCRProcessingError(e.details.get("source", "image"), f"Failed to load image: {e.message}")

        logger.debug(f"Extracting text using {self.backend_name} backend")
        return self.backend.extract(pil_image)
