"""
Tesseract OCR Backend.

Runs Tesseract through pytesseract and converts its word table into an
OCRResult.

Requirements:
    - Tesseract OCR installed on the system
    - pytesseract Python package

Author: ML Engineering Team
"""

import time
from typing import List, Dict, Tuple

from PIL import Image

from config import get_config
from annotator.utils.logger import get_logger
from annotator.utils.exceptions import OCREngineNotAvailableError, OCRProcessingError
from .ocr_result import OCRResult, OCRWord, OCRLine

logger = get_logger(__name__)


class TesseractBackend:
    """
    Tesseract OCR backend implementation.

    Attributes:
        language: Tesseract language code (e.g., "eng")
        psm: Page Segmentation Mode (0-13)
        oem: OCR Engine Mode (0-3)
        extra_config: Additional Tesseract command-line options

    Example:
        >>> backend = TesseractBackend()
        >>> result = backend.extract(image)
        >>> print(result.text, result.confidence)
    """

    def __init__(self) -> None:
        self.language = get_config("ocr.tesseract.lang", "eng")
        self.psm = get_config("ocr.tesseract.psm", 3)
        self.oem = get_config("ocr.tesseract.oem", 3)
        self.extra_config = get_config("ocr.tesseract.config", "")

        self._check_dependencies()

        logger.debug(
            f"TesseractBackend initialized (lang={self.language}, "
            f"psm={self.psm}, oem={self.oem})"
        )

    def _check_dependencies(self) -> None:
        """
        Check that pytesseract and the Tesseract binary are available.

        Raises:
            OCREngineNotAvailableError: If Tesseract is not installed.
        """
        try:
            import pytesseract
            self._pytesseract = pytesseract

            self.version = str(pytesseract.get_tesseract_version())
            logger.info(f"Tesseract version: {self.version}")

        except ImportError:
            raise OCREngineNotAvailableError(
                "pytesseract (install with: pip install pytesseract)"
            )
        except Exception as e:
            raise OCREngineNotAvailableError(
                f"Tesseract OCR (not installed or not in PATH): {e}"
            )

    def _build_config(self) -> str:
        config_parts = [
            f"--psm {self.psm}",
            f"--oem {self.oem}"
        ]

        if self.extra_config:
            config_parts.append(self.extra_config)

        return ' '.join(config_parts)

    def extract(self, image: Image.Image) -> OCRResult:
        """
        Extract words, lines and confidence from an image.

        Args:
            image: PIL Image to process.

        Returns:
            OCRResult for the image.

        Raises:
            OCRProcessingError: If Tesseract fails on the image.
        """
        start_time = time.time()

        if image.mode != 'RGB':
            image = image.convert('RGB')

        image_width, image_height = image.size
        config = self._build_config()

        logger.debug(f"Running Tesseract OCR (config: {config})")
        try:
            data = self._pytesseract.image_to_data(
                image,
                lang=self.language,
                config=config,
                output_type=self._pytesseract.Output.DICT
            )
        except Exception as e:
            logger.error(f"OCR processing failed: {e}")
            raise OCRProcessingError("image", str(e))

        words = self._parse_tesseract_output(data)
        lines = self._group_into_lines(words)

        processing_time = time.time() - start_time

        result = OCRResult(
            words=words,
            lines=lines,
            image_width=image_width,
            image_height=image_height,
            language=self.language,
            engine="tesseract",
            processing_time=processing_time,
            metadata={
                'psm': self.psm,
                'oem': self.oem,
                'tesseract_version': self.version
            }
        )

        logger.info(
            f"OCR completed: {result.word_count} words, "
            f"{result.line_count} lines, "
            f"confidence: {result.confidence:.1f}% "
            f"({processing_time:.2f}s)"
        )

        return result

    def _parse_tesseract_output(self, data: Dict[str, List]) -> List[OCRWord]:
        words = []

        for i in range(len(data['text'])):
            text = data['text'][i]

            # Skip layout rows (blocks, paragraphs, lines) and blanks
            if not text or not str(text).strip():
                continue

            w = int(data['width'][i])
            h = int(data['height'][i])
            if w <= 0 or h <= 0:
                continue

            x = int(data['left'][i])
            y = int(data['top'][i])

            # Tesseract reports -1 for rows without a confidence
            conf = max(float(data['conf'][i]), 0.0)

            words.append(OCRWord(
                text=str(text).strip(),
                bbox=(x, y, x + w, y + h),
                confidence=conf,
                line_key=(
                    int(data['block_num'][i]),
                    int(data['par_num'][i]),
                    int(data['line_num'][i])
                )
            ))

        return words

    def _group_into_lines(self, words: List[OCRWord]) -> List[OCRLine]:
        """Group words by Tesseract's (block, paragraph, line) numbering."""
        line_groups: Dict[Tuple[int, int, int], List[OCRWord]] = {}

        for word in words:
            line_groups.setdefault(word.line_key, []).append(word)

        lines = []
        for key in sorted(line_groups):
            line = OCRLine(words=sorted(line_groups[key], key=lambda w: w.x1))
            line.compute_bbox()
            lines.append(line)

        return lines
