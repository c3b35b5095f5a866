from unittest.mock import patch

import pytest
from PIL import Image

from annotator.ocr_engine import OCREngine, OCRResult, OCRWord, TesseractBackend
from annotator.utils.exceptions import OCREngineNotAvailableError, OCRProcessingError

TESSERACT_DATA = {
    "text": ["", "", "Issued", "01/15/2022", "", "Expires", "01/15/2025", "  "],
    "left": [0, 0, 10, 80, 0, 10, 90, 0],
    "top": [0, 0, 10, 10, 0, 40, 40, 0],
    "width": [200, 200, 60, 90, 200, 70, 90, 5],
    "height": [80, 30, 20, 20, 30, 20, 20, 5],
    "conf": [-1, -1, 90, 80, -1, "70", 60.0, -1],
    "block_num": [1, 1, 1, 1, 1, 1, 1, 1],
    "par_num": [0, 1, 1, 1, 1, 1, 1, 1],
    "line_num": [0, 1, 1, 1, 2, 2, 2, 2],
}


@pytest.fixture()
def tesseract():
    with patch("pytesseract.get_tesseract_version", return_value="5.3.0"), \
            patch("pytesseract.image_to_data", return_value=TESSERACT_DATA) as image_to_data:
        yield image_to_data


class TestTesseractBackend:
    def test_words_lines_and_confidence(self, tesseract) -> None:
        backend = TesseractBackend()
        result = backend.extract(Image.new("RGB", (200, 80), "white"))

        assert result.engine == "tesseract"
        assert [w.text for w in result.words] == ["Issued", "01/15/2022", "Expires", "01/15/2025"]
        assert result.line_count == 2
        assert result.text == "Issued 01/15/2022\nExpires 01/15/2025"
        assert result.confidence == pytest.approx(75.0)
        assert result.metadata["tesseract_version"] == "5.3.0"

    def test_passes_configured_options(self, tesseract) -> None:
        TesseractBackend().extract(Image.new("L", (20, 20)))
        _, kwargs = tesseract.call_args
        assert kwargs["lang"] == "eng"
        assert kwargs["config"] == "--psm 3 --oem 3"

    def test_processing_failure(self, tesseract) -> None:
        tesseract.side_effect = RuntimeError("tesseract crashed")
        with pytest.raises(OCRProcessingError):
            TesseractBackend().extract(Image.new("RGB", (20, 20)))

    def test_binary_not_installed(self) -> None:
        with patch("pytesseract.get_tesseract_version", side_effect=OSError("not found")):
            with pytest.raises(OCREngineNotAvailableError):
                TesseractBackend()


class TestOCREngine:
    def test_extract_from_bytes(self, tesseract, png_bytes) -> None:
        result = OCREngine().extract(png_bytes)
        assert isinstance(result, OCRResult)
        assert "01/15/2025" in result.text

    def test_unknown_backend_falls_back(self, tesseract) -> None:
        assert OCREngine(backend="easyocr").backend_name == "tesseract"

    def test_undecodable_upload(self, tesseract) -> None:
        with pytest.raises(OCRProcessingError):
            OCREngine().extract(b"definitely not an image")


class TestOCRResult:
    def test_empty_result(self) -> None:
        result = OCRResult()
        assert result.text == ""
        assert result.confidence == 0.0

    def test_confidence_is_clamped(self) -> None:
        result = OCRResult(words=[OCRWord("x", (0, 0, 1, 1), confidence=250.0)])
        assert result.confidence == 100.0
