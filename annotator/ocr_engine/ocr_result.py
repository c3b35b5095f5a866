"""
OCR Result Data Classes.

Standardized OCR output: recognized words grouped into lines, the page
transcript, and a confidence score.

Classes:
    OCRWord: Individual word with bounding box
    OCRLine: Line of text containing multiple words
    OCRResult: Complete OCR output for an image

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class OCRWord:
    """
    A single word recognized by OCR.

    Attributes:
        text: The recognized text content
        bbox: Bounding box as (x1, y1, x2, y2) in pixels
        confidence: OCR confidence score (0-100)
        line_key: (block, paragraph, line) the word belongs to

    Example:
        >>> word = OCRWord(text="Issued", bbox=(100, 50, 180, 80), confidence=95.5)
    """
    text: str
    bbox: Tuple[int, int, int, int]
    confidence: float = 0.0
    line_key: Tuple[int, int, int] = (0, 0, 0)

    @property
    def x1(self) -> int:
        return self.bbox[0]


@dataclass
class OCRLine:
    """
    A line of text containing multiple words.

    Attributes:
        words: Words in reading order
        bbox: Bounding box enclosing every word, set by compute_bbox()
    """
    words: List[OCRWord] = field(default_factory=list)
    bbox: Optional[Tuple[int, int, int, int]] = None

    @property
    def text(self) -> str:
        return ' '.join(word.text for word in self.words)

    def compute_bbox(self) -> None:
        if not self.words:
            return
        self.bbox = (
            min(w.bbox[0] for w in self.words),
            min(w.bbox[1] for w in self.words),
            max(w.bbox[2] for w in self.words),
            max(w.bbox[3] for w in self.words),
        )


@dataclass
class OCRResult:
    """
    Complete OCR output for one image.

    ``text`` and ``confidence`` form the extraction contract consumed by
    the annotation session; words and lines are kept for display.

    Attributes:
        words: Recognized words
        lines: Words grouped into lines
        image_width: Source image width in pixels
        image_height: Source image height in pixels
        language: OCR language code
        engine: Name of the backend that produced the result
        processing_time: Seconds spent in the backend
    """
    words: List[OCRWord] = field(default_factory=list)
    lines: List[OCRLine] = field(default_factory=list)
    image_width: int = 0
    image_height: int = 0
    language: str = "eng"
    engine: str = "unknown"
    processing_time: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        """Page transcript, one line of text per OCR line."""
        return '\n'.join(line.text for line in self.lines)

    @property
    def confidence(self) -> float:
        """Mean word confidence in [0, 100]; 0 when nothing was recognized."""
        if not self.words:
            return 0.0
        mean = sum(w.confidence for w in self.words) / len(self.words)
        return max(0.0, min(100.0, mean))

    @property
    def word_count(self) -> int:
        return len(self.words)

    @property
    def line_count(self) -> int:
        return len(self.lines)
