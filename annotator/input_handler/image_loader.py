"""
Image Loader Module.

Turns an uploaded image into a PIL Image ready for OCR, and back into a
``data:`` URI that can be stored as a record's screenshot.

Accepted sources:
    - PIL Image
    - Path or path string
    - Raw bytes (an upload's content)
    - ``data:image/...;base64,...`` URI

Author: ML Engineering Team
"""

import base64
import binascii
import io
import re
from pathlib import Path
from typing import Union

from PIL import Image, ImageOps, UnidentifiedImageError

from config import get_config
from annotator.utils.logger import get_logger
from annotator.utils.helpers import get_file_extension
from annotator.utils.exceptions import CorruptedFileError, UnsupportedFileTypeError

logger = get_logger(__name__)

ImageSource = Union[Image.Image, str, Path, bytes]

DATA_URI_PATTERN = re.compile(r'^data:(?P<mime>[\w/+.-]+)?(?P<b64>;base64)?,(?P<data>.*)$', re.DOTALL)

DEFAULT_EXTENSIONS = [".jpg", ".jpeg", ".png", ".tiff", ".tif", ".bmp", ".gif", ".webp"]


class ImageLoader:
    """
    Loads images from uploads, files or data URIs.

    Attributes:
        supported_extensions: File extensions accepted for path inputs
        auto_orient: Whether to apply the EXIF orientation tag

    Example:
        >>> loader = ImageLoader()
        >>> image = loader.load("scans/id_card.png")
        >>> uri = loader.to_data_uri(image)
    """

    def __init__(self) -> None:
        self.supported_extensions = get_config(
            "input.image.supported_extensions", DEFAULT_EXTENSIONS
        )
        self.auto_orient = get_config("input.image.auto_orient", True)

    def load(self, source: ImageSource) -> Image.Image:
        """
        Load an image from any accepted source and convert it to RGB.

        Args:
            source: PIL Image, path, bytes or data URI.

        Returns:
            RGB PIL Image.

        Raises:
            UnsupportedFileTypeError: If a path has an unsupported extension.
            CorruptedFileError: If the content cannot be decoded.
        """
        if isinstance(source, Image.Image):
            image, label = source, "image"
        elif isinstance(source, bytes):
            image, label = self._open_bytes(source, "upload"), "upload"
        elif isinstance(source, str) and source.startswith("data:"):
            image, label = self._open_bytes(decode_data_uri(source), "data URI"), "data URI"
        else:
            image, label = self._open_path(Path(source)), str(source)

        return self._prepare(image, label)

    def _open_path(self, path: Path) -> Image.Image:
        extension = get_file_extension(path)
        if extension not in self.supported_extensions:
            raise UnsupportedFileTypeError(extension, self.supported_extensions)

        if not path.is_file():
            raise CorruptedFileError(str(path), "file does not exist")

        logger.debug(f"Loading image from: {path}")
        try:
            image = Image.open(path)
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise CorruptedFileError(str(path), str(e))
        return image

    def _open_bytes(self, content: bytes, label: str) -> Image.Image:
        try:
            image = Image.open(io.BytesIO(content))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise CorruptedFileError(label, str(e))
        return image

    def _prepare(self, image: Image.Image, label: str) -> Image.Image:
        if self.auto_orient:
            image = ImageOps.exif_transpose(image)

        if image.mode == 'RGBA':
            # Flatten transparency onto white so text stays readable
            background = Image.new('RGB', image.size, (255, 255, 255))
            background.paste(image, mask=image.split()[3])
            image = background
        elif image.mode != 'RGB':
            image = image.convert('RGB')

        logger.debug(f"Loaded {label}: {image.width}x{image.height}")
        return image

    def to_data_uri(self, image: Image.Image, image_format: str = "PNG") -> str:
        """Encode an image as a base64 ``data:`` URI."""
        buffer = io.BytesIO()
        image.save(buffer, format=image_format)
        encoded = base64.b64encode(buffer.getvalue()).decode('ascii')
        return f"data:image/{image_format.lower()};base64,{encoded}"


def decode_data_uri(uri: str) -> bytes:
    """
    Decode the payload of a ``data:`` URI.

    Raises:
        CorruptedFileError: If the URI is malformed.
    """
    match = DATA_URI_PATTERN.match(uri)
    if not match:
        raise CorruptedFileError("data URI", "malformed data URI")

    payload = match.group('data')
    if not match.group('b64'):
        return payload.encode('utf-8')

    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise CorruptedFileError("data URI", f"invalid base64: {e}")
