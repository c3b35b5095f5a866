import base64
from pathlib import Path

import pytest
from PIL import Image

from annotator.input_handler import ImageLoader, decode_data_uri
from annotator.utils.exceptions import CorruptedFileError, UnsupportedFileTypeError


@pytest.fixture()
def loader() -> ImageLoader:
    return ImageLoader()


class TestLoad:
    def test_from_bytes(self, loader, png_bytes) -> None:
        image = loader.load(png_bytes)
        assert image.mode == "RGB"
        assert image.size == (40, 20)

    def test_from_path(self, loader, png_file) -> None:
        assert loader.load(png_file).size == (40, 20)
        assert loader.load(str(png_file)).size == (40, 20)

    def test_from_data_uri(self, loader, png_bytes) -> None:
        uri = "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")
        assert loader.load(uri).size == (40, 20)

    def test_grayscale_is_converted(self, loader) -> None:
        assert loader.load(Image.new("L", (8, 8), 128)).mode == "RGB"

    def test_transparency_is_flattened_onto_white(self, loader) -> None:
        image = loader.load(Image.new("RGBA", (4, 4), (0, 0, 0, 0)))
        assert image.mode == "RGB"
        assert image.getpixel((0, 0)) == (255, 255, 255)

    def test_unsupported_extension(self, loader, tmp_path: Path) -> None:
        document = tmp_path / "scan.pdf"
        document.write_bytes(b"%PDF-1.4")
        with pytest.raises(UnsupportedFileTypeError):
            loader.load(document)

    def test_missing_file(self, loader, tmp_path: Path) -> None:
        with pytest.raises(CorruptedFileError):
            loader.load(tmp_path / "absent.png")

    def test_undecodable_bytes(self, loader) -> None:
        with pytest.raises(CorruptedFileError):
            loader.load(b"\x00\x01 not an image")

    def test_to_data_uri(self, loader) -> None:
        uri = loader.to_data_uri(Image.new("RGB", (2, 2)))
        assert uri.startswith("data:image/png;base64,")
        assert loader.load(uri).size == (2, 2)


class TestDecodeDataUri:
    def test_plain_payload(self) -> None:
        assert decode_data_uri("data:text/plain,hello") == b"hello"

    def test_malformed(self) -> None:
        with pytest.raises(CorruptedFileError):
            decode_data_uri("data:image/png;base64")

    def test_invalid_base64(self) -> None:
        with pytest.raises(CorruptedFileError):
            decode_data_uri("data:image/png;base64,@@@")
