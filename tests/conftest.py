import io
from pathlib import Path

import pytest
from PIL import Image

from config import ConfigurationManager
from annotator.store.memory_store import InMemoryDocumentStore

SEED_FILE = Path(__file__).resolve().parent.parent / "config" / "sample_documents.yaml"


@pytest.fixture(autouse=True)
def fresh_config():
    """Every test starts from the bundled settings.yaml."""
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


@pytest.fixture()
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore.from_yaml(SEED_FILE, fetch_delay=0, save_delay=0)


@pytest.fixture()
def png_bytes() -> bytes:
    """A small white PNG."""
    buf = io.BytesIO()
    Image.new("RGB", (40, 20), (255, 255, 255)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def png_file(tmp_path: Path, png_bytes: bytes) -> Path:
    path = tmp_path / "scan.png"
    path.write_bytes(png_bytes)
    return path
