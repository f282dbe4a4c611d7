"""Pytest fixtures for the docgen service.

Settings are injected through the environment before the service modules
import their frozen config.
"""

import io
import os
import tempfile
import zipfile

os.environ.setdefault("DOCGEN_UPLOAD_DIR", tempfile.mkdtemp(prefix="docgen-uploads-"))
os.environ.setdefault("DOCGEN_FAKE_SEED", "1234")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from docgen_service.config import config  # noqa: E402
from docgen_service.main import app  # noqa: E402


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def upload_dir():
    config.upload_dir.mkdir(parents=True, exist_ok=True)
    return config.upload_dir


@pytest.fixture
def default_template_bytes() -> bytes:
    return config.default_template_path.read_bytes()


@pytest.fixture
def make_template(default_template_bytes):
    """Copy the default template with text substitutions in word/document.xml."""

    def _make(replacements: dict[str, str]) -> bytes:
        src = zipfile.ZipFile(io.BytesIO(default_template_bytes))
        out = io.BytesIO()
        with zipfile.ZipFile(out, "w", zipfile.ZIP_DEFLATED) as dst:
            for item in src.infolist():
                data = src.read(item.filename)
                if item.filename == "word/document.xml":
                    text = data.decode("utf-8")
                    for old, new in replacements.items():
                        text = text.replace(old, new)
                    data = text.encode("utf-8")
                dst.writestr(item, data)
        return out.getvalue()

    return _make
