"""
Shared pytest fixtures and configuration for all tests
"""
import base64
import io
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add the project root to the Python path for imports
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))


class FakeEditClient:
    """Stands in for the Gemini client and records every submit call"""

    available = True
    label = "Fake Editor"

    def __init__(self, result=None, error=None, events=None):
        self.result = result
        self.error = error
        self.events = events
        self.calls = []

    async def submit(self, content, media_type, instruction):
        self.calls.append((content, media_type, instruction))
        if self.events is not None:
            self.events.append("submit")
        if self.error is not None:
            raise self.error
        return self.result


def make_image_bytes(fmt="PNG", size=(4, 4), color=(200, 30, 90)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, fmt)
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    """Provide a tiny valid PNG image"""
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes():
    """Provide a tiny valid JPEG image"""
    return make_image_bytes("JPEG")


@pytest.fixture
def png_base64(png_bytes):
    return base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def fake_client():
    """Provide an edit client that returns a fixed base64 body"""
    return FakeEditClient(result="BBBB")


@pytest.fixture
def testing_config():
    from config import TestingConfig
    return TestingConfig


@pytest.fixture
def make_app(testing_config):
    """Build the FastAPI app around a given edit client"""
    from app_factory import create_app

    def _make(edit_client=None, config_class=None):
        return create_app(config_class or testing_config, edit_client=edit_client)

    return _make


@pytest.fixture
def client(make_app, fake_client):
    """Provide FastAPI test client backed by the fake edit client"""
    from fastapi.testclient import TestClient
    return TestClient(make_app(fake_client))
