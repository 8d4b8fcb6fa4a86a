"""
Shared pytest fixtures for all test modules.

IMPORTANT: detector credentials are blanked before the app is imported so no
test can reach a real provider; tests that need a configured detector pass
credentials to the adapter directly or patch `settings`.
"""

import io
import os

for _key in (
    "HIVE_API_KEY",
    "SIGHTENGINE_API_USER",
    "SIGHTENGINE_API_SECRET",
    "ILLUMINARTY_API_KEY",
    "GEMINI_API_KEY",
    "OPENAI_API_KEY",
    "GPTZERO_API_KEY",
    "ORIGINALITY_API_KEY",
):
    os.environ[_key] = ""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app.schemas.verification import DetectorResult

# App import happens AFTER the credentials are blanked above.
from app.main import app  # noqa: E402


# ---------------------------------------------------------------------------
# Core infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client():
    """
    FastAPI TestClient.

    The shared aiohttp session is patched out of the lifespan so no test opens
    a real connection pool.
    """
    with (
        patch("app.integrations.http_client.initialize"),
        patch("app.integrations.http_client.close"),
    ):
        with TestClient(app, raise_server_exceptions=False) as c:
            yield c


# ---------------------------------------------------------------------------
# Shared test-data helpers
# ---------------------------------------------------------------------------


def make_tiny_jpeg(size=(10, 10)) -> bytes:
    """Create a minimal JPEG in memory, fast and valid."""
    buf = io.BytesIO()
    Image.new("RGB", size, color=(128, 128, 128)).save(buf, format="JPEG")
    return buf.getvalue()


@pytest.fixture
def tiny_jpg(tmp_path) -> str:
    """Write a tiny JPEG to a temp file and return the path."""
    p = tmp_path / "test.jpg"
    p.write_bytes(make_tiny_jpeg())
    return str(p)


def scored(source: str, score: float, confidence: float = 0.9, **metadata) -> DetectorResult:
    return DetectorResult.available(source, score, confidence, metadata)


def missing(source: str, reason: str = "API key not configured") -> DetectorResult:
    return DetectorResult.unavailable(source, reason)
