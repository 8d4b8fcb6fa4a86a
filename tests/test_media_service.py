"""Unit tests for app/services/media_service.py — URL and data-URI image loading."""

import base64
from unittest.mock import patch

import aiohttp
import pytest
from fastapi import HTTPException

from app.services.media_service import decode_data_uri, download_image
from tests.conftest import make_tiny_jpeg
from tests.mocks.http_mock import MockResponse, MockSession

JPEG = make_tiny_jpeg()


def _patched(session: MockSession):
    return patch("app.services.media_service.http_module.request_session", session.patched())


# ---------------------------------------------------------------------------
# Data URIs
# ---------------------------------------------------------------------------


def test_decode_png_data_uri():
    uri = "data:image/png;base64," + base64.b64encode(b"png-bytes").decode()
    content, filename = decode_data_uri(uri)

    assert content == b"png-bytes"
    assert filename == "pasted_image.png"


@pytest.mark.parametrize(
    "uri,status",
    [
        ("data:image/png;base64", 400),
        ("data:image/png,plain", 400),
        ("data:image/png;base64,***", 400),
    ],
)
def test_bad_data_uris(uri, status):
    with pytest.raises(HTTPException) as exc:
        decode_data_uri(uri)
    assert exc.value.status_code == status


def test_oversized_data_uri():
    uri = "data:image/jpeg;base64," + base64.b64encode(b"x" * 2048).decode()
    with pytest.raises(HTTPException) as exc:
        decode_data_uri(uri, max_size=1024)
    assert exc.value.status_code == 413


# ---------------------------------------------------------------------------
# HTTP downloads
# ---------------------------------------------------------------------------


async def test_download_uses_content_type_suffix():
    session = MockSession(MockResponse(200, headers={"Content-Type": "image/webp"}, body=b"webp"))

    with _patched(session):
        content, filename = await download_image("https://cdn.example.com/image")

    assert content == b"webp"
    assert filename == "downloaded_media.webp"


async def test_download_falls_back_to_url_extension():
    session = MockSession(MockResponse(200, headers={"Content-Type": "application/octet-stream"}, body=JPEG))

    with _patched(session):
        _, filename = await download_image("https://cdn.example.com/photo.JPEG?w=200")

    assert filename == "downloaded_media.jpg"


async def test_download_bad_status():
    with _patched(MockSession(MockResponse(404))):
        with pytest.raises(HTTPException) as exc:
            await download_image("https://cdn.example.com/missing.jpg")
    assert exc.value.status_code == 400


async def test_download_too_large():
    session = MockSession(MockResponse(200, headers={"Content-Type": "image/jpeg"}, body=b"x" * 2048))
    with _patched(session):
        with pytest.raises(HTTPException) as exc:
            await download_image("https://cdn.example.com/big.jpg", max_size=1024)
    assert exc.value.status_code == 413


async def test_download_transport_error():
    with _patched(MockSession(error=aiohttp.ClientConnectionError("dns"))):
        with pytest.raises(HTTPException) as exc:
            await download_image("https://nowhere.invalid/a.jpg")
    assert exc.value.status_code == 400


async def test_non_http_scheme_rejected():
    with pytest.raises(HTTPException) as exc:
        await download_image("file:///etc/passwd")
    assert exc.value.status_code == 400
