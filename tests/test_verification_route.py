"""
Tests for POST /verify and POST /verify/text.

The pipeline is mocked at the route import site for /verify; /verify/text
runs the real text pipeline with blanked credentials (local heuristics only).
"""

import os
from contextlib import ExitStack
from unittest.mock import AsyncMock, patch

from app.detection.pipeline import verify_content
from app.schemas.verification import DetectorResult, ProvenanceResult
from tests.conftest import make_tiny_jpeg

VERIFIED = ProvenanceResult(has_credentials=True, is_valid=True, issuer="Leica Camera AG")
SYNTHETIC_RESPONSE = verify_content(
    ProvenanceResult(),
    [
        DetectorResult.available("vision_council", 91.0, 0.9),
        DetectorResult.available("hive", 88.0, 0.85),
        DetectorResult.unavailable("sightengine", "API credentials not configured"),
    ],
)


def _patches(result=None, side_effect=None, download=None):
    """Return an ExitStack with the pipeline (and optionally the downloader) patched."""
    stack = ExitStack()
    mock_verify = stack.enter_context(
        patch(
            "app.api.verification.verify_media",
            new_callable=AsyncMock,
            return_value=result or SYNTHETIC_RESPONSE,
            side_effect=side_effect,
        )
    )
    mock_download = stack.enter_context(
        patch(
            "app.api.verification.download_image",
            new_callable=AsyncMock,
            return_value=download or (make_tiny_jpeg(), "downloaded_media.jpg"),
        )
    )
    return stack, mock_verify, mock_download


# ---------------------------------------------------------------------------
# /verify: successful cases
# ---------------------------------------------------------------------------


def test_verify_multipart_file_upload(client):
    stack, mock_verify, mock_download = _patches()
    with stack:
        response = client.post("/verify", files={"file": ("photo.jpg", make_tiny_jpeg(), "image/jpeg")})

    assert response.status_code == 200
    data = response.json()
    assert data["verdict"] == "LIKELY_SYNTHETIC"
    assert data["recommendation"].startswith("CAUTION")
    assert data["summary"]["detectors_used"] == 2
    assert data["audit_trail"]["rule"] == "high-score"
    assert len(data["detectors"]) == 3
    assert "verified_at" in data

    mock_download.assert_not_called()
    assert mock_verify.call_args.kwargs["image_url"] is None


def test_verify_json_url(client):
    stack, mock_verify, mock_download = _patches()
    with stack:
        response = client.post("/verify", json={"url": "https://cdn.example.com/photo.jpg"})

    assert response.status_code == 200
    mock_download.assert_awaited_once_with("https://cdn.example.com/photo.jpg")
    assert mock_verify.call_args.kwargs["image_url"] == "https://cdn.example.com/photo.jpg"


def test_verify_data_uri_has_no_public_url(client):
    stack, mock_verify, _ = _patches(download=(make_tiny_jpeg(), "pasted_image.jpg"))
    with stack:
        response = client.post("/verify", json={"url": "data:image/jpeg;base64,AAAA"})

    assert response.status_code == 200
    assert mock_verify.call_args.kwargs["image_url"] is None


def test_verify_form_url(client):
    stack, mock_verify, mock_download = _patches()
    with stack:
        response = client.post("/verify", data={"url": "https://cdn.example.com/a.jpg"})

    assert response.status_code == 200
    mock_download.assert_awaited_once()


def test_verify_provenance_response(client):
    stack, _, _ = _patches(result=verify_content(VERIFIED, []))
    with stack:
        response = client.post("/verify", files={"file": ("signed.jpg", make_tiny_jpeg(), "image/jpeg")})

    data = response.json()
    assert data["verdict"] == "VERIFIED_AUTHENTIC"
    assert data["confidence"] == 1.0
    assert data["factors"]["provenance"]["issuer"] == "Leica Camera AG"
    assert data["summary"]["has_provenance"] is True
    assert data["summary"]["score"] is None


def test_verify_removes_temp_file(client):
    stack, mock_verify, _ = _patches()
    with stack:
        client.post("/verify", files={"file": ("photo.jpg", make_tiny_jpeg(), "image/jpeg")})

    temp_path = mock_verify.call_args.args[0]
    assert temp_path.endswith(".jpg")
    assert not os.path.exists(temp_path)


# ---------------------------------------------------------------------------
# /verify: rejected input
# ---------------------------------------------------------------------------


def test_verify_missing_url_in_json(client):
    response = client.post("/verify", json={"link": "https://cdn.example.com/a.jpg"})
    assert response.status_code == 400


def test_verify_invalid_json(client):
    response = client.post("/verify", content=b"{not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400


def test_verify_empty_form(client):
    response = client.post("/verify", data={"other": "x"})
    assert response.status_code == 400


def test_verify_unsupported_content_type(client):
    response = client.post("/verify", content=b"raw", headers={"Content-Type": "text/plain"})
    assert response.status_code == 415


def test_verify_unsupported_extension(client):
    stack, mock_verify, _ = _patches()
    with stack:
        response = client.post("/verify", files={"file": ("clip.mp4", b"fake", "video/mp4")})

    assert response.status_code == 415
    mock_verify.assert_not_called()


def test_verify_corrupted_image(client):
    stack, mock_verify, _ = _patches()
    with stack:
        response = client.post("/verify", files={"file": ("photo.jpg", b"not an image", "image/jpeg")})

    assert response.status_code == 400
    mock_verify.assert_not_called()


def test_verify_pipeline_crash_is_500(client):
    stack, _, _ = _patches(side_effect=RuntimeError("unexpected"))
    with stack:
        response = client.post("/verify", files={"file": ("photo.jpg", make_tiny_jpeg(), "image/jpeg")})

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal processing error."}
    assert response.headers["access-control-allow-origin"] == "*"


# ---------------------------------------------------------------------------
# /verify/text
# ---------------------------------------------------------------------------


def test_verify_text(client):
    text = (
        "In conclusion, it's important to note that we must delve into the topic. "
        "The weather was fine and we walked along the river until dusk."
    )
    response = client.post("/verify/text", json={"text": text})

    assert response.status_code == 200
    data = response.json()
    assert data["verdict"] == "UNCERTAIN"
    assert data["factors"]["provenance"] is None
    assert {d["source"] for d in data["detectors"]} == {"gptzero", "originality", "text_heuristics"}


def test_verify_text_empty(client):
    response = client.post("/verify/text", json={"text": "   "})
    assert response.status_code == 400


def test_verify_text_too_long(client):
    from app.config import settings

    with patch.object(settings, "max_text_chars", 10):
        response = client.post("/verify/text", json={"text": "x" * 11})
    assert response.status_code == 413


def test_verify_text_missing_field(client):
    response = client.post("/verify/text", json={"content": "hello"})
    assert response.status_code == 422
