"""
Verification routes: /verify and /verify/text

/verify accepts multipart/form-data (or a urlencoded form) with a 'file' or 'url' field,
or a JSON payload { "url": "https://..." } (data URIs allowed).

/verify/text accepts JSON { "text": "..." }.

Both always answer 200 with a verdict once the input is accepted; detector
outages show up as lower-confidence verdicts, never as errors.
"""

import json
import logging
import os
import tempfile
import time
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import ValidationError

from app.config import settings
from app.core.file_validator import sanitize_log_message, validate_file
from app.detection.pipeline import verify_media, verify_text
from app.schemas.verification import VerificationResponse, VerifyTextRequest, VerifyUrlRequest
from app.services.media_service import download_image

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Verification"])


def _public_url(url: str) -> Optional[str]:
    return url if url.startswith(("http://", "https://")) else None


async def _read_media(request: Request) -> tuple[bytes, str, Optional[str]]:
    """Returns (content, filename, public_url) from a JSON or multipart request."""
    content_type = request.headers.get("content-type", "")

    if "application/json" in content_type:
        try:
            payload = await request.json()
        except json.JSONDecodeError:
            raise HTTPException(status_code=400, detail="Invalid JSON body")
        try:
            url = VerifyUrlRequest.model_validate(payload).url
        except ValidationError:
            raise HTTPException(status_code=400, detail="Missing 'url' in JSON body")
        content, filename = await download_image(url)
        return content, filename, _public_url(url)

    if "multipart/form-data" in content_type or "application/x-www-form-urlencoded" in content_type:
        form = await request.form()
        file_obj = form.get("file")
        url_obj = form.get("url")

        if file_obj is not None and not isinstance(file_obj, str):
            content = await file_obj.read()
            return content, file_obj.filename or "uploaded_file.jpg", None
        if isinstance(url_obj, str) and url_obj:
            content, filename = await download_image(url_obj)
            return content, filename, _public_url(url_obj)
        raise HTTPException(status_code=400, detail="Must provide 'file' or 'url' in form data")

    raise HTTPException(
        status_code=415,
        detail="Unsupported Media Type. Use multipart/form-data or application/json"
    )


@router.post("/verify", response_model=VerificationResponse)
async def verify(request: Request):
    """
    Verify whether an image is authentic or AI-generated.
    """
    file_content, filename, public_url = await _read_media(request)
    suffix = os.path.splitext(filename)[1].lower() or ".jpg"

    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp_file:
        tmp_file.write(file_content)
        temp_path = tmp_file.name

    try:
        validate_file(filename, len(file_content), temp_path)

        start_time = time.time()
        try:
            result = await verify_media(temp_path, image_url=public_url)
        except Exception as e:
            logger.error(sanitize_log_message(f"[ROUTE] Error verifying {temp_path}: {e}"))
            raise HTTPException(status_code=500, detail="Internal processing error.")

        logger.info(
            f"[ROUTE] {filename}: {result.verdict.value} "
            f"(confidence={result.confidence:.2f}) in {time.time() - start_time:.2f}s"
        )
        return result

    finally:
        if os.path.exists(temp_path):
            os.remove(temp_path)


@router.post("/verify/text", response_model=VerificationResponse)
async def verify_text_route(body: VerifyTextRequest):
    """
    Verify whether a passage of text is human-written or AI-generated.
    """
    text = body.text.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Text must not be empty")
    if len(text) > settings.max_text_chars:
        raise HTTPException(
            status_code=413,
            detail=f"Text too long. Max {settings.max_text_chars} characters allowed."
        )

    result = await verify_text(text)
    logger.info(f"[ROUTE] text ({len(text)} chars): {result.verdict.value}")
    return result
