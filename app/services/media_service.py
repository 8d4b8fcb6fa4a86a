"""
Media request helpers: URL / base64 data-URI image downloading.
"""

import os
import base64
import binascii
import logging

import aiohttp
from fastapi import HTTPException

from app.config import settings
from app.integrations import http_client as http_module

logger = logging.getLogger(__name__)

# (substring in MIME type or URL, file suffix); first match wins
SUFFIXES = (
    ("png", ".png"),
    ("jpeg", ".jpg"),
    ("jpg", ".jpg"),
    ("webp", ".webp"),
    ("gif", ".gif"),
    ("tif", ".tiff"),
    ("bmp", ".bmp"),
)

URL_EXTENSIONS = {
    ".png": ".png",
    ".jpg": ".jpg",
    ".jpeg": ".jpg",
    ".webp": ".webp",
    ".gif": ".gif",
    ".tif": ".tiff",
    ".tiff": ".tiff",
    ".bmp": ".bmp",
}


def _suffix_for(mime_type: str, default: str = ".jpg") -> str:
    mime_type = mime_type.lower()
    for needle, suffix in SUFFIXES:
        if needle in mime_type:
            return suffix
    return default


def _suffix_from_url(url: str, default: str = ".jpg") -> str:
    ext = os.path.splitext(url.lower().split("?", 1)[0])[1]
    return URL_EXTENSIONS.get(ext, default)


def _too_large(max_size: int) -> HTTPException:
    return HTTPException(status_code=413, detail=f"Image too large (max {max_size // (1024 * 1024)}MB)")


def decode_data_uri(url: str, max_size: int = settings.max_image_download_bytes) -> tuple[bytes, str]:
    try:
        header, data_str = url.split(",", 1)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid data URI")
    if ";base64" not in header:
        raise HTTPException(status_code=400, detail="Only base64 data URIs are supported")
    try:
        content = base64.b64decode(data_str, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.error(f"Error decoding data URI: {e}")
        raise HTTPException(status_code=400, detail="Invalid data URI")
    if len(content) > max_size:
        raise _too_large(max_size)
    mime_type = header.split(":", 1)[-1].split(";")[0]
    return content, f"pasted_image{_suffix_for(mime_type)}"


async def download_image(url: str, max_size: int = settings.max_image_download_bytes) -> tuple[bytes, str]:
    """Downloads an image from a URL or decodes a base64 data URI."""
    if url.startswith("data:"):
        return decode_data_uri(url, max_size)

    if not url.startswith(("http://", "https://")):
        raise HTTPException(status_code=400, detail="URL must be http(s) or a base64 data URI")

    async with http_module.request_session() as session:
        try:
            async with session.get(url) as response:
                if response.status != 200:
                    raise HTTPException(
                        status_code=400,
                        detail=f"Failed to fetch image from URL: Status {response.status}"
                    )
                content = await response.read()
                if len(content) > max_size:
                    raise _too_large(max_size)

                content_type = response.headers.get("Content-Type", "")
                if not content_type or "application" in content_type or "octet-stream" in content_type:
                    suffix = _suffix_from_url(url)
                else:
                    suffix = _suffix_for(content_type)

                return content, f"downloaded_media{suffix}"
        except aiohttp.ClientError as e:
            raise HTTPException(status_code=400, detail=f"Error fetching image: {str(e)}")
