"""
File validation and log sanitization utilities.

Sets PIL.Image.MAX_IMAGE_PIXELS to prevent decompression-bomb attacks.
"""

import os
import re
import logging

from fastapi import HTTPException
from PIL import Image

from app.config import settings

Image.MAX_IMAGE_PIXELS = settings.pil_max_image_pixels

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ['.jpg', '.jpeg', '.png', '.webp', '.gif', '.tiff', '.tif', '.bmp']
IMAGE_FORMATS = ['jpg', 'png', 'webp', 'gif', 'tiff', 'bmp', 'mpo']


def validate_file(filename: str, filesize: int, file_path: str = None) -> bool:
    """Check file extension, size, and content integrity using magic bytes."""
    ext = os.path.splitext(filename)[1].lower()

    if ext not in IMAGE_EXTENSIONS:
        raise HTTPException(status_code=415, detail="Unsupported file format.")

    if filesize > settings.max_image_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Image too large. Max {settings.max_image_upload_bytes // 1024 // 1024}MB allowed."
        )

    if file_path:
        try:
            with Image.open(file_path) as img:
                img.verify()
            with Image.open(file_path) as img:
                actual_format = (img.format or "").lower()
            if actual_format == 'jpeg':
                actual_format = 'jpg'
            if actual_format not in IMAGE_FORMATS:
                raise ValueError(f"Format mismatch: {actual_format}")
        except Exception as e:
            logger.error(f"Malicious or corrupted file detected ({filename}): {e}")
            raise HTTPException(status_code=400, detail="Invalid file content or format mismatch.")

    return True


def sanitize_log_message(message: str) -> str:
    """Strip sensitive file paths from log messages."""
    msg = re.sub(r'\/[^\s]+\/tmp[a-zA-Z0-9_]+', '[TEMP_FILE]', message)
    msg = re.sub(r'\/[^\s]+\/([^\/\s]+)', r'.../\1', msg)
    return msg
