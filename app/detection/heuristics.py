"""
Metadata heuristics for AI vs. camera-origin images (no external API).

Functions:
  - get_exif_data: Extracts EXIF/PIL metadata from an image file.
  - load_media: Builds the MediaInput every image detector receives.
  - score_image_metadata: Sums suspicion signals from EXIF + dimensions.

`ImageHeuristicsDetector` wraps the scorer as an ensemble member. EXIF is
not cryptographically protected, so its self-reported confidence stays low.
"""

import os
import logging
from typing import Any, Dict, List, Optional, Tuple

from PIL import Image
from PIL.ExifTags import TAGS

from app.config import settings
from app.detection.adapters import BaseDetector
from app.schemas.verification import DetectorKind, DetectorResult, MediaInput

logger = logging.getLogger(__name__)

# Output sizes common to Stable Diffusion, DALL-E and Midjourney
AI_DIMENSIONS = {
    (512, 512), (768, 768), (1024, 1024), (1024, 1792), (1792, 1024),
    (512, 768), (768, 512), (1024, 768), (768, 1024),
}

AI_SOFTWARE = ("stable diffusion", "midjourney", "dall-e", "dall·e", "firefly", "novelai",
               "automatic1111", "comfyui")

MAX_SCORE = 100


def get_exif_data(file_path: str) -> dict:
    """
    Extract metadata from the image (EXIF for JPEG/TIFF, text chunks for PNG/WebP).
    Container fields in img.info (jfif, dpi, gamma, icc_profile) are not metadata
    and are left out, so an image with no EXIF and no text chunks yields {}.
    Explicitly closed via 'with'.
    """
    try:
        with Image.open(file_path) as img:
            metadata = {}

            exif = img.getexif()
            for tag, value in exif.items():
                metadata[TAGS.get(tag, tag)] = value
            gps = exif.get_ifd(0x8825)
            if gps:
                metadata["GPSLatitude"] = gps.get(2)
                metadata["GPSLongitude"] = gps.get(4)

            if hasattr(img, 'info') and img.info:
                for key, value in img.info.items():
                    if isinstance(key, str) and isinstance(value, str):
                        if key not in metadata:
                            metadata[key] = value

            return metadata
    except Exception as e:
        logger.warning(f"[META] EXIF extraction failed: {e}")
        return {}


def load_media(file_path: str, image_url: Optional[str] = None) -> MediaInput:
    """Reads bytes, dimensions and EXIF once; shared by every image detector."""
    with open(file_path, "rb") as f:
        content = f.read()

    width = height = None
    mime_type = "image/jpeg"
    try:
        with Image.open(file_path) as img:
            width, height = img.size
            mime_type = Image.MIME.get(img.format, mime_type)
    except Exception as e:
        logger.warning(f"[META] Could not open {os.path.basename(file_path)} as an image: {e}")

    exif = get_exif_data(file_path)
    return MediaInput(
        content=content,
        mime_type=mime_type,
        url=image_url,
        width=width,
        height=height,
        exif=exif or None,
    )


def score_image_metadata(
    exif: Optional[Dict[str, Any]], width: Optional[int], height: Optional[int]
) -> Tuple[int, List[dict]]:
    """Returns (suspicion score capped at 100, signals)."""
    signals = []

    def flag(name: str, weight: int, description: str) -> None:
        signals.append({"signal": name, "weight": weight, "description": description})

    if not exif:
        flag("missing_exif", 15, "No EXIF metadata (common in AI-generated images)")
    else:
        if not exif.get("Make") and not exif.get("Model"):
            flag("no_camera_info", 10, "No camera manufacturer/model info")
        if not exif.get("GPSLatitude"):
            flag("no_gps", 5, "No GPS coordinates (inconclusive)")

    if width and height and (width, height) in AI_DIMENSIONS:
        flag("ai_typical_dimensions", 20, f"Dimensions {width}x{height} common in AI generators")

    software = str((exif or {}).get("Software") or "").lower()
    if any(name in software for name in AI_SOFTWARE):
        flag("ai_software_detected", 50, f"AI generation software detected: {exif['Software']}")

    score = min(sum(s["weight"] for s in signals), MAX_SCORE)
    return score, signals


class ImageHeuristicsDetector(BaseDetector):
    kind = DetectorKind.HEURISTICS

    async def _detect(self, media: MediaInput) -> DetectorResult:
        score, signals = score_image_metadata(media.exif, media.width, media.height)
        if signals:
            logger.info(f"[META] Heuristic signals: {[s['signal'] for s in signals]}")
        return self.result(
            score,
            settings.heuristics_confidence,
            {
                "signals": signals,
                "total_signals": len(signals),
                "max_possible_score": MAX_SCORE,
                "note": "Heuristic analysis based on metadata patterns",
            },
        )
