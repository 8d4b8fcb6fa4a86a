"""
System routes: health, robots, and the active detector configuration.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from app.detection.ensemble import IMAGE_WEIGHTS, TEXT_WEIGHTS
from app.detection.registry import build_image_detectors, build_text_detectors
from app.detection.verdict import VerdictThresholds

router = APIRouter(tags=["System"])


@router.get("/health")
async def health():
    return {"status": "healthy"}


@router.get("/robots.txt", response_class=PlainTextResponse)
def robots():
    return "User-agent: *\nDisallow: /"


@router.get("/detectors")
async def detectors():
    """Weight tables, verdict thresholds, and which detectors have credentials."""
    return {
        "image": {
            "weights": {k.value: w for k, w in IMAGE_WEIGHTS.items()},
            "configured": {d.source: d.configured for d in build_image_detectors()},
        },
        "text": {
            "weights": {k.value: w for k, w in TEXT_WEIGHTS.items()},
            "configured": {d.source: d.configured for d in build_text_detectors()},
        },
        "thresholds": VerdictThresholds.from_settings().as_dict(),
    }
