"""Illuminarty detector. API access requires a partnership, so it always degrades."""

from typing import Optional

from app.config import settings
from app.detection.adapters import BaseDetector
from app.schemas.verification import DetectorKind, DetectorResult, MediaInput


class IlluminartyDetector(BaseDetector):
    kind = DetectorKind.ILLUMINARTY

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.illuminarty_api_key

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def _detect(self, media: MediaInput) -> DetectorResult:
        if not self.configured:
            return self.unavailable("API key not configured (requires partnership)")
        # TODO: call the scoring endpoint once partnership docs are available
        return self.unavailable("Integration pending")
