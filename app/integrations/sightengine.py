"""
SightEngine `genai` model — multi-model AI-generated image classifier.

Public URLs go through GET; inline bytes are uploaded as multipart.
"""

import logging
from typing import Any, Dict, Optional

import aiohttp

from app.config import settings
from app.detection.adapters import BaseDetector
from app.integrations import http_client as http_module
from app.schemas.verification import DetectorKind, DetectorResult, MediaInput

logger = logging.getLogger(__name__)


class SightEngineDetector(BaseDetector):
    kind = DetectorKind.SIGHTENGINE

    def __init__(
        self,
        api_user: Optional[str] = None,
        api_secret: Optional[str] = None,
        endpoint: Optional[str] = None,
    ):
        self.api_user = api_user if api_user is not None else settings.sightengine_api_user
        self.api_secret = api_secret if api_secret is not None else settings.sightengine_api_secret
        self.endpoint = endpoint or settings.sightengine_endpoint

    @property
    def configured(self) -> bool:
        return bool(self.api_user and self.api_secret)

    def parse(self, data: Dict[str, Any]) -> DetectorResult:
        if data.get("status") == "failure":
            message = (data.get("error") or {}).get("message") or "SightEngine API failure"
            return self.unavailable(message)

        kinds = data.get("type") or {}
        raw = kinds.get("ai_generated") or 0.0
        return self.result(
            float(raw) * 100,
            settings.sightengine_confidence,
            {
                "media_type": (data.get("media") or {}).get("type"),
                "raw_score": kinds.get("ai_generated"),
                "photo_score": kinds.get("photo"),
                "illustration_score": kinds.get("illustration"),
            },
        )

    async def _detect(self, media: MediaInput) -> DetectorResult:
        if not self.configured:
            return self.unavailable("API credentials not configured")

        credentials = {"models": "genai", "api_user": self.api_user, "api_secret": self.api_secret}

        async with http_module.request_session() as session:
            if media.url and not media.url.startswith(("blob:", "data:")):
                request = session.get(self.endpoint, params={"url": media.url, **credentials})
            elif media.content:
                form = aiohttp.FormData()
                for key, value in credentials.items():
                    form.add_field(key, value)
                form.add_field("media", media.content, filename="media", content_type=media.mime_type)
                request = session.post(self.endpoint, data=form)
            else:
                return self.unavailable("Valid image URL or image bytes required")

            async with request as response:
                if response.status != 200:
                    logger.warning(f"[SIGHTENGINE] API error: {response.status}")
                    return self.unavailable(f"SightEngine API error: {response.status}")
                data = await response.json(content_type=None)

        result = self.parse(data)
        logger.info(f"[SIGHTENGINE] score={result.score} error={result.error}")
        return result
