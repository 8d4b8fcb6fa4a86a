"""
Hosted AI-text detectors: GPTZero and Originality.AI.

Both return a probability in [0, 1] that is scaled to the 0-100 score range.
"""

import logging
from typing import Any, Dict, Optional

from app.config import settings
from app.detection.adapters import NOT_CONFIGURED, BaseDetector
from app.detection.normalization import probability_to_score
from app.integrations import http_client as http_module
from app.schemas.verification import DetectorKind, DetectorResult, MediaInput

logger = logging.getLogger(__name__)


class GPTZeroDetector(BaseDetector):
    kind = DetectorKind.GPTZERO

    def __init__(self, api_key: Optional[str] = None, endpoint: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.gptzero_api_key
        self.endpoint = endpoint or settings.gptzero_endpoint

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def parse(self, data: Dict[str, Any]) -> DetectorResult:
        document = (data.get("documents") or [{}])[0]
        score = probability_to_score(document.get("completely_generated_prob") or 0)
        return self.result(
            score,
            settings.gptzero_confidence,
            {
                "average_generated_prob": probability_to_score(document.get("average_generated_prob")),
                "completely_generated_prob": score,
                "mixed_prob": probability_to_score(document.get("mixed_prob") or 0),
                "sentence_count": len(document.get("sentences") or []),
            },
        )

    async def _detect(self, media: MediaInput) -> DetectorResult:
        if not self.configured:
            return self.unavailable(NOT_CONFIGURED)
        if not media.text:
            return self.unavailable("No text supplied")

        async with http_module.request_session() as session:
            async with session.post(
                self.endpoint,
                headers={"x-api-key": self.api_key},
                json={"document": media.text},
            ) as response:
                if response.status != 200:
                    logger.warning(f"[GPTZERO] API error: {response.status}")
                    return self.unavailable(f"GPTZero API error: {response.status}")
                data = await response.json(content_type=None)

        return self.parse(data)


class OriginalityDetector(BaseDetector):
    kind = DetectorKind.ORIGINALITY

    def __init__(self, api_key: Optional[str] = None, endpoint: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.originality_api_key
        self.endpoint = endpoint or settings.originality_endpoint

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def parse(self, data: Dict[str, Any]) -> DetectorResult:
        scores = data.get("score") or {}
        ai_score = probability_to_score(scores.get("ai") or 0)
        return self.result(
            ai_score,
            settings.originality_confidence,
            {
                "ai_score": ai_score,
                "original_score": probability_to_score(scores.get("original") or 0),
            },
        )

    async def _detect(self, media: MediaInput) -> DetectorResult:
        if not self.configured:
            return self.unavailable(NOT_CONFIGURED)
        if not media.text:
            return self.unavailable("No text supplied")

        async with http_module.request_session() as session:
            async with session.post(
                self.endpoint,
                headers={"X-OAI-API-KEY": self.api_key},
                json={"content": media.text},
            ) as response:
                if response.status != 200:
                    logger.warning(f"[ORIGINALITY] API error: {response.status}")
                    return self.unavailable(f"Originality.AI API error: {response.status}")
                data = await response.json(content_type=None)

        return self.parse(data)
