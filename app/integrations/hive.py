"""
Hive AI detector — deepfake and AI-generated image classification.

The synchronous task API only accepts public URLs; inline uploads report
the detector as unavailable.
"""

import logging
from typing import Any, Dict, Optional

from app.config import settings
from app.detection.adapters import NOT_CONFIGURED, BaseDetector
from app.integrations import http_client as http_module
from app.schemas.verification import DetectorKind, DetectorResult, MediaInput

logger = logging.getLogger(__name__)

HIVE_MODELS = ["ai_generated_image", "deepfake"]


def _class_score(model_output: Dict[str, Any], class_name: str) -> float:
    for entry in model_output.get("classes") or []:
        if entry.get("class") == class_name:
            return float(entry.get("score") or 0.0)
    return 0.0


class HiveDetector(BaseDetector):
    kind = DetectorKind.HIVE

    def __init__(self, api_key: Optional[str] = None, endpoint: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.hive_api_key
        self.endpoint = endpoint or settings.hive_endpoint

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def parse(self, data: Dict[str, Any]) -> DetectorResult:
        status = (data.get("status") or [{}])[0]
        response = status.get("response") or {}
        ai_generated = response.get("ai_generated_image") or {}
        deepfake = response.get("deepfake") or {}

        ai_score = _class_score(ai_generated, "ai_generated")
        deepfake_score = _class_score(deepfake, "yes_deepfake")

        return self.result(
            max(ai_score, deepfake_score) * 100,
            response.get("confidence") or settings.hive_default_confidence,
            {
                "ai_generated_score": ai_score * 100,
                "deepfake_score": deepfake_score * 100,
                "model": ai_generated.get("model", "unknown"),
            },
        )

    async def _detect(self, media: MediaInput) -> DetectorResult:
        if not self.configured:
            return self.unavailable(NOT_CONFIGURED)
        if not media.url:
            return self.unavailable("Hive requires a public image URL")

        async with http_module.request_session() as session:
            async with session.post(
                self.endpoint,
                headers={"Authorization": f"Token {self.api_key}"},
                json={"url": media.url, "models": HIVE_MODELS},
            ) as response:
                if response.status != 200:
                    logger.warning(f"[HIVE] API error: {response.status}")
                    return self.unavailable(f"Hive API error: {response.status}")
                data = await response.json(content_type=None)

        result = self.parse(data)
        logger.info(f"[HIVE] score={result.score} confidence={result.confidence}")
        return result
