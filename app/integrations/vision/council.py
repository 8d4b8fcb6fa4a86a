"""
Vision council — the primary image detector.

Every configured vision LLM judges the same image; the council score is the
mean of member scores, and the council's confidence is the mean member
confidence discounted by how much the members disagree (floored at 0.3).
A member that fails only loses its own vote.
"""

import asyncio
import logging
from typing import List

from app.config import settings
from app.detection.adapters import BaseDetector
from app.detection.variance import calculate_variance
from app.integrations.vision.members import ask_gemini, ask_openai
from app.schemas.verification import DetectorKind, DetectorResult, MediaInput
from app.schemas.vision import CouncilVote

logger = logging.getLogger(__name__)

MIN_COUNCIL_CONFIDENCE = 0.3


def _unique(items) -> List[str]:
    return list(dict.fromkeys(items))


class VisionCouncilDetector(BaseDetector):
    kind = DetectorKind.VISION_COUNCIL

    @property
    def configured(self) -> bool:
        return bool(settings.gemini_api_key or settings.openai_api_key)

    def tally(self, votes: List[CouncilVote]) -> DetectorResult:
        scores = [v.score for v in votes]
        average = sum(scores) / len(scores)
        spread = calculate_variance(scores)
        mean_confidence = sum(v.confidence for v in votes) / len(votes)
        confidence = max(MIN_COUNCIL_CONFIDENCE, mean_confidence - spread / 100)

        metadata = {
            "models_used": [v.model for v in votes],
            "model_count": len(votes),
            "variance": round(spread, 2),
            "is_deepfake": any(v.is_deepfake for v in votes),
            "is_fake_meeting": any(v.is_fake_meeting for v in votes),
            "deepfake_score": max(v.deepfake_score for v in votes),
            "artifacts_detected": _unique(a for v in votes for a in v.artifacts),
            "deepfake_indicators": _unique(i for v in votes for i in v.deepfake_indicators),
            "context_red_flags": _unique(f for v in votes for f in v.context_red_flags),
            "faces_analyzed": "; ".join(v.faces_analyzed for v in votes if v.faces_analyzed),
            "council_details": [
                v.model_dump(include={"model", "score", "ai_score", "deepfake_score",
                                      "is_deepfake", "generator", "explanation"})
                for v in votes
            ],
        }
        return self.result(round(average, 2), round(confidence, 2), metadata)

    async def _detect(self, media: MediaInput) -> DetectorResult:
        if not self.configured:
            return self.unavailable("No vision API configured")
        if not media.content:
            return self.unavailable("Vision council requires image bytes")

        outcomes = await asyncio.gather(
            asyncio.to_thread(ask_gemini, media.content, media.mime_type),
            ask_openai(media.content, media.mime_type),
            return_exceptions=True,
        )
        votes = []
        for outcome in outcomes:
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, Exception):
                logger.error(f"[VISION] Council member failed: {outcome!r}")
            elif outcome is not None:
                votes.append(outcome)

        if not votes:
            return self.unavailable("All vision models failed")

        result = self.tally(votes)
        logger.info(
            f"[VISION] Council of {len(votes)}: score={result.score} confidence={result.confidence}"
        )
        return result
