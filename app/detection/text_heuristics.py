"""
Pattern-based AI-text heuristics (no external API).

Signals: repetitive sentence starters, uniformly "perfect" punctuation,
stock AI phrases, and low variation in sentence length.

Words are split on any run of whitespace, so newlines and repeated spaces never
produce empty words in sentence starters or length counts.
"""

import re
import logging
from typing import List, Tuple

from app.config import settings
from app.detection.adapters import BaseDetector
from app.detection.variance import calculate_variance
from app.schemas.verification import DetectorKind, DetectorResult, MediaInput

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 50
SHORT_TEXT_CONFIDENCE = 0.3

AI_PHRASES = (
    "it's important to note",
    "it's worth noting",
    "in conclusion",
    "to summarize",
    "as an ai",
    "as a language model",
    "delve into",
    "dive into",
    "in today's world",
    "in this day and age",
    "game changer",
    "foster a sense of",
    "navigate the complexities",
)

SENTENCE_SPLIT = re.compile(r"[.!?]+")
SENTENCE_BOUNDARY = re.compile(r"[.!?]\s+[A-Z]")


def score_text(text: str) -> Tuple[int, List[dict], List[str]]:
    """Returns (suspicion score capped at 100, signals, sentences)."""
    signals = []
    sentences = [s.strip() for s in SENTENCE_SPLIT.split(text) if s.strip()]
    if not sentences:
        return 0, signals, sentences

    starters = [" ".join(s.split()[:2]).lower() for s in sentences]
    repetition = 1 - len(set(starters)) / len(starters)
    if repetition > 0.4:
        signals.append({
            "signal": "repetitive_starters",
            "weight": 15,
            "description": f"{repetition * 100:.0f}% repetitive sentence starters",
        })

    boundaries = len(SENTENCE_BOUNDARY.findall(text))
    if boundaries / len(sentences) > 0.9 and len(sentences) > 5:
        signals.append({
            "signal": "perfect_punctuation",
            "weight": 10,
            "description": "Unusually consistent punctuation patterns",
        })

    lowered = text.lower()
    found = [p for p in AI_PHRASES if p in lowered]
    if found:
        signals.append({
            "signal": "ai_phrases_detected",
            "weight": 10 * len(found),
            "description": f"AI-typical phrases found: {', '.join(found)}",
        })

    lengths = [len(s.split()) for s in sentences]
    spread = calculate_variance(lengths)
    if spread < 5 and len(sentences) > 5:
        signals.append({
            "signal": "uniform_sentence_length",
            "weight": 10,
            "description": f"Low sentence length variance (σ={spread:.1f})",
        })

    return min(sum(s["weight"] for s in signals), 100), signals, sentences


class TextHeuristicsDetector(BaseDetector):
    kind = DetectorKind.TEXT_HEURISTICS

    async def _detect(self, media: MediaInput) -> DetectorResult:
        text = media.text or ""
        if len(text) < MIN_TEXT_LENGTH:
            return self.result(
                0, SHORT_TEXT_CONFIDENCE,
                {"signals": [], "note": "Text too short for reliable analysis"},
            )

        score, signals, sentences = score_text(text)
        if not sentences:
            return self.result(
                0, SHORT_TEXT_CONFIDENCE,
                {"signals": [], "note": "No sentences found"},
            )

        average_length = sum(len(s.split()) for s in sentences) / len(sentences)
        return self.result(
            score,
            settings.text_heuristics_confidence,
            {
                "signals": signals,
                "sentence_count": len(sentences),
                "avg_sentence_length": round(average_length, 1),
                "note": "Heuristic analysis based on text patterns",
            },
        )
