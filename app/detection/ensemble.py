"""
Weighted ensemble aggregation of detector results.

`EnsembleAggregator` combines whichever detectors actually produced a score
into a single 0-100 score, renormalising the weights over that subset so a
missing detector never drags the score toward zero.

When the primary detector reports an extreme score (≥75 or ≤25) with
confidence ≥0.80, it becomes dominant: its weight is fixed at 0.70 and every
other weight is halved. These constants are tunable policy in `WeightPolicy`,
not derived values.

The returned score and variance keep full precision; rounding happens only in
the response summary, after the verdict has been decided.
"""

import logging
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.config import settings
from app.detection.variance import calculate_variance
from app.schemas.verification import (
    DetectorAuditEntry,
    DetectorKind,
    DetectorResult,
    EnsembleAudit,
    EnsembleResult,
)

logger = logging.getLogger(__name__)

WEIGHT_SUM_TOLERANCE = 0.01

# Vision council is the primary signal; the others validate it.
IMAGE_WEIGHTS: Dict[DetectorKind, float] = {
    DetectorKind.VISION_COUNCIL: 0.50,
    DetectorKind.HIVE: 0.20,
    DetectorKind.SIGHTENGINE: 0.15,
    DetectorKind.HEURISTICS: 0.10,
    DetectorKind.ILLUMINARTY: 0.05,
}

TEXT_WEIGHTS: Dict[DetectorKind, float] = {
    DetectorKind.GPTZERO: 1 / 3,
    DetectorKind.ORIGINALITY: 1 / 3,
    DetectorKind.TEXT_HEURISTICS: 1 / 3,
}


class WeightPolicy(BaseModel):
    """Static weight table plus the dominant-signal boost constants."""
    model_config = ConfigDict(frozen=True)

    weights: Dict[DetectorKind, float]
    fallback_weight: float = Field(0.10, ge=0.0, le=1.0)
    primary: Optional[DetectorKind] = DetectorKind.VISION_COUNCIL
    dominant_min_confidence: float = 0.80
    dominant_high_score: float = 75.0
    dominant_low_score: float = 25.0
    dominant_weight: float = 0.70
    secondary_weight_factor: float = 0.5

    @model_validator(mode="after")
    def _check_weights(self) -> "WeightPolicy":
        if DetectorKind.OTHER in self.weights:
            raise ValueError("'other' uses the fallback weight and cannot appear in the table")
        for kind, weight in self.weights.items():
            if not 0.0 <= weight <= 1.0:
                raise ValueError(f"Weight for '{kind.value}' outside [0, 1]: {weight}")
        total = sum(self.weights.values())
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise ValueError(f"Detector weights must sum to 1, got {total:.4f}")
        return self

    @classmethod
    def from_settings(
        cls, weights: Dict[DetectorKind, float], primary: Optional[DetectorKind] = DetectorKind.VISION_COUNCIL
    ) -> "WeightPolicy":
        return cls(
            weights=weights,
            fallback_weight=settings.fallback_weight,
            primary=primary,
            dominant_min_confidence=settings.dominant_min_confidence,
            dominant_high_score=settings.dominant_high_score,
            dominant_low_score=settings.dominant_low_score,
            dominant_weight=settings.dominant_weight,
            secondary_weight_factor=settings.secondary_weight_factor,
        )

    def default_weight(self, kind: DetectorKind) -> float:
        return self.weights.get(kind, self.fallback_weight)

    def is_dominant(self, result: DetectorResult) -> bool:
        """Primary detector, confident, and at a score extreme."""
        if self.primary is None or result.kind != self.primary or not result.is_available:
            return False
        return result.confidence >= self.dominant_min_confidence and (
            result.score >= self.dominant_high_score or result.score <= self.dominant_low_score
        )


class EnsembleAggregator:
    """Pure aggregation over one run's detector results. Holds no per-request state."""

    def __init__(self, policy: Optional[WeightPolicy] = None):
        self.policy = policy or WeightPolicy.from_settings(IMAGE_WEIGHTS)

    def effective_weight(self, result: DetectorResult, dominant: Optional[DetectorResult]) -> float:
        base = self.policy.default_weight(result.kind)
        if dominant is None:
            return base
        if result is dominant:
            return self.policy.dominant_weight
        return base * self.policy.secondary_weight_factor

    def aggregate(self, results: Sequence[DetectorResult]) -> EnsembleResult:
        static_weights = {kind.value: weight for kind, weight in self.policy.weights.items()}
        available = [r for r in results if r.is_available]

        if not available:
            logger.info(f"[ENSEMBLE] No detector results available ({len(results)} attempted)")
            return EnsembleResult(
                score=None,
                variance=None,
                confidence=0.0,
                available_detector_count=0,
                dominant_source_boosted=False,
                audit=EnsembleAudit(
                    weights=static_weights,
                    fallback_weight=self.policy.fallback_weight,
                    note="No detector results available",
                ),
            )

        dominant = next((r for r in available if self.policy.is_dominant(r)), None)

        weighted_sum = 0.0
        total_weight = 0.0
        scores: List[float] = []
        entries: List[DetectorAuditEntry] = []

        for result in available:
            weight = self.effective_weight(result, dominant)
            weighted_sum += result.score * weight
            total_weight += weight
            scores.append(result.score)
            entries.append(
                DetectorAuditEntry(
                    source=result.source,
                    score=result.score,
                    weight=weight,
                    confidence=result.confidence,
                    metadata=result.metadata,
                )
            )

        if total_weight > 0:
            score = weighted_sum / total_weight
            # float rounding must not push a weighted mean past its extremes
            score = min(max(score, min(scores)), max(scores))
        else:
            score = sum(scores) / len(scores)

        variance = calculate_variance(scores)
        confidence = max(0.0, 1.0 - variance / 50.0)

        logger.info(
            f"[ENSEMBLE] score={score:.2f} σ={variance:.2f} confidence={confidence:.2f} "
            f"detectors={len(available)}/{len(results)} boosted={dominant is not None}"
        )
        if dominant is not None:
            logger.info(f"[ENSEMBLE] Dominant signal from {dominant.source} (score={dominant.score:.1f})")

        return EnsembleResult(
            score=score,
            variance=variance,
            confidence=confidence,
            available_detector_count=len(available),
            dominant_source_boosted=dominant is not None,
            audit=EnsembleAudit(
                detectors=entries,
                weights=static_weights,
                fallback_weight=self.policy.fallback_weight,
                weighted_sum=weighted_sum,
                total_weight=total_weight,
            ),
        )


def calculate_ensemble_score(
    results: Sequence[DetectorResult], policy: Optional[WeightPolicy] = None
) -> EnsembleResult:
    return EnsembleAggregator(policy).aggregate(results)
