"""
Verdict decision engine.

Provenance first, then a fixed lattice over (ensemble score, σ):

                      σ < 15              15 ≤ σ ≤ 25      σ > 25
    score < 30        LIKELY_AUTHENTIC    UNCERTAIN        INCONCLUSIVE
    30 ≤ score ≤ 70   UNCERTAIN           UNCERTAIN        INCONCLUSIVE
    score > 70        LIKELY_SYNTHETIC    UNCERTAIN        INCONCLUSIVE

Valid C2PA credentials override the lattice entirely; a missing ensemble
score is INCONCLUSIVE with zero confidence. Stateless: one input, one verdict.

Thresholds are applied to the unrounded score and σ. Only the response summary
rounds to two decimals, so a value within 0.005 of a threshold can land on the
other side compared with a decider that rounds first (70.004 is LIKELY_SYNTHETIC
here, UNCERTAIN once rounded to 70.0).
"""

import logging
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, model_validator

from app.config import settings
from app.schemas.verification import (
    DecisionAudit,
    EnsembleResult,
    ProvenanceResult,
    Verdict,
    VerdictFactors,
    VerdictResult,
)

logger = logging.getLogger(__name__)

RULE_PROVENANCE = "provenance-override"
RULE_NO_SIGNAL = "no-signal"
RULE_HIGH_DISAGREEMENT = "high-disagreement"
RULE_LOW_SCORE = "low-score"
RULE_HIGH_SCORE = "high-score"
RULE_AMBIGUOUS = "ambiguous"

RECOMMENDATIONS = {
    RULE_PROVENANCE: "TRUST - Cryptographically verified provenance.",
    RULE_NO_SIGNAL: "MANUAL REVIEW - Automated analysis unavailable.",
    RULE_HIGH_DISAGREEMENT: "MANUAL REVIEW - Detection signals conflict.",
    RULE_LOW_SCORE: "LIKELY SAFE - Low synthetic indicators.",
    RULE_HIGH_SCORE: "CAUTION - Strong synthetic indicators.",
    RULE_AMBIGUOUS: "REVIEW - Ambiguous signals require human judgment.",
}


class VerdictThresholds(BaseModel):
    model_config = ConfigDict(frozen=True)

    authentic_score: float = 30.0
    synthetic_score: float = 70.0
    variance_moderate: float = 15.0
    variance_high: float = 25.0

    @model_validator(mode="after")
    def _check_order(self) -> "VerdictThresholds":
        if self.authentic_score > self.synthetic_score:
            raise ValueError("authentic_score must not exceed synthetic_score")
        if self.variance_moderate > self.variance_high:
            raise ValueError("variance_moderate must not exceed variance_high")
        return self

    @classmethod
    def from_settings(cls) -> "VerdictThresholds":
        return cls(
            authentic_score=settings.authentic_score_threshold,
            synthetic_score=settings.synthetic_score_threshold,
            variance_moderate=settings.variance_moderate,
            variance_high=settings.variance_high,
        )

    def as_dict(self) -> dict:
        return self.model_dump()


Predicate = Callable[[float, float, VerdictThresholds], bool]

# Ordered; each predicate is written out in full so exclusivity can be checked.
SCORE_RULES: List[Tuple[str, Predicate]] = [
    (RULE_HIGH_DISAGREEMENT, lambda s, v, t: v > t.variance_high),
    (RULE_LOW_SCORE, lambda s, v, t: s < t.authentic_score and v < t.variance_moderate),
    (RULE_HIGH_SCORE, lambda s, v, t: s > t.synthetic_score and v < t.variance_moderate),
    (
        RULE_AMBIGUOUS,
        lambda s, v, t: v <= t.variance_high and (
            t.variance_moderate <= v or t.authentic_score <= s <= t.synthetic_score
        ),
    ),
]


def matching_rules(score: float, variance: float, thresholds: Optional[VerdictThresholds] = None) -> List[str]:
    """Every score rule whose predicate holds for (score, σ). Exactly one by construction."""
    thresholds = thresholds or VerdictThresholds.from_settings()
    return [name for name, predicate in SCORE_RULES if predicate(score, variance, thresholds)]


def decide_verdict(
    ensemble: EnsembleResult,
    provenance: Optional[ProvenanceResult] = None,
    thresholds: Optional[VerdictThresholds] = None,
) -> VerdictResult:
    thresholds = thresholds or VerdictThresholds.from_settings()
    factors = VerdictFactors(provenance=provenance, detection=ensemble)
    score, variance = ensemble.score, ensemble.variance
    observed = {"score": score, "variance": variance}

    # 1. Cryptographic provenance trumps every probabilistic signal
    if provenance is not None and provenance.is_verified:
        issuer = provenance.issuer or "trusted issuer"
        explanation = f"Content has valid C2PA credentials from {issuer}."
        if score is not None:
            explanation += (
                f" Detector score ({score:.1f}%, σ={variance:.1f}) retained for transparency only."
            )
        logger.info(f"[VERDICT] {Verdict.VERIFIED_AUTHENTIC.value} via provenance ({issuer})")
        return VerdictResult(
            verdict=Verdict.VERIFIED_AUTHENTIC,
            confidence=1.0,
            explanation=explanation,
            recommendation=RECOMMENDATIONS[RULE_PROVENANCE],
            factors=factors,
            audit_trail=DecisionAudit(
                method="provenance-first",
                rule=RULE_PROVENANCE,
                observed=observed,
            ),
        )

    # 2. Nothing to decide on
    if score is None:
        logger.info(f"[VERDICT] {Verdict.INCONCLUSIVE.value}: no detector results")
        return VerdictResult(
            verdict=Verdict.INCONCLUSIVE,
            confidence=0.0,
            explanation="Automated analysis unavailable. No detection results were produced.",
            recommendation=RECOMMENDATIONS[RULE_NO_SIGNAL],
            factors=factors,
            audit_trail=DecisionAudit(
                method="ensemble-fallback",
                rule=RULE_NO_SIGNAL,
                observed=observed,
            ),
        )

    # 3-6. Lattice over (score, σ); first match wins
    rule = next(name for name, predicate in SCORE_RULES if predicate(score, variance, thresholds))

    if rule == RULE_HIGH_DISAGREEMENT:
        verdict = Verdict.INCONCLUSIVE
        method = "ensemble-variance-check"
        explanation = (
            f"Detectors disagree significantly (σ={variance:.1f}, score {score:.1f}%). "
            f"Cannot determine authenticity."
        )
        compared = {"variance_high": thresholds.variance_high}
    elif rule == RULE_LOW_SCORE:
        verdict = Verdict.LIKELY_AUTHENTIC
        method = "ensemble-threshold"
        explanation = f"Low AI probability ({score:.1f}%) with consistent detection (σ={variance:.1f})."
        compared = {
            "authentic_score": thresholds.authentic_score,
            "variance_moderate": thresholds.variance_moderate,
        }
    elif rule == RULE_HIGH_SCORE:
        verdict = Verdict.LIKELY_SYNTHETIC
        method = "ensemble-threshold"
        explanation = f"High AI probability ({score:.1f}%) with consistent detection (σ={variance:.1f})."
        compared = {
            "synthetic_score": thresholds.synthetic_score,
            "variance_moderate": thresholds.variance_moderate,
        }
    else:
        verdict = Verdict.UNCERTAIN
        method = "ensemble-threshold"
        explanation = f"Moderate AI probability ({score:.1f}%) or variance (σ={variance:.1f})."
        compared = thresholds.as_dict()

    logger.info(f"[VERDICT] {verdict.value} via {rule} (score={score:.1f}, σ={variance:.1f})")

    return VerdictResult(
        verdict=verdict,
        confidence=ensemble.confidence,
        explanation=explanation,
        recommendation=RECOMMENDATIONS[rule],
        factors=factors,
        audit_trail=DecisionAudit(
            method=method,
            rule=rule,
            thresholds=compared,
            observed=observed,
        ),
    )
