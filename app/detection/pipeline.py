"""
Top-level verification pipeline — public entry point for the /verify routes.

`verify_media` orchestrates:
  1. C2PA provenance check (cryptographic proof, instant early exit)
  2. Concurrent fan-out to every configured image detector
  3. Weighted ensemble aggregation → verdict decision

`verify_text` runs the text detectors through the same aggregation and
decision, without provenance. `verify_content` is the synchronous join of
aggregation, decision and the display summary.
"""

import os
import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from app.detection.adapters import BaseDetector, run_detectors
from app.detection.ensemble import TEXT_WEIGHTS, EnsembleAggregator, WeightPolicy
from app.detection.heuristics import load_media
from app.detection.registry import build_image_detectors, build_text_detectors
from app.detection.verdict import VerdictThresholds, decide_verdict
from app.integrations.c2pa import check_provenance
from app.schemas.verification import (
    DetectorResult,
    MediaInput,
    ProvenanceResult,
    VerificationResponse,
    VerificationSummary,
)

logger = logging.getLogger(__name__)


def _round(value: Optional[float]) -> Optional[float]:
    return None if value is None else round(value, 2)


def text_aggregator() -> EnsembleAggregator:
    return EnsembleAggregator(WeightPolicy.from_settings(TEXT_WEIGHTS, primary=None))


def verify_content(
    provenance: Optional[ProvenanceResult],
    detector_results: Sequence[DetectorResult],
    aggregator: Optional[EnsembleAggregator] = None,
    thresholds: Optional[VerdictThresholds] = None,
) -> VerificationResponse:
    aggregator = aggregator or EnsembleAggregator()
    ensemble = aggregator.aggregate(detector_results)
    decision = decide_verdict(ensemble, provenance, thresholds)

    summary = VerificationSummary(
        verdict=decision.verdict,
        score=_round(ensemble.score),
        variance=_round(ensemble.variance),
        confidence=round(decision.confidence, 2),
        has_provenance=bool(provenance and provenance.has_credentials),
        detectors_used=ensemble.available_detector_count,
    )

    return VerificationResponse(
        verdict=decision.verdict,
        confidence=decision.confidence,
        explanation=decision.explanation,
        recommendation=decision.recommendation,
        factors=decision.factors,
        audit_trail=decision.audit_trail,
        summary=summary,
        detectors=list(detector_results),
        verified_at=datetime.now(timezone.utc),
    )


async def verify_media(
    file_path: str,
    image_url: Optional[str] = None,
    detectors: Optional[Sequence[BaseDetector]] = None,
    aggregator: Optional[EnsembleAggregator] = None,
) -> VerificationResponse:
    """
    Provenance → detectors → ensemble → verdict for one image file.

    Args:
        file_path: Path to the media file.
        image_url: Public URL of the same media, for URL-only providers.
        detectors: Overrides the deployment detector set (tests, custom runs).
        aggregator: Overrides the default image weight policy.
    """
    filename = os.path.basename(file_path)
    logger.info(f"[PIPELINE] Verifying {filename}")

    try:
        provenance = await check_provenance(file_path)
    except Exception as e:
        logger.error(f"[PIPELINE] Provenance check failed for {filename}: {e}")
        provenance = ProvenanceResult(error=str(e), metadata={"note": "Provenance check failed"})

    if provenance.is_verified:
        logger.info(f"[PIPELINE] Verified provenance ({provenance.issuer}), skipping detectors")
        return verify_content(provenance, [], aggregator)

    media = await asyncio.to_thread(load_media, file_path, image_url)
    adapters = build_image_detectors() if detectors is None else detectors
    results = await run_detectors(adapters, media)

    return verify_content(provenance, results, aggregator)


async def verify_text(
    text: str,
    detectors: Optional[Sequence[BaseDetector]] = None,
    aggregator: Optional[EnsembleAggregator] = None,
) -> VerificationResponse:
    logger.info(f"[PIPELINE] Verifying text ({len(text)} chars)")
    adapters = build_text_detectors() if detectors is None else detectors
    results = await run_detectors(adapters, MediaInput(text=text))
    return verify_content(None, results, aggregator or text_aggregator())
