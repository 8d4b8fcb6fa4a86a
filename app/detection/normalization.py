"""
Turns raw provider numbers into `DetectorResult` records.

Adapters never build an available result from untrusted numbers directly:
they pass them through `normalize_detector_output`, which rejects scores
that are non-numeric, non-finite, or outside [0, 100] (the result becomes
unavailable) and clamps confidences into [0, 1].
"""

import math
import logging
from typing import Any, Dict, Optional

from app.schemas.verification import DetectorResult

logger = logging.getLogger(__name__)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def probability_to_score(probability: Any) -> Optional[float]:
    """Provider probability in [0, 1] → 0-100 score. Malformed input → None."""
    number = _as_number(probability)
    if number is None:
        return None
    return number * 100.0


def normalize_detector_output(
    source: str,
    score: Any,
    confidence: Any,
    metadata: Optional[Dict[str, Any]] = None,
) -> DetectorResult:
    metadata = metadata or {}

    value = _as_number(score)
    if value is None:
        logger.warning(f"[NORMALIZE] {source}: non-numeric score {score!r}, treating as unavailable")
        return DetectorResult.unavailable(source, f"Malformed score: {score!r}", metadata)

    if not 0.0 <= value <= 100.0:
        logger.warning(f"[NORMALIZE] {source}: score {value} outside [0, 100], treating as unavailable")
        return DetectorResult.unavailable(source, f"Malformed score: {value} outside [0, 100]", metadata)

    conf = _as_number(confidence)
    if conf is None:
        logger.warning(f"[NORMALIZE] {source}: non-numeric confidence {confidence!r}, treating as unavailable")
        return DetectorResult.unavailable(source, f"Malformed confidence: {confidence!r}", metadata)

    return DetectorResult.available(source, value, min(1.0, max(0.0, conf)), metadata)
