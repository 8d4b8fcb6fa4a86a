"""
Detector adapter contract and the concurrent fan-out.

Every detection source implements `BaseDetector._detect`. The public
`detect` wraps it so transport and payload errors come back as an
unavailable `DetectorResult` instead of an exception, and `run_detectors`
adds a per-adapter timeout on top and joins all adapters with
`asyncio.gather`.

Cancellation is never swallowed: if the caller abandons the run, every
in-flight adapter is cancelled and no partial result list is returned.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import aiohttp

from app.config import settings
from app.detection.normalization import normalize_detector_output
from app.schemas.verification import DetectorKind, DetectorResult, MediaInput

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "API key not configured"


class BaseDetector(ABC):
    kind: DetectorKind = DetectorKind.OTHER

    @property
    def source(self) -> str:
        return self.kind.value

    @property
    def configured(self) -> bool:
        """False when the provider is missing credentials and will always degrade."""
        return True

    @abstractmethod
    async def _detect(self, media: MediaInput) -> DetectorResult:
        """Provider-specific call. May raise on transport or payload errors."""

    async def detect(self, media: MediaInput) -> DetectorResult:
        try:
            return await self._detect(media)
        except aiohttp.ClientError as e:
            logger.error(f"[{self.source.upper()}] Transport error: {e}")
            return self.unavailable(f"{type(e).__name__}: {e}")
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"[{self.source.upper()}] Unexpected payload: {e}")
            return self.unavailable(f"Unexpected response: {e}")

    def result(self, score: Any, confidence: Any, metadata: Optional[Dict[str, Any]] = None) -> DetectorResult:
        return normalize_detector_output(self.source, score, confidence, metadata)

    def unavailable(self, reason: str) -> DetectorResult:
        return DetectorResult.unavailable(self.source, reason)


async def run_adapter(
    adapter: BaseDetector, media: MediaInput, timeout: Optional[float] = None
) -> DetectorResult:
    """Runs one adapter; any failure or timeout becomes an unavailable result."""
    timeout = settings.detector_timeout_sec if timeout is None else timeout
    try:
        result = await asyncio.wait_for(adapter.detect(media), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"[FANOUT] {adapter.source} timed out after {timeout:.1f}s")
        return DetectorResult.unavailable(adapter.source, f"Timed out after {timeout:.1f}s")
    except Exception as e:
        logger.error(f"[FANOUT] {adapter.source} failed: {e}")
        return DetectorResult.unavailable(adapter.source, str(e) or type(e).__name__)

    if not isinstance(result, DetectorResult):
        logger.error(f"[FANOUT] {adapter.source} returned {type(result).__name__}, expected DetectorResult")
        return DetectorResult.unavailable(adapter.source, "Adapter returned no result")
    return result


async def run_detectors(
    adapters: Sequence[BaseDetector], media: MediaInput, timeout: Optional[float] = None
) -> List[DetectorResult]:
    """Fan out to every adapter at once and wait for all of them to settle."""
    results = await asyncio.gather(*(run_adapter(a, media, timeout) for a in adapters))
    available = sum(1 for r in results if r.is_available)
    logger.info(f"[FANOUT] {available}/{len(results)} detectors produced a score")
    return list(results)
