from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DetectorKind(str, Enum):
    """Known detection sources. Anything else maps to OTHER."""
    VISION_COUNCIL = "vision_council"
    HIVE = "hive"
    SIGHTENGINE = "sightengine"
    HEURISTICS = "heuristics"
    ILLUMINARTY = "illuminarty"
    GPTZERO = "gptzero"
    ORIGINALITY = "originality"
    TEXT_HEURISTICS = "text_heuristics"
    OTHER = "other"

    @classmethod
    def from_source(cls, source: str) -> "DetectorKind":
        try:
            return cls(source)
        except ValueError:
            return cls.OTHER


class Verdict(str, Enum):
    VERIFIED_AUTHENTIC = "VERIFIED_AUTHENTIC"   # valid C2PA credentials
    LIKELY_AUTHENTIC = "LIKELY_AUTHENTIC"       # low score, low variance
    UNCERTAIN = "UNCERTAIN"                     # mid score or moderate variance
    LIKELY_SYNTHETIC = "LIKELY_SYNTHETIC"       # high score, low variance
    INCONCLUSIVE = "INCONCLUSIVE"               # no signal or detector disagreement


class MediaInput(BaseModel):
    """What a detector adapter gets to look at. Image fields or `text` are set, not both."""
    content: Optional[bytes] = None     # inline image bytes
    mime_type: str = "image/jpeg"
    url: Optional[str] = None           # public URL, required by URL-only providers
    width: Optional[int] = None
    height: Optional[int] = None
    exif: Optional[Dict[str, Any]] = None   # None → no EXIF block at all
    text: Optional[str] = None


class DetectorResult(BaseModel):
    """
    Uniform output of one detection source.

    Exactly one of two states:
      - available:   `score` in [0, 100], `confidence` in [0, 1], no `error`
      - unavailable: `score` is None and `error` says why
    """
    model_config = ConfigDict(frozen=True)

    source: str
    score: Optional[float] = None
    confidence: float = 0.0
    metadata: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None

    @model_validator(mode="after")
    def _check_state(self) -> "DetectorResult":
        if self.score is None:
            if not self.error:
                raise ValueError(f"Unavailable result from '{self.source}' must carry an error")
            return self
        if self.error:
            raise ValueError(f"Result from '{self.source}' has both a score and an error")
        if not 0.0 <= self.score <= 100.0:
            raise ValueError(f"Score {self.score} from '{self.source}' outside [0, 100]")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence {self.confidence} from '{self.source}' outside [0, 1]")
        return self

    @classmethod
    def available(
        cls,
        source: str,
        score: float,
        confidence: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "DetectorResult":
        return cls(source=source, score=score, confidence=confidence, metadata=metadata or {})

    @classmethod
    def unavailable(
        cls, source: str, reason: str, metadata: Optional[Dict[str, Any]] = None
    ) -> "DetectorResult":
        return cls(source=source, score=None, confidence=0.0, error=reason, metadata=metadata or {})

    @property
    def is_available(self) -> bool:
        return self.score is not None

    @property
    def kind(self) -> DetectorKind:
        return DetectorKind.from_source(self.source)


class ProvenanceResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_credentials: bool = False
    is_valid: bool = False      # only meaningful when has_credentials
    issuer: Optional[str] = None
    signed_at: Optional[str] = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_validity(self) -> "ProvenanceResult":
        if self.is_valid and not self.has_credentials:
            raise ValueError("Provenance cannot be valid without credentials")
        return self

    @property
    def is_verified(self) -> bool:
        return self.has_credentials and self.is_valid


class DetectorAuditEntry(BaseModel):
    source: str
    score: float
    weight: float       # effective weight actually applied
    confidence: float
    metadata: Dict[str, Any] = Field(default_factory=dict)


class EnsembleAudit(BaseModel):
    detectors: List[DetectorAuditEntry] = Field(default_factory=list)
    weights: Dict[str, float] = Field(default_factory=dict)    # static table
    fallback_weight: Optional[float] = None
    weighted_sum: float = 0.0
    total_weight: float = 0.0
    note: Optional[str] = None


class EnsembleResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: Optional[float] = Field(None, ge=0.0, le=100.0)
    variance: Optional[float] = Field(None, ge=0.0)   # population std-dev of raw scores
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    available_detector_count: int = Field(0, ge=0)
    dominant_source_boosted: bool = False
    audit: EnsembleAudit = Field(default_factory=EnsembleAudit)

    @model_validator(mode="after")
    def _check_pairing(self) -> "EnsembleResult":
        if (self.score is None) != (self.variance is None):
            raise ValueError("score and variance must both be present or both be None")
        return self


class DecisionAudit(BaseModel):
    method: str         # e.g. "provenance-first", "ensemble-threshold"
    rule: str           # which decision rule fired
    thresholds: Dict[str, float] = Field(default_factory=dict)
    observed: Dict[str, Optional[float]] = Field(default_factory=dict)


class VerdictFactors(BaseModel):
    provenance: Optional[ProvenanceResult] = None
    detection: EnsembleResult


class VerdictResult(BaseModel):
    verdict: Verdict
    confidence: float = Field(ge=0.0, le=1.0)
    explanation: str
    recommendation: str
    factors: VerdictFactors
    audit_trail: DecisionAudit


class VerificationSummary(BaseModel):
    """Flattened, display-oriented projection. Always present."""
    verdict: Verdict
    score: Optional[float] = None
    variance: Optional[float] = None
    confidence: float
    has_provenance: bool = False
    detectors_used: int = 0


class VerificationResponse(VerdictResult):
    summary: VerificationSummary
    detectors: List[DetectorResult] = Field(default_factory=list)
    verified_at: datetime


class VerifyUrlRequest(BaseModel):
    url: str


class VerifyTextRequest(BaseModel):
    text: str
