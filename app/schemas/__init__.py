from app.schemas.verification import (
    DecisionAudit,
    DetectorAuditEntry,
    DetectorKind,
    DetectorResult,
    EnsembleAudit,
    EnsembleResult,
    MediaInput,
    ProvenanceResult,
    Verdict,
    VerdictFactors,
    VerdictResult,
    VerificationResponse,
    VerificationSummary,
    VerifyTextRequest,
    VerifyUrlRequest,
)

__all__ = [
    "DecisionAudit",
    "DetectorAuditEntry",
    "DetectorKind",
    "DetectorResult",
    "EnsembleAudit",
    "EnsembleResult",
    "MediaInput",
    "ProvenanceResult",
    "Verdict",
    "VerdictFactors",
    "VerdictResult",
    "VerificationResponse",
    "VerificationSummary",
    "VerifyTextRequest",
    "VerifyUrlRequest",
]
