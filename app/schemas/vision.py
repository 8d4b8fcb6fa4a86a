from pydantic import BaseModel, Field
from typing import List


class VisionAssessment(BaseModel):
    """Structured output requested from every vision council member."""
    ai_generated_probability: float = Field(0.0, description="0-100 likelihood the image is AI-generated")
    deepfake_probability: float = Field(0.0, description="0-100 likelihood of face swap / deepfake")
    confidence: float = Field(70.0, description="0-100 self-assessed certainty")
    is_deepfake: bool = False
    is_fake_meeting: bool = False
    artifacts_detected: List[str] = Field(default_factory=list)
    deepfake_indicators: List[str] = Field(default_factory=list)
    context_red_flags: List[str] = Field(default_factory=list)
    faces_analyzed: str = ""
    suspected_generator: str = "unknown"
    explanation: str = ""


class CouncilVote(BaseModel):
    """One member's normalized opinion."""
    model: str
    score: float            # max(ai, deepfake), 0-100
    ai_score: float
    deepfake_score: float
    confidence: float       # 0-1
    is_deepfake: bool
    is_fake_meeting: bool
    generator: str
    explanation: str
    artifacts: List[str] = Field(default_factory=list)
    deepfake_indicators: List[str] = Field(default_factory=list)
    context_red_flags: List[str] = Field(default_factory=list)
    faces_analyzed: str = ""

    @classmethod
    def from_assessment(cls, model: str, assessment: VisionAssessment) -> "CouncilVote":
        ai_score = assessment.ai_generated_probability
        deepfake_score = assessment.deepfake_probability
        return cls(
            model=model,
            score=max(ai_score, deepfake_score),
            ai_score=ai_score,
            deepfake_score=deepfake_score,
            confidence=(assessment.confidence or 70.0) / 100.0,
            is_deepfake=assessment.is_deepfake or deepfake_score > 50,
            is_fake_meeting=assessment.is_fake_meeting,
            generator=assessment.suspected_generator or "unknown",
            explanation=assessment.explanation,
            artifacts=assessment.artifacts_detected,
            deepfake_indicators=assessment.deepfake_indicators,
            context_red_flags=assessment.context_red_flags,
            faces_analyzed=assessment.faces_analyzed,
        )
