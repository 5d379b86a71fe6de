from enum import StrEnum
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from lead_scoring.models.lead import Lead


class IntentLabel(StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class IntentSource(StrEnum):
    MODEL = "model"
    FALLBACK = "fallback"


# Fixed mapping from an intent label to the AI half of the score
INTENT_POINTS = {
    IntentLabel.HIGH: 50,
    IntentLabel.MEDIUM: 30,
    IntentLabel.LOW: 10,
}

HIGH_INTENT_THRESHOLD = 70
MEDIUM_INTENT_THRESHOLD = 40
MAX_RULE_SCORE = 50
MAX_FINAL_SCORE = 100


class RuleScoreBreakdown(BaseModel):
    """Deterministic half of the score. The total never exceeds 50."""
    model_config = ConfigDict(frozen=True)

    role_score: Literal[0, 10, 20]
    industry_score: Literal[0, 10, 20]
    completeness_score: int = Field(ge=0, le=10)
    total: int = Field(ge=0, le=MAX_RULE_SCORE)
    details: List[str] = Field(min_length=3, max_length=3)


class IntentResult(BaseModel):
    """The output contract of every intent classifier."""
    model_config = ConfigDict(frozen=True)

    intent: IntentLabel
    reasoning: str
    points: Literal[10, 30, 50]
    source: IntentSource


class ScoreBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_score: int = 0
    ai_score: int = 0
    final_score: int = 0


class ScoreDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_breakdown: List[str] = Field(default_factory=list)
    ai_source: Optional[IntentSource] = None
    ai_reasoning: Optional[str] = None
    error: bool = False
    error_message: Optional[str] = None


class ScoredLead(BaseModel):
    """
    A lead with its blended score.
    Created once per scoring run and never mutated; a rerun builds new records.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    role: str
    company: str
    industry: str
    location: str
    linkedin_bio: str

    intent: IntentLabel
    score: int = Field(ge=0, le=MAX_FINAL_SCORE)
    reasoning: str
    breakdown: ScoreBreakdown
    details: ScoreDetails

    @classmethod
    def from_lead(cls, lead: Lead, **scoring) -> "ScoredLead":
        return cls(
            name=lead.name,
            role=lead.role,
            company=lead.company,
            industry=lead.industry,
            location=lead.location,
            linkedin_bio=lead.linkedin_bio,
            **scoring,
        )


class ScoringError(BaseModel):
    """A lead that could not be scored."""
    lead: str
    error: str
