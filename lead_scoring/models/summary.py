from pydantic import BaseModel


class IntentDistribution(BaseModel):
    high: int = 0
    medium: int = 0
    low: int = 0


class IntentPercentages(BaseModel):
    high: str = "0.0%"
    medium: str = "0.0%"
    low: str = "0.0%"


class ScoreStats(BaseModel):
    average: int = 0
    maximum: int = 0
    minimum: int = 0


class ScoringSummary(BaseModel):
    """Aggregate view over one result set."""
    total_leads: int = 0
    intent_distribution: IntentDistribution = IntentDistribution()
    intent_percentages: IntentPercentages = IntentPercentages()
    score_stats: ScoreStats = ScoreStats()
