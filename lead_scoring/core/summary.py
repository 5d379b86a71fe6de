"""
Summary statistics over a set of scored leads.
"""
import math
from typing import Sequence

from lead_scoring.models.scoring import IntentLabel, ScoredLead
from lead_scoring.models.summary import (
    IntentDistribution,
    IntentPercentages,
    ScoreStats,
    ScoringSummary,
)


def format_percentage(count: int, total: int) -> str:
    """`count/total` as a one-decimal percentage string; 0 of 0 is "0.0%"."""
    if total == 0:
        return "0.0%"
    return f"{count / total * 100:.1f}%"


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def calculate_summary_stats(scored_leads: Sequence[ScoredLead]) -> ScoringSummary:
    """
    Counts, percentages and score stats for a result set.

    An empty sequence yields a well-formed all-zero summary.
    """
    total = len(scored_leads)

    distribution = IntentDistribution(
        high=sum(1 for lead in scored_leads if lead.intent == IntentLabel.HIGH),
        medium=sum(1 for lead in scored_leads if lead.intent == IntentLabel.MEDIUM),
        low=sum(1 for lead in scored_leads if lead.intent == IntentLabel.LOW),
    )

    percentages = IntentPercentages(
        high=format_percentage(distribution.high, total),
        medium=format_percentage(distribution.medium, total),
        low=format_percentage(distribution.low, total),
    )

    if total == 0:
        score_stats = ScoreStats()
    else:
        scores = [lead.score for lead in scored_leads]
        score_stats = ScoreStats(
            average=round_half_up(sum(scores) / total),
            maximum=max(scores),
            minimum=min(scores),
        )

    return ScoringSummary(
        total_leads=total,
        intent_distribution=distribution,
        intent_percentages=percentages,
        score_stats=score_stats,
    )
