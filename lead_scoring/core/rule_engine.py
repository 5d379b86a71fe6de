"""
Rule Engine
Deterministic half of the lead score (max 50 points).

    role (0/10/20) + industry (0/10/20) + completeness (0-10)

Pure and synchronous: no I/O, no shared state.
"""
from typing import Optional, Sequence

from lead_scoring.config import ScoringKeywords
from lead_scoring.models.lead import Lead, REQUIRED_LEAD_FIELDS
from lead_scoring.models.offer import OfferFields
from lead_scoring.models.scoring import RuleScoreBreakdown, MAX_RULE_SCORE

DECISION_MAKER_POINTS = 20
INFLUENCER_POINTS = 10
ICP_INDUSTRY_POINTS = 20
ADJACENT_INDUSTRY_POINTS = 10
COMPLETENESS_POINTS = 10


def _contains_any(text: str, keywords: Sequence[str]) -> bool:
    # Substring match, first hit wins
    return any(keyword in text for keyword in keywords)


class RuleEngine:
    """
    Allocates rule-based points for a lead against an offer.

    Usage:
        >>> engine = RuleEngine()
        >>> breakdown = engine.score(lead, offer)
        >>> breakdown.total
        50
    """

    def __init__(self, keywords: Optional[ScoringKeywords] = None):
        self.keywords = keywords or ScoringKeywords()

    def score(self, lead: Lead, offer: Optional[OfferFields]) -> RuleScoreBreakdown:
        role_score = self.role_score(lead.role)
        industry_score = self.industry_score(lead.industry, offer)
        completeness_score = self.completeness_score(lead)

        details = [
            self._describe_role(role_score),
            self._describe_industry(industry_score),
            self._describe_completeness(lead, completeness_score),
        ]

        return RuleScoreBreakdown(
            role_score=role_score,
            industry_score=industry_score,
            completeness_score=completeness_score,
            total=min(role_score + industry_score + completeness_score, MAX_RULE_SCORE),
            details=details,
        )

    def role_score(self, role: Optional[str]) -> int:
        if not role:
            return 0

        role_lower = role.lower()
        if _contains_any(role_lower, self.keywords.decision_maker_roles):
            return DECISION_MAKER_POINTS
        if _contains_any(role_lower, self.keywords.influencer_roles):
            return INFLUENCER_POINTS
        return 0

    def industry_score(self, industry: Optional[str], offer: Optional[OfferFields]) -> int:
        if not industry:
            return 0

        industry_lower = industry.lower()

        if offer is not None and offer.ideal_use_cases:
            use_cases = [use_case.lower() for use_case in offer.ideal_use_cases]
            if _contains_any(industry_lower, use_cases):
                return ICP_INDUSTRY_POINTS

        if _contains_any(industry_lower, self.keywords.icp_industries):
            return ICP_INDUSTRY_POINTS
        if _contains_any(industry_lower, self.keywords.adjacent_industries):
            return ADJACENT_INDUSTRY_POINTS
        return 0

    @staticmethod
    def completeness_score(lead: Lead) -> int:
        present = lead.present_field_count()
        total_fields = len(REQUIRED_LEAD_FIELDS)

        if present == total_fields:
            return COMPLETENESS_POINTS

        # Partial credit is truncated: 5/6 -> 8, 4/6 -> 6
        return present * COMPLETENESS_POINTS // total_fields

    @staticmethod
    def _describe_role(points: int) -> str:
        if points == DECISION_MAKER_POINTS:
            return f"Decision maker role (+{points} points)"
        if points == INFLUENCER_POINTS:
            return f"Influencer role (+{points} points)"
        return "Non-decision maker role (0 points)"

    @staticmethod
    def _describe_industry(points: int) -> str:
        if points == ICP_INDUSTRY_POINTS:
            return f"Perfect industry match (+{points} points)"
        if points == ADJACENT_INDUSTRY_POINTS:
            return f"Adjacent industry match (+{points} points)"
        return "No industry match (0 points)"

    @staticmethod
    def _describe_completeness(lead: Lead, points: int) -> str:
        if points == COMPLETENESS_POINTS:
            return f"All fields complete (+{points} points)"
        missing = len(REQUIRED_LEAD_FIELDS) - lead.present_field_count()
        return f"Missing {missing} fields (-{COMPLETENESS_POINTS - points} points)"
