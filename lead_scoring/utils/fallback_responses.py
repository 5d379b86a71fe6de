"""
Fallback Intent Classification

Deterministic heuristic used when no model is configured or the model call
fails. Kept deliberately simple: three booleans, three outcomes.
"""
from typing import Optional

from lead_scoring.models.lead import Lead
from lead_scoring.models.scoring import IntentLabel, IntentResult, IntentSource, INTENT_POINTS

FALLBACK_DECISION_MAKER_KEYWORDS = ("ceo", "cto", "cfo", "director", "vp", "head", "manager")
FALLBACK_TECH_INDUSTRY_KEYWORDS = ("tech", "software", "saas", "digital")

FALLBACK_PREFIX = "Fallback analysis: "
HIGH_INTENT_REASON = "Decision maker in tech industry with complete profile indicates high intent"
MEDIUM_INTENT_REASON = "Some positive indicators but not all criteria met"
LOW_INTENT_REASON = "Limited indicators of buying intent or decision-making authority"
INSUFFICIENT_DATA_REASON = "Insufficient lead data for analysis"


def has_decision_maker_role(lead: Lead) -> bool:
    role = lead.role.lower()
    return bool(role) and any(keyword in role for keyword in FALLBACK_DECISION_MAKER_KEYWORDS)


def has_tech_industry(lead: Lead) -> bool:
    industry = lead.industry.lower()
    return bool(industry) and any(keyword in industry for keyword in FALLBACK_TECH_INDUSTRY_KEYWORDS)


def has_core_profile(lead: Lead) -> bool:
    return all(field.strip() for field in (lead.name, lead.role, lead.company, lead.industry))


def _result(intent: IntentLabel, reasoning: str) -> IntentResult:
    return IntentResult(
        intent=intent,
        reasoning=reasoning,
        points=INTENT_POINTS[intent],
        source=IntentSource.FALLBACK,
    )


def get_fallback_intent(lead: Optional[Lead]) -> IntentResult:
    """
    Heuristic intent for a lead.

    decision maker AND tech industry AND core profile -> High (50)
    decision maker OR tech industry                   -> Medium (30)
    otherwise                                         -> Low (10)
    """
    if lead is None:
        return _result(IntentLabel.LOW, INSUFFICIENT_DATA_REASON)

    decision_maker = has_decision_maker_role(lead)
    tech_industry = has_tech_industry(lead)

    if decision_maker and tech_industry and has_core_profile(lead):
        return _result(IntentLabel.HIGH, FALLBACK_PREFIX + HIGH_INTENT_REASON)
    if decision_maker or tech_industry:
        return _result(IntentLabel.MEDIUM, FALLBACK_PREFIX + MEDIUM_INTENT_REASON)
    return _result(IntentLabel.LOW, FALLBACK_PREFIX + LOW_INTENT_REASON)
