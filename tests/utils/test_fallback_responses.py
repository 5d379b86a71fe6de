"""
Tests for the heuristic fallback classification.
"""
import pytest

from lead_scoring.models.lead import Lead
from lead_scoring.models.scoring import IntentLabel, IntentSource
from lead_scoring.utils.fallback_responses import (
    FALLBACK_PREFIX,
    HIGH_INTENT_REASON,
    INSUFFICIENT_DATA_REASON,
    LOW_INTENT_REASON,
    MEDIUM_INTENT_REASON,
    get_fallback_intent,
    has_core_profile,
    has_decision_maker_role,
    has_tech_industry,
)


class TestIndicators:

    @pytest.mark.parametrize("role,expected", [
        ("CEO", True),
        ("Head of Sales", True),
        ("Engineering Manager", True),
        ("vp growth", True),
        ("Senior Developer", False),
        ("", False),
    ])
    def test_decision_maker(self, role, expected):
        assert has_decision_maker_role(Lead(role=role)) is expected

    @pytest.mark.parametrize("industry,expected", [
        ("SaaS", True),
        ("Fintech", True),
        ("Digital Media", True),
        ("Agriculture", False),
        ("", False),
    ])
    def test_tech_industry(self, industry, expected):
        assert has_tech_industry(Lead(industry=industry)) is expected

    def test_core_profile_ignores_location_and_bio(self):
        assert has_core_profile(Lead(name="A", role="CEO", company="C", industry="SaaS")) is True
        assert has_core_profile(Lead(name="A", role="CEO", industry="SaaS")) is False


class TestGetFallbackIntent:

    def test_high(self, ceo_lead):
        result = get_fallback_intent(ceo_lead)

        assert result.intent == IntentLabel.HIGH
        assert result.points == 50
        assert result.reasoning == FALLBACK_PREFIX + HIGH_INTENT_REASON
        assert result.source == IntentSource.FALLBACK

    def test_high_requires_core_profile(self):
        result = get_fallback_intent(Lead(role="CEO", industry="SaaS"))

        assert result.intent == IntentLabel.MEDIUM

    def test_medium_on_either_indicator(self):
        assert get_fallback_intent(Lead(name="A", role="Director", industry="Retail")).intent == IntentLabel.MEDIUM
        assert get_fallback_intent(Lead(name="A", role="Intern", industry="Software")).reasoning == (
            FALLBACK_PREFIX + MEDIUM_INTENT_REASON
        )

    def test_low(self, junior_lead):
        result = get_fallback_intent(junior_lead)

        assert result.intent == IntentLabel.LOW
        assert result.points == 10
        assert result.reasoning == FALLBACK_PREFIX + LOW_INTENT_REASON

    def test_missing_lead(self):
        result = get_fallback_intent(None)

        assert result.intent == IntentLabel.LOW
        assert result.reasoning == INSUFFICIENT_DATA_REASON
        assert result.source == IntentSource.FALLBACK
