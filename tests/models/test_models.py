"""
Tests for domain models: offers, leads, scored leads and result sets.
"""
import pytest
from pydantic import ValidationError

from lead_scoring.models.lead import Lead, LeadBatch, validate_lead_fields
from lead_scoring.models.offer import Offer, OfferFields
from lead_scoring.models.result_set import ResultSet
from lead_scoring.models.scoring import (
    IntentLabel,
    IntentResult,
    IntentSource,
    RuleScoreBreakdown,
    ScoreBreakdown,
    ScoreDetails,
    ScoredLead,
)


class TestOfferFields:

    def test_defaults_and_trimming(self):
        offer = OfferFields(name="  AI Outreach  ")

        assert offer.name == "AI Outreach"
        assert offer.value_props == []
        assert offer.ideal_use_cases == []

    def test_null_lists_become_empty(self):
        offer = OfferFields(name="X", value_props=None, ideal_use_cases=None)

        assert offer.value_props == []

    @pytest.mark.parametrize("name", ["", "   ", "x" * 201])
    def test_invalid_name(self, name):
        with pytest.raises(ValidationError):
            OfferFields(name=name)

    def test_blank_list_entries_rejected(self):
        with pytest.raises(ValidationError):
            OfferFields(name="X", value_props=["ok", "  "])

    def test_non_string_entries_rejected(self):
        with pytest.raises(ValidationError):
            OfferFields(name="X", ideal_use_cases=[42])

    def test_stored_offer_is_frozen(self):
        offer = Offer(name="X")

        assert offer.id
        with pytest.raises(ValidationError):
            offer.name = "Y"


class TestLead:

    def test_text_normalization(self):
        lead = Lead(name="  Ada ", role=None, company=42)

        assert lead.name == "Ada"
        assert lead.role == ""
        assert lead.company == "42"

    def test_completeness(self, ceo_lead):
        assert ceo_lead.is_complete is True
        assert ceo_lead.present_field_count() == 6
        assert Lead(name="A").present_field_count() == 1

    def test_validate_lead_fields(self):
        row = {"name": "A", "role": "", "company": "C", "industry": "I", "location": "L"}

        assert validate_lead_fields(row) == ["Missing field: linkedin_bio"]

    def test_batch_counts(self):
        batch = LeadBatch(leads=[Lead(name="A"), Lead(name="B", is_valid=False)])

        assert batch.count == 2
        assert batch.valid_count == 1
        assert batch.invalid_count == 1


class TestScoringModels:

    def test_rule_breakdown_bounds(self):
        with pytest.raises(ValidationError):
            RuleScoreBreakdown(role_score=15, industry_score=0, completeness_score=0, total=15, details=["a", "b", "c"])

        with pytest.raises(ValidationError):
            RuleScoreBreakdown(role_score=20, industry_score=20, completeness_score=10, total=60, details=["a", "b", "c"])

    def test_intent_points_restricted(self):
        with pytest.raises(ValidationError):
            IntentResult(intent=IntentLabel.HIGH, reasoning="x", points=40, source=IntentSource.MODEL)

    def test_scored_lead_from_lead(self, ceo_lead):
        scored = ScoredLead.from_lead(
            ceo_lead,
            intent=IntentLabel.HIGH,
            score=100,
            reasoning="r",
            breakdown=ScoreBreakdown(rule_score=50, ai_score=50, final_score=100),
            details=ScoreDetails(ai_source=IntentSource.FALLBACK),
        )

        assert scored.name == ceo_lead.name
        assert scored.model_dump(mode="json")["details"]["ai_source"] == "fallback"

    def test_score_bounds(self, ceo_lead):
        with pytest.raises(ValidationError):
            ScoredLead.from_lead(
                ceo_lead,
                intent=IntentLabel.HIGH,
                score=101,
                reasoning="r",
                breakdown=ScoreBreakdown(),
                details=ScoreDetails(),
            )

    def test_result_set(self):
        result_set = ResultSet()

        assert result_set.count == 0
        assert result_set.scored_at == result_set.created_at
