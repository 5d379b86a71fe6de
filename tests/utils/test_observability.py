"""
Tests for the structured logging helpers.
"""
import pytest
from loguru import logger

from lead_scoring.utils.observability import log_business_event, log_llm_call, log_scoring_event


@pytest.fixture
def records():
    captured = []
    handler_id = logger.add(lambda message: captured.append(message.record), level="DEBUG")
    yield captured
    logger.remove(handler_id)


class TestLogHelpers:

    def test_scoring_event_binds_fields(self, records):
        log_scoring_event("Ada Lovelace", "score_lead", duration_ms=12.345, final_score=80)

        record = records[-1]
        assert record["extra"]["lead"] == "Ada Lovelace"
        assert record["extra"]["duration_ms"] == 12.35
        assert record["extra"]["final_score"] == 80
        assert "score_lead" in record["message"]

    def test_scoring_event_omits_missing_duration(self, records):
        log_scoring_event("Ada Lovelace", "score_lead")

        assert "duration_ms" not in records[-1]["extra"]

    def test_failed_llm_call_logs_warning(self, records):
        log_llm_call("intent", "gpt-4o-mini", 250.0, success=False, error="timeout")

        record = records[-1]
        assert record["level"].name == "WARNING"
        assert record["extra"]["error"] == "timeout"
        assert record["extra"]["success"] is False

    def test_business_event(self, records):
        log_business_event("offer_stored", offer_id="abc")

        record = records[-1]
        assert record["level"].name == "SUCCESS"
        assert record["extra"] == {"event_type": "offer_stored", "offer_id": "abc"}
