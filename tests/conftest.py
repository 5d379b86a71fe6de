import asyncio

import pytest
from unittest.mock import Mock

import lead_scoring.utils.circuit_breaker as circuit_breaker_module
from lead_scoring.config import get_settings
from lead_scoring.models.lead import Lead
from lead_scoring.models.offer import OfferFields
from lead_scoring.utils.metrics import metrics


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Heuristic mode, no retry waits, fresh settings/metrics/circuit for every test."""
    # An empty variable outranks any OPENAI_API_KEY in a local .env
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("RETRY_MIN_WAIT_SECONDS", "0")
    monkeypatch.setenv("RETRY_MAX_WAIT_SECONDS", "0")
    get_settings.cache_clear()
    metrics.reset()
    circuit_breaker_module._llm_circuit = None

    yield get_settings()

    get_settings.cache_clear()
    circuit_breaker_module._llm_circuit = None


@pytest.fixture
def sample_offer():
    return OfferFields(
        name="AI Outreach Automation",
        value_props=["24/7 outreach", "6x more meetings"],
        ideal_use_cases=["B2B SaaS mid-market"],
    )


@pytest.fixture
def ceo_lead():
    """Decision maker in SaaS with a complete profile."""
    return Lead(
        name="Ava Patel",
        role="CEO",
        company="FlowMetrics",
        industry="SaaS",
        location="San Francisco",
        linkedin_bio="Building analytics tools for growth teams",
    )


@pytest.fixture
def junior_lead():
    """Non-decision maker outside any known industry, complete profile."""
    return Lead(
        name="Sam Lee",
        role="Junior Developer",
        company="FarmCo",
        industry="Agriculture",
        location="Iowa",
        linkedin_bio="Writing my first production services",
    )


class MockAgent:
    """Mock PydanticAI agent returning a fixed text answer or raising."""

    def __init__(self, output="Intent: High\nReasoning: Strong fit.", error=None, delay=0.0):
        self.output = output
        self.error = error
        self.delay = delay
        self.prompts = []

    async def run(self, prompt, deps=None):
        self.prompts.append(prompt)

        if self.delay:
            await asyncio.sleep(self.delay)

        if self.error is not None:
            raise self.error

        result = Mock()
        result.output = self.output
        return result


@pytest.fixture
def mock_agent_factory():
    return MockAgent
