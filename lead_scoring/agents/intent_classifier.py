"""
Intent Classifier
Assigns a buying-intent label (High/Medium/Low) and 10/30/50 points to a lead.

Two variants, chosen once at construction time:
    ModelIntentClassifier      - asks a language model, falls back on any failure
    HeuristicIntentClassifier  - deterministic rules only

Neither ever raises to its caller.
"""
import re
import time
from abc import ABC, abstractmethod
from typing import Optional

from pydantic_ai import Agent
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider
from loguru import logger

from lead_scoring.config import Settings, get_settings
from lead_scoring.models.lead import Lead
from lead_scoring.models.offer import OfferFields
from lead_scoring.models.scoring import IntentLabel, IntentResult, IntentSource, INTENT_POINTS
from lead_scoring.utils.circuit_breaker import CircuitBreaker, get_llm_circuit
from lead_scoring.utils.fallback_responses import get_fallback_intent
from lead_scoring.utils.llm_client import run_agent_with_circuit_breaker
from lead_scoring.utils.metrics import metrics
from lead_scoring.utils.observability import log_llm_call

# Reasoning used when the model omits its Reasoning line
DEFAULT_AI_REASONING = "AI analysis completed"

_INTENT_PATTERN = re.compile(r"intent:\s*(high|medium|low)", re.IGNORECASE)
_REASONING_PREFIX = re.compile(r"reasoning:\s*", re.IGNORECASE)

CLASSIFIER_INSTRUCTIONS = (
    "You are a B2B sales qualification analyst. "
    "Classify a prospect's buying intent for the given offer. "
    "Answer with exactly two lines: 'Intent: <High|Medium|Low>' and 'Reasoning: <text>'."
)


class IntentResponseParseError(ValueError):
    """The model returned nothing usable."""
    pass


def intent_to_points(intent: str) -> int:
    """Map a label to points; anything unrecognized counts as Medium."""
    try:
        return INTENT_POINTS[IntentLabel(intent)]
    except ValueError:
        return INTENT_POINTS[IntentLabel.MEDIUM]


def build_prompt(lead: Lead, offer: Optional[OfferFields]) -> str:
    if offer is not None:
        offer_details = (
            f"Product/Offer: {offer.name}\n"
            f"Value Props: {', '.join(offer.value_props) if offer.value_props else 'Not specified'}\n"
            f"Ideal Use Cases: {', '.join(offer.ideal_use_cases) if offer.ideal_use_cases else 'Not specified'}"
        )
    else:
        offer_details = "No product/offer details provided"

    lead_details = (
        "Prospect Profile:\n"
        f"- Name: {lead.name or 'Not provided'}\n"
        f"- Role: {lead.role or 'Not provided'}\n"
        f"- Company: {lead.company or 'Not provided'}\n"
        f"- Industry: {lead.industry or 'Not provided'}\n"
        f"- Location: {lead.location or 'Not provided'}\n"
        f"- LinkedIn Bio: {lead.linkedin_bio or 'Not provided'}"
    )

    return f"""{offer_details}

{lead_details}

Based on the prospect's profile and the product offering, classify their buying intent as High, Medium, or Low.

Consider:
- Role authority and decision-making power
- Industry fit with the product
- Company stage and likely needs
- Geographic relevance
- Profile completeness and engagement indicators

Respond in this exact format:
Intent: [High/Medium/Low]
Reasoning: [1-2 sentences explaining your classification]

Example response:
Intent: High
Reasoning: VP of Sales at a mid-market SaaS company fits perfectly with the ICP, has decision-making authority, and the AI automation directly addresses sales productivity challenges."""


def parse_intent_response(text: Optional[str]) -> IntentResult:
    """
    Parse the two-line `Intent:` / `Reasoning:` answer.

    A missing or unrecognized intent defaults to Medium; a missing reasoning
    line defaults to DEFAULT_AI_REASONING.

    Raises:
        IntentResponseParseError: If the response is empty
    """
    if not text or not str(text).strip():
        raise IntentResponseParseError("Empty model response")

    intent = IntentLabel.MEDIUM
    reasoning = DEFAULT_AI_REASONING

    for raw_line in str(text).strip().splitlines():
        line = raw_line.strip()
        lowered = line.lower()
        if lowered.startswith("intent:"):
            match = _INTENT_PATTERN.match(line)
            if match:
                intent = IntentLabel(match.group(1).capitalize())
        elif lowered.startswith("reasoning:"):
            reasoning = _REASONING_PREFIX.sub("", line, count=1).strip() or DEFAULT_AI_REASONING

    return IntentResult(
        intent=intent,
        reasoning=reasoning,
        points=intent_to_points(intent),
        source=IntentSource.MODEL,
    )


def build_classifier_agent(settings: Settings) -> Agent[None, str]:
    """PydanticAI agent with plain-text output, keyed from settings rather than the process env."""
    provider, _, model_name = settings.classifier_model.partition(":")
    if provider == "openai" and settings.ai_enabled:
        model = OpenAIChatModel(model_name, provider=OpenAIProvider(api_key=settings.openai_api_key))
    else:
        model = settings.classifier_model
    return Agent(model, output_type=str, instructions=CLASSIFIER_INSTRUCTIONS)


class IntentClassifier(ABC):
    """Common contract: `await classify(lead, offer)` always returns an IntentResult."""

    name: str = "intent_classifier"

    @abstractmethod
    async def classify(self, lead: Optional[Lead], offer: Optional[OfferFields]) -> IntentResult:
        ...

    @abstractmethod
    def get_status(self) -> dict:
        ...


class HeuristicIntentClassifier(IntentClassifier):
    """Rule-of-thumb classification for when no model is configured."""

    name = "heuristic"

    async def classify(self, lead: Optional[Lead], offer: Optional[OfferFields]) -> IntentResult:
        result = get_fallback_intent(lead)
        metrics.classifier_calls.inc(source=result.source.value)
        return result

    def get_status(self) -> dict:
        return {
            "configured": False,
            "provider": "fallback",
            "model": "heuristic-based",
        }


class ModelIntentClassifier(IntentClassifier):
    """
    Classifies intent with a language model through PydanticAI.

    Every failure (timeout, transport, auth, empty answer, open circuit)
    resolves to the heuristic result, tagged `source=fallback`.
    """

    name = "model"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        model_name: Optional[str] = None,
        agent: Optional[Agent] = None,
        circuit: Optional[CircuitBreaker] = None,
    ):
        settings = settings or get_settings()
        self.model_name = model_name or settings.classifier_model

        # Allow dependency injection for testing
        self.agent: Agent[None, str] = agent or build_classifier_agent(settings)
        self.circuit = circuit or get_llm_circuit()
        logger.info(f"ModelIntentClassifier initialized with model: {self.model_name}")

    async def classify(self, lead: Optional[Lead], offer: Optional[OfferFields]) -> IntentResult:
        if lead is None:
            return get_fallback_intent(None)

        prompt = build_prompt(lead, offer)
        start_time = time.perf_counter()
        fallback_used = False

        def fallback() -> IntentResult:
            nonlocal fallback_used
            fallback_used = True
            return get_fallback_intent(lead)

        # The circuit breaker turns every failure into the fallback result
        result = await run_agent_with_circuit_breaker(
            self.agent,
            prompt,
            fallback_factory=fallback,
            circuit=self.circuit,
            on_output=parse_intent_response,
        )

        duration = time.perf_counter() - start_time
        log_llm_call(
            classifier=self.name,
            model=self.model_name,
            duration_ms=duration * 1000,
            success=not fallback_used,
            error="fell back to heuristic" if fallback_used else None,
        )
        metrics.classifier_duration.observe(duration, source=result.source.value)
        metrics.classifier_calls.inc(source=result.source.value)
        if fallback_used:
            metrics.classifier_fallbacks.inc()

        return result

    def get_status(self) -> dict:
        return {
            "configured": True,
            "provider": self.model_name.split(":", 1)[0],
            "model": self.model_name,
            "circuit": self.circuit.get_status(),
        }


def build_intent_classifier(
    settings: Optional[Settings] = None,
    circuit: Optional[CircuitBreaker] = None,
) -> IntentClassifier:
    """
    Pick the classifier variant once, from configuration.

    A configured OPENAI_API_KEY selects the model-backed classifier; a
    failure to construct it (bad model name, missing provider package)
    degrades to the heuristic classifier instead of failing startup.

    Each built classifier owns its circuit unless one is passed in.
    """
    settings = settings or get_settings()

    if not settings.ai_enabled:
        logger.warning("⚠️ No model credential configured - using heuristic intent classification")
        return HeuristicIntentClassifier()

    try:
        return ModelIntentClassifier(settings=settings, circuit=circuit or CircuitBreaker(name="llm"))
    except Exception as e:
        logger.error(f"❌ Could not initialize model classifier, using heuristic: {e}")
        return HeuristicIntentClassifier()

