"""
Scoring Orchestrator
Runs every lead through both scorers and blends the results.

Architecture:
    Lead → Rule Engine (0-50) ┐
                              ├→ min(sum, 100) → final intent → reasoning
    Lead → Intent Classifier (10/30/50) ┘
"""
import asyncio
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from loguru import logger

from lead_scoring.agents.intent_classifier import (
    DEFAULT_AI_REASONING,
    IntentClassifier,
    build_intent_classifier,
)
from lead_scoring.config import get_settings
from lead_scoring.core.rule_engine import RuleEngine
from lead_scoring.core.summary import calculate_summary_stats
from lead_scoring.models.lead import Lead, REQUIRED_LEAD_FIELDS
from lead_scoring.models.offer import OfferFields
from lead_scoring.models.result_set import ResultSet
from lead_scoring.models.scoring import (
    HIGH_INTENT_THRESHOLD,
    MAX_FINAL_SCORE,
    MEDIUM_INTENT_THRESHOLD,
    IntentLabel,
    IntentResult,
    RuleScoreBreakdown,
    ScoreBreakdown,
    ScoreDetails,
    ScoredLead,
    ScoringError,
)
from lead_scoring.models.summary import ScoringSummary
from lead_scoring.repositories import ScoringStore
from lead_scoring.utils.metrics import metrics
from lead_scoring.utils.observability import log_business_event, log_scoring_event


class PreconditionError(Exception):
    """Scoring cannot start: something it needs was never uploaded."""
    pass


class MissingOfferError(PreconditionError):
    pass


class MissingLeadsError(PreconditionError):
    pass


class ScoringInProgressError(Exception):
    """Raised when a run is requested while another one is still writing results."""
    pass


CLOSING_SENTENCES = {
    IntentLabel.HIGH: "High buying intent - strong fit and authority.",
    IntentLabel.MEDIUM: "Medium buying intent - some positive indicators.",
    IntentLabel.LOW: "Low buying intent - limited fit or authority.",
}


def blend_scores(rule_total: int, intent_points: int) -> int:
    return max(0, min(rule_total + intent_points, MAX_FINAL_SCORE))


def determine_final_intent(final_score: int) -> IntentLabel:
    """Thresholds on the blended score only; the classifier's own label is ignored."""
    if final_score >= HIGH_INTENT_THRESHOLD:
        return IntentLabel.HIGH
    if final_score >= MEDIUM_INTENT_THRESHOLD:
        return IntentLabel.MEDIUM
    return IntentLabel.LOW


def build_reasoning(rule: RuleScoreBreakdown, intent: IntentResult, final_score: int) -> str:
    parts = []

    if rule.total > 0:
        parts.append(f"Rule analysis: {rule.total}/50 points")
        if rule.details:
            parts.append(f"({', '.join(rule.details)})")

    if intent.reasoning and intent.reasoning != DEFAULT_AI_REASONING:
        parts.append(f"AI analysis: {intent.reasoning}")

    parts.append(CLOSING_SENTENCES[determine_final_intent(final_score)])

    return " ".join(parts)


def _error_result(lead: Lead, error: Exception) -> ScoredLead:
    # The lead itself may be what broke scoring, so read it defensively
    profile = {name: str(getattr(lead, name, "") or "") for name in REQUIRED_LEAD_FIELDS}
    return ScoredLead(
        **profile,
        intent=IntentLabel.LOW,
        score=0,
        reasoning=f"Error during scoring: {error}",
        breakdown=ScoreBreakdown(),
        details=ScoreDetails(error=True, error_message=str(error)),
    )


@dataclass
class ScoringRun:
    """Everything one pipeline run produced."""
    results: List[ScoredLead]
    errors: List[ScoringError] = field(default_factory=list)
    summary: ScoringSummary = field(default_factory=ScoringSummary)
    duration_ms: float = 0.0


class ScoringOrchestrator:
    """
    Scores a batch of leads against an offer.

    Responsibilities:
    1. Run the rule engine and the intent classifier for each lead
    2. Blend the two halves into a 0-100 score and final intent
    3. Isolate per-lead failures so one bad lead never blocks the batch
    4. Allow only one run at a time

    Usage:
        >>> orchestrator = ScoringOrchestrator(store=ScoringStore())
        >>> result_set, run = await orchestrator.run_for_store()
        >>> run.summary.total_leads
    """

    def __init__(
        self,
        classifier: IntentClassifier | None = None,
        rule_engine: RuleEngine | None = None,
        store: ScoringStore | None = None,
        concurrency: int | None = None,
    ):
        settings = get_settings()

        # Allow dependency injection for testing
        self.classifier = classifier or build_intent_classifier(settings)
        self.rule_engine = rule_engine or RuleEngine(settings.scoring_keywords)
        self.store = store
        self.concurrency = max(1, concurrency or settings.scoring_concurrency)

        self._run_lock = asyncio.Lock()

        logger.info(
            f"Scoring Orchestrator initialized (classifier={self.classifier.name}, "
            f"concurrency={self.concurrency})"
        )

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    async def score_lead(self, lead: Lead, offer: Optional[OfferFields]) -> ScoredLead:
        """
        Score one lead. May raise; run() is where failures are isolated.
        """
        start_time = time.perf_counter()

        rule = self.rule_engine.score(lead, offer)
        intent = await self.classifier.classify(lead, offer)

        final_score = blend_scores(rule.total, intent.points)
        final_intent = determine_final_intent(final_score)

        scored = ScoredLead.from_lead(
            lead,
            intent=final_intent,
            score=final_score,
            reasoning=build_reasoning(rule, intent, final_score),
            breakdown=ScoreBreakdown(
                rule_score=rule.total,
                ai_score=intent.points,
                final_score=final_score,
            ),
            details=ScoreDetails(
                rule_breakdown=rule.details,
                ai_source=intent.source,
                ai_reasoning=intent.reasoning,
            ),
        )

        log_scoring_event(
            lead_name=lead.name,
            action="score_lead",
            duration_ms=(time.perf_counter() - start_time) * 1000,
            rule_score=rule.total,
            ai_score=intent.points,
            ai_source=intent.source.value,
            final_score=final_score,
            intent=final_intent.value,
        )
        return scored

    async def _score_isolated(
        self,
        index: int,
        total: int,
        lead: Lead,
        offer: Optional[OfferFields],
        semaphore: asyncio.Semaphore,
    ) -> Tuple[ScoredLead, Optional[ScoringError]]:
        async with semaphore:
            lead_name = getattr(lead, "name", "") or f"Lead {index + 1}"
            logger.debug(f"Processing lead {index + 1}/{total}: {lead_name}")

            try:
                scored = await self.score_lead(lead, offer)
            except Exception as e:
                logger.error(f"Error scoring lead {lead_name}: {e}")
                metrics.lead_errors.inc()
                return _error_result(lead, e), ScoringError(lead=lead_name, error=str(e))

            metrics.leads_scored.inc(intent=scored.intent.value)
            return scored, None

    async def _run_unlocked(self, leads: Sequence[Lead], offer: Optional[OfferFields]) -> ScoringRun:
        start_time = time.perf_counter()
        total = len(leads)

        logger.info(f"🎯 Starting scoring pipeline for {total} leads...")

        semaphore = asyncio.Semaphore(self.concurrency)
        # gather preserves input order regardless of completion order
        outcomes = await asyncio.gather(*(
            self._score_isolated(index, total, lead, offer, semaphore)
            for index, lead in enumerate(leads)
        ))

        results = [scored for scored, _ in outcomes]
        errors = [error for _, error in outcomes if error is not None]

        duration = time.perf_counter() - start_time
        metrics.scoring_runs.inc()
        metrics.run_duration.observe(duration)

        logger.info(f"✅ Scoring completed for {len(results)} leads ({len(errors)} errors)")

        return ScoringRun(
            results=results,
            errors=errors,
            summary=calculate_summary_stats(results),
            duration_ms=duration * 1000,
        )

    def _check_preconditions(self, leads: Optional[Sequence[Lead]], offer: Optional[OfferFields]) -> None:
        if offer is None:
            raise MissingOfferError("No offer data available")
        if leads is None:
            raise MissingLeadsError("No leads data available")

    async def run(self, leads: Optional[Sequence[Lead]], offer: Optional[OfferFields]) -> ScoringRun:
        """
        Score `leads` against `offer`, in input order.

        Raises:
            MissingOfferError / MissingLeadsError: Before any lead is scored
            ScoringInProgressError: If another run holds the lock
        """
        self._check_preconditions(leads, offer)

        if self._run_lock.locked():
            raise ScoringInProgressError("A scoring run is already in progress")

        async with self._run_lock:
            return await self._run_unlocked(leads, offer)

    async def run_for_store(self, store: ScoringStore | None = None) -> Tuple[ResultSet, ScoringRun]:
        """
        Score the store's current leads against its current offer and store the results.
        """
        store = store or self.store
        if store is None:
            raise ValueError("No store configured for this orchestrator")

        offer = await store.get_current_offer()
        batch = await store.get_current_leads()
        self._check_preconditions(batch.leads if batch is not None else None, offer)

        if self._run_lock.locked():
            raise ScoringInProgressError("A scoring run is already in progress")

        async with self._run_lock:
            run = await self._run_unlocked(batch.leads, offer)
            result_set = await store.store_results(
                run.results,
                offer_id=offer.id,
                lead_batch_id=batch.id,
            )

        log_business_event(
            "results_stored",
            results_id=result_set.id,
            total_leads=result_set.count,
            errors=len(run.errors),
        )
        return result_set, run
