"""
Logging for the scoring pipeline.

Console sink with colors for local runs; one JSON object per line when
ENABLE_STRUCTURED_LOGGING is set. The helpers below attach their fields via
logger.bind so they land in the JSON record's "extra".
"""
import sys
from typing import Any, Optional

from loguru import logger

from lead_scoring.config import get_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)


def _sink_options(structured: bool, production: bool) -> dict:
    if structured:
        return {"format": "{message}", "serialize": True}
    # Variable values in tracebacks can include lead data
    return {"format": CONSOLE_FORMAT, "colorize": True, "diagnose": not production}


def configure_logging(level: Optional[str] = None) -> None:
    """Replace loguru's default handler with one configured from settings."""
    settings = get_settings()
    level = level or settings.log_level

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        backtrace=False,
        **_sink_options(settings.enable_structured_logging, settings.environment == "production"),
    )
    logger.debug(
        f"Logging ready ({level}, {'json' if settings.enable_structured_logging else 'console'}, "
        f"env={settings.environment})"
    )


def _emit(level: str, message: str, **fields: Any) -> None:
    logger.bind(**{k: v for k, v in fields.items() if v is not None}).log(level, message)


def log_scoring_event(
    lead_name: str,
    action: str,
    duration_ms: float | None = None,
    **context
):
    """
    One step of the pipeline for one lead.

        log_scoring_event("Ada Lovelace", "score_lead", duration_ms=12.4, final_score=80)
    """
    _emit(
        "INFO",
        f"Scoring | {action} | {lead_name or '(no name)'}",
        lead=lead_name,
        action=action,
        duration_ms=round(duration_ms, 2) if duration_ms is not None else None,
        **context,
    )


def log_llm_call(
    classifier: str,
    model: str,
    duration_ms: float,
    success: bool = True,
    error: str | None = None
):
    outcome = "ok" if success else f"failed ({error})" if error else "failed"
    _emit(
        "INFO" if success else "WARNING",
        f"Classifier {classifier} [{model}] {duration_ms:.0f}ms {outcome}",
        event_type="llm_call",
        classifier=classifier,
        model=model,
        duration_ms=round(duration_ms, 2),
        success=success,
        error=error,
    )


def log_business_event(event_type: str, **details: Any):
    """Offer stored, leads uploaded, results stored."""
    _emit("SUCCESS", f"Event: {event_type}", event_type=event_type, **details)
