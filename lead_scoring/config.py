"""
Centralized Configuration System
Environment-aware settings for the scoring pipeline, classifier and API.
"""
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List, Literal, Optional


class ScoringKeywords(BaseModel):
    """
    Keyword tables used by the rule engine.

    Lists are ordered and matched as lower-case substrings.
    Decision-maker keywords are checked before influencer keywords,
    so a role matching both sets scores as a decision maker.
    """
    decision_maker_roles: List[str] = Field(default_factory=lambda: [
        "ceo", "cto", "cfo", "coo", "president", "founder", "owner", "director", "vp",
        "vice president", "head of", "chief", "manager", "lead", "senior manager",
    ])
    influencer_roles: List[str] = Field(default_factory=lambda: [
        "senior", "principal", "architect", "specialist", "analyst", "coordinator",
        "supervisor", "team lead", "project manager", "product manager",
    ])
    icp_industries: List[str] = Field(default_factory=lambda: [
        "saas", "software", "technology", "tech", "fintech", "edtech", "healthcare tech",
        "b2b", "enterprise software", "cloud", "digital", "platform", "api",
    ])
    adjacent_industries: List[str] = Field(default_factory=lambda: [
        "finance", "financial services", "consulting", "marketing", "advertising", "media",
        "e-commerce", "retail", "healthcare", "education", "real estate", "manufacturing",
    ])


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow"
    )
    """
    Loads from environment variables with sensible defaults.
    Without OPENAI_API_KEY the service runs in heuristic-only mode.
    """

    # ============================================
    # AI CLASSIFIER
    # ============================================
    openai_api_key: Optional[str] = None
    classifier_model: str = "openai:gpt-4o-mini"
    classifier_timeout_seconds: float = 20.0

    # ============================================
    # RETRIES & CIRCUIT BREAKER
    # ============================================
    max_retries: int = 2
    retry_min_wait_seconds: int = 1
    retry_max_wait_seconds: int = 5

    circuit_breaker_failure_threshold: int = 5
    circuit_breaker_recovery_timeout: float = 60.0
    circuit_breaker_half_open_max_calls: int = 1

    # ============================================
    # SCORING RULES
    # ============================================
    scoring_concurrency: int = Field(default=1, ge=1)
    scoring_keywords: ScoringKeywords = Field(default_factory=ScoringKeywords)

    # ============================================
    # API LIMITS
    # ============================================
    max_upload_size_bytes: int = 10 * 1024 * 1024
    results_preview_count: int = 3
    error_preview_count: int = 5
    validation_error_preview_count: int = 10

    # Per-client-IP limit on /api routes (sliding window)
    rate_limit_window_seconds: int = 15 * 60
    rate_limit_max_requests: int = 100

    # Allowed origin(s) for CORS, comma-separated; "*" allows any
    cors_origin: str = "*"

    # ============================================
    # LOGGING
    # ============================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    enable_structured_logging: bool = False  # Set to True for production JSON logs

    # ============================================
    # ENVIRONMENT
    # ============================================
    environment: Literal["development", "test", "staging", "production"] = "development"

    @property
    def ai_enabled(self) -> bool:
        """True when a model credential is configured."""
        return bool(self.openai_api_key and self.openai_api_key.strip())


@lru_cache()
def get_settings() -> Settings:
    """
    Singleton pattern for settings.
    Uses LRU cache to ensure only one Settings instance exists.
    """
    return Settings()
