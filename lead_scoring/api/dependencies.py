"""
FastAPI Dependencies

Accessors for the per-application objects created in the lifespan.
"""
from fastapi import Request

from lead_scoring.config import Settings, get_settings
from lead_scoring.core.scoring_orchestrator import ScoringOrchestrator
from lead_scoring.repositories import ScoringStore


def get_store(request: Request) -> ScoringStore:
    return request.app.state.store


def get_orchestrator(request: Request) -> ScoringOrchestrator:
    return request.app.state.orchestrator


def get_app_settings() -> Settings:
    return get_settings()
