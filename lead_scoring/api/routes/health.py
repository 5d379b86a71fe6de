"""
Health Endpoints

Liveness probe and service information.
"""
import time

from fastapi import APIRouter, Depends, Request

from lead_scoring.api.dependencies import get_app_settings, get_orchestrator
from lead_scoring.config import Settings
from lead_scoring.core.scoring_orchestrator import ScoringOrchestrator

router = APIRouter(tags=["Health"])

# API version - single source of truth
API_VERSION = "1.0.0"
SERVICE_NAME = "lead-scoring"


@router.get("/health")
async def health_check(
    request: Request,
    orchestrator: ScoringOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_app_settings),
):
    """
    Basic health check endpoint.

    Returns 200 if service is running, with the active intent classifier.
    """
    started_at = getattr(request.app.state, "started_at", time.monotonic())
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": API_VERSION,
        "environment": settings.environment,
        "uptime_seconds": round(time.monotonic() - started_at, 3),
        "classifier": orchestrator.classifier.get_status(),
    }


@router.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Lead Scoring API",
        "version": API_VERSION,
        "description": "Lead scoring combining rule-based logic with AI intent classification",
        "endpoints": {
            "POST /api/offer": "Accept product/offer details",
            "POST /api/leads/upload": "Upload CSV file with lead data",
            "POST /api/score": "Run scoring pipeline on uploaded leads",
            "GET /api/results": "Retrieve scored leads with reasoning",
            "GET /api/results/export": "Export results as CSV",
            "GET /health": "Health check endpoint",
            "GET /metrics": "Prometheus metrics",
        },
    }
