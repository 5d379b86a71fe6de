"""
API Routes

Modular route definitions for the lead scoring API.
"""
from lead_scoring.api.routes.health import router as health_router
from lead_scoring.api.routes.offer import router as offer_router
from lead_scoring.api.routes.leads import router as leads_router
from lead_scoring.api.routes.scoring import router as scoring_router
from lead_scoring.api.routes.metrics import router as metrics_router

__all__ = [
    "health_router",
    "offer_router",
    "leads_router",
    "scoring_router",
    "metrics_router",
]
