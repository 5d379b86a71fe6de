"""
Metrics Endpoint

Prometheus-compatible metrics for observability.
"""
from fastapi import APIRouter
from fastapi.responses import Response
from loguru import logger

from lead_scoring.utils.metrics import metrics

router = APIRouter(tags=["Metrics"])


@router.get("/metrics")
async def prometheus_metrics():
    """
    Prometheus metrics endpoint.

    Includes:
    - Scoring runs and their duration
    - Leads scored by final intent, and per-lead errors
    - Classifier calls by source, fallbacks and call duration

    Content-Type: text/plain; version=0.0.4; charset=utf-8
    """
    try:
        return Response(
            content=metrics.export(),
            media_type="text/plain; version=0.0.4; charset=utf-8"
        )

    except Exception as e:
        logger.error(f"Failed to export metrics: {e}")
        return Response(
            content=f"# Error exporting metrics: {e}\n",
            media_type="text/plain",
            status_code=500
        )
