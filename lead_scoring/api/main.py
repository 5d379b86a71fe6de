"""
FastAPI Application

Main entry point for the lead scoring API.
Handles application lifecycle, error mapping and router mounting.
"""
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from lead_scoring.api.models.responses import error_response
from lead_scoring.api.routes import (
    health_router,
    leads_router,
    metrics_router,
    offer_router,
    scoring_router,
)
from lead_scoring.config import get_settings
from lead_scoring.core.scoring_orchestrator import ScoringOrchestrator
from lead_scoring.repositories import ScoringStore
from lead_scoring.utils.observability import configure_logging
from lead_scoring.utils.rate_limiter import InMemoryRateLimiter


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle.

    Startup:
    - Configure logging
    - Create the scoring store and the orchestrator bound to it
      (the intent classifier variant is chosen here, once)
    - Create the per-IP rate limiter for /api routes

    Shutdown:
    - Drop all stored offers, leads and results
    """
    configure_logging()
    logger.info("Starting Lead Scoring API server...")

    store = ScoringStore()
    orchestrator = ScoringOrchestrator(store=store)
    settings = get_settings()
    rate_limiter = InMemoryRateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )

    # Store in app state for access in routes
    app.state.store = store
    app.state.orchestrator = orchestrator
    app.state.rate_limiter = rate_limiter
    app.state.started_at = time.monotonic()

    logger.info(f"API server ready (classifier: {orchestrator.classifier.name})")

    yield

    logger.info("Shutting down API server...")
    await store.clear_all()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Lead Scoring API",
    description="Scores leads against a product offer with rules plus AI intent classification",
    version="1.0.0",
    lifespan=lifespan
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    logger.warning(f"Request validation failed on {request.url.path}: {len(details)} errors")
    return error_response(400, "Validation failed", "Check the request body and retry", details=details)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    if get_settings().environment == "production":
        return error_response(500, "Internal server error")
    return error_response(500, "Internal server error", str(exc), details=type(exc).__name__)


RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


@app.middleware("http")
async def rate_limit_api(request: Request, call_next):
    """Per-client-IP limit on /api routes."""
    rate_limiter = getattr(request.app.state, "rate_limiter", None)
    if rate_limiter is None or not request.url.path.startswith("/api"):
        return await call_next(request)

    client_ip = request.client.host if request.client else "unknown"
    result = await rate_limiter.check_rate_limit(client_ip)
    headers = {
        "RateLimit-Limit": str(rate_limiter.max_requests),
        "RateLimit-Remaining": str(result.remaining),
        "RateLimit-Reset": str(max(int((result.reset_at - datetime.now(timezone.utc)).total_seconds()), 0)),
    }

    if not result.allowed:
        response = error_response(429, "Too many requests", RATE_LIMIT_MESSAGE)
        headers["Retry-After"] = str(result.retry_after)
    else:
        response = await call_next(request)

    response.headers.update(headers)
    return response


def cors_origins() -> list[str]:
    return [origin.strip() for origin in get_settings().cors_origin.split(",") if origin.strip()]


# Added last so it wraps everything, 429 responses included
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Mount routers
app.include_router(health_router)
app.include_router(offer_router)
app.include_router(leads_router)
app.include_router(scoring_router)
app.include_router(metrics_router)


def run() -> None:
    """Serve the API with uvicorn (`lead-scoring-api`)."""
    import uvicorn

    uvicorn.run("lead_scoring.api.main:app", host="0.0.0.0", port=8000)
