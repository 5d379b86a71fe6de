"""
Scoring Endpoints

Run the scoring pipeline, read the latest results and export them as CSV.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from loguru import logger

from lead_scoring.api.dependencies import get_app_settings, get_orchestrator, get_store
from lead_scoring.api.models.responses import error_response
from lead_scoring.config import Settings
from lead_scoring.core.scoring_orchestrator import (
    MissingLeadsError,
    MissingOfferError,
    ScoringInProgressError,
    ScoringOrchestrator,
)
from lead_scoring.core.summary import calculate_summary_stats
from lead_scoring.repositories import ScoringStore
from lead_scoring.services.result_export import export_filename, export_results_csv

router = APIRouter(prefix="/api", tags=["Scoring"])


@router.post("/score")
async def run_scoring(
    store: ScoringStore = Depends(get_store),
    orchestrator: ScoringOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_app_settings),
):
    """
    Run the complete scoring pipeline on the uploaded leads.

    Flow:
    1. Check an offer and a lead batch are stored (400 otherwise)
    2. Score every lead, isolating per-lead failures
    3. Store the results as a new result set
    4. Return summary, a short preview and the first few errors

    Returns 409 if a run is already in progress.
    """
    try:
        result_set, run = await orchestrator.run_for_store(store)
    except MissingOfferError as e:
        return error_response(400, str(e), "Please upload an offer using POST /api/offer first")
    except MissingLeadsError as e:
        return error_response(400, str(e), "Please upload leads using POST /api/leads/upload first")
    except ScoringInProgressError as e:
        logger.warning("Rejected scoring request: run already in progress")
        return error_response(409, str(e), "Wait for the current run to finish and retry")

    return {
        "success": True,
        "message": "Lead scoring completed successfully",
        "data": {
            "results_id": result_set.id,
            "total_leads": result_set.count,
            "scored_at": result_set.scored_at.isoformat(),
            "summary": run.summary.model_dump(),
            "preview": [
                lead.model_dump(mode="json")
                for lead in run.results[:settings.results_preview_count]
            ],
        },
        "processing": {
            "errors_count": len(run.errors),
            "errors": [error.model_dump() for error in run.errors[:settings.error_preview_count]],
            "duration_ms": round(run.duration_ms, 1),
        },
        "next_steps": {
            "view_results": "GET /api/results",
            "export_csv": "GET /api/results/export",
        },
    }


@router.get("/results")
async def get_results(store: ScoringStore = Depends(get_store)):
    """Return the latest scored results with their summary."""
    result_set = await store.get_latest_results()
    if result_set is None:
        return error_response(404, "No results available", "Please run scoring using POST /api/score first")

    return {
        "success": True,
        "data": [lead.model_dump(mode="json") for lead in result_set.results],
        "meta": {
            "results_id": result_set.id,
            "total_leads": result_set.count,
            "scored_at": result_set.scored_at.isoformat(),
            "summary": calculate_summary_stats(result_set.results).model_dump(),
        },
    }


@router.get("/results/export")
async def export_results(store: ScoringStore = Depends(get_store)):
    """Export the latest results as a CSV download."""
    result_set = await store.get_latest_results()
    if result_set is None:
        return error_response(
            404,
            "No results available to export",
            "Please run scoring using POST /api/score first"
        )

    filename = export_filename()
    logger.info(f"📋 CSV export created: {filename}")

    return Response(
        content=export_results_csv(result_set.results),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
