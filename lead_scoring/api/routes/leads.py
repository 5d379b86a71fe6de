"""
Lead Endpoints

CSV upload, batch summary and clearing of the current leads.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse
from loguru import logger

from lead_scoring.api.dependencies import get_app_settings, get_store
from lead_scoring.api.models.responses import error_response
from lead_scoring.config import Settings
from lead_scoring.repositories import ScoringStore
from lead_scoring.services.lead_import import (
    EmptyLeadFileError,
    LeadImportError,
    parse_leads_csv,
)
from lead_scoring.utils.observability import log_business_event

router = APIRouter(prefix="/api", tags=["Leads"])

CSV_FORMAT_HINT = (
    "Please ensure the CSV file is properly formatted with headers: "
    "name,role,company,industry,location,linkedin_bio"
)


def _is_csv(upload: UploadFile) -> bool:
    filename = (upload.filename or "").lower()
    return filename.endswith(".csv") or upload.content_type == "text/csv"


@router.post("/leads/upload", status_code=201)
async def upload_leads(
    file: Optional[UploadFile] = File(None),
    store: ScoringStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """
    Accept a CSV file with lead data.

    Expected CSV columns: name,role,company,industry,location,linkedin_bio
    Rows missing a column are still stored, flagged invalid and reported.
    """
    if file is None:
        return error_response(400, "No file uploaded", "Please upload a CSV file with lead data")

    if not _is_csv(file):
        return error_response(400, "Only CSV files are allowed", CSV_FORMAT_HINT)

    content = await file.read(settings.max_upload_size_bytes + 1)
    if len(content) > settings.max_upload_size_bytes:
        limit_mb = settings.max_upload_size_bytes // (1024 * 1024)
        return error_response(413, f"File too large. Please upload a file smaller than {limit_mb}MB.")

    logger.info(f"📄 Processing uploaded file: {file.filename}")

    try:
        report = parse_leads_csv(content)
    except EmptyLeadFileError as e:
        return error_response(
            400,
            "No valid lead data found",
            "The CSV file appears to be empty or incorrectly formatted",
            details=str(e) if settings.environment != "production" else None
        )
    except LeadImportError as e:
        return error_response(
            400,
            "Failed to parse CSV file",
            CSV_FORMAT_HINT,
            details=str(e) if settings.environment != "production" else None
        )

    batch = await store.set_leads(report.leads, source_filename=file.filename)
    log_business_event(
        "leads_uploaded",
        batch_id=batch.id,
        total_leads=batch.count,
        invalid_leads=batch.invalid_count,
    )

    if report.validation_errors:
        logger.warning(f"⚠️ Found {len(report.validation_errors)} validation warnings")

    preview_count = settings.validation_error_preview_count
    return JSONResponse(
        status_code=201,
        content={
            "success": True,
            "message": "Leads uploaded and processed successfully",
            "data": {
                "id": batch.id,
                "total_leads": batch.count,
                "valid_leads": batch.valid_count,
                "invalid_leads": batch.invalid_count,
                "uploaded_at": batch.created_at.isoformat(),
            },
            "validation": {
                "errors_count": len(report.validation_errors),
                "errors": [issue.model_dump() for issue in report.validation_errors[:preview_count]],
                "has_more_errors": len(report.validation_errors) > preview_count,
            },
            "meta": {"ready_for_scoring": await store.get_current_offer() is not None},
        }
    )


@router.get("/leads")
async def get_leads(store: ScoringStore = Depends(get_store)):
    """Summary of the current lead batch with a few sample leads."""
    batch = await store.get_current_leads()
    if batch is None:
        return error_response(
            404,
            "No leads data found",
            "Please upload leads using POST /api/leads/upload first"
        )

    return {
        "success": True,
        "data": {
            "id": batch.id,
            "total_leads": batch.count,
            "valid_leads": batch.valid_count,
            "invalid_leads": batch.invalid_count,
            "uploaded_at": batch.created_at.isoformat(),
            "sample_leads": [
                lead.model_dump(include={"name", "role", "company", "industry", "is_valid"})
                for lead in batch.leads[:3]
            ],
        },
        "meta": {"ready_for_scoring": await store.get_current_offer() is not None},
    }


@router.delete("/leads")
async def clear_leads(store: ScoringStore = Depends(get_store)):
    """Clear all stored lead batches."""
    await store.clear_leads()
    logger.info("Leads data cleared")
    return {"success": True, "message": "Leads data cleared successfully"}
