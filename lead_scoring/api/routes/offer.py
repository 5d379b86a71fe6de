"""
Offer Endpoints

Store, read and clear the product/offer leads are scored against.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger

from lead_scoring.api.dependencies import get_store
from lead_scoring.api.models.responses import error_response
from lead_scoring.models.offer import Offer, OfferFields
from lead_scoring.repositories import ScoringStore
from lead_scoring.utils.observability import log_business_event

router = APIRouter(prefix="/api", tags=["Offer"])


def offer_payload(offer: Offer) -> dict:
    return offer.model_dump(mode="json", include={"id", "name", "value_props", "ideal_use_cases", "created_at"})


@router.post("/offer", status_code=201)
async def create_offer(offer_fields: OfferFields, store: ScoringStore = Depends(get_store)):
    """
    Accept JSON with product/offer details.

    Example payload:
        {
            "name": "AI Outreach Automation",
            "value_props": ["24/7 outreach", "6x more meetings"],
            "ideal_use_cases": ["B2B SaaS mid-market"]
        }
    """
    offer = await store.set_offer(offer_fields)
    log_business_event("offer_stored", offer_id=offer.id, offer_name=offer.name)

    return JSONResponse(
        status_code=201,
        content={
            "success": True,
            "message": "Offer data stored successfully",
            "data": offer_payload(offer),
            "meta": {"ready_for_scoring": await store.get_current_leads() is not None},
        }
    )


@router.get("/offer")
async def get_offer(store: ScoringStore = Depends(get_store)):
    """Retrieve the current offer."""
    offer = await store.get_current_offer()
    if offer is None:
        return error_response(
            404,
            "No offer data found",
            "Please upload an offer using POST /api/offer first"
        )

    return {
        "success": True,
        "data": offer_payload(offer),
        "meta": {"ready_for_scoring": await store.get_current_leads() is not None},
    }


@router.delete("/offer")
async def clear_offer(store: ScoringStore = Depends(get_store)):
    """Clear all stored offers."""
    await store.clear_offers()
    logger.info("Offer data cleared")
    return {"success": True, "message": "Offer data cleared successfully"}
