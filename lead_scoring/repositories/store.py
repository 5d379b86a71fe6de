"""
Scoring Store
The context object owning offers, lead batches and result sets.

Created once per application (or per test) and passed explicitly to the
orchestrator and the API; nothing here is module-global.
"""
from typing import Optional, Sequence

from .leads import LeadBatchRepository
from .offers import OfferRepository
from .results import ResultSetRepository
from ..models.lead import Lead, LeadBatch
from ..models.offer import Offer, OfferFields
from ..models.result_set import ResultSet
from ..models.scoring import ScoredLead


class ScoringStore:
    def __init__(
        self,
        offers: Optional[OfferRepository] = None,
        lead_batches: Optional[LeadBatchRepository] = None,
        result_sets: Optional[ResultSetRepository] = None,
    ):
        self.offers = offers or OfferRepository()
        self.lead_batches = lead_batches or LeadBatchRepository()
        self.result_sets = result_sets or ResultSetRepository()

    # Offers
    async def set_offer(self, fields: OfferFields) -> Offer:
        return await self.offers.save_offer(fields)

    async def get_current_offer(self) -> Optional[Offer]:
        return await self.offers.get_current_offer()

    async def clear_offers(self) -> None:
        await self.offers.clear()

    # Leads
    async def set_leads(self, leads: Sequence[Lead], source_filename: Optional[str] = None) -> LeadBatch:
        return await self.lead_batches.save_leads(leads, source_filename=source_filename)

    async def get_current_leads(self) -> Optional[LeadBatch]:
        return await self.lead_batches.get_current_leads()

    async def clear_leads(self) -> None:
        await self.lead_batches.clear()

    # Results
    async def store_results(
        self,
        results: Sequence[ScoredLead],
        offer_id: Optional[str] = None,
        lead_batch_id: Optional[str] = None,
    ) -> ResultSet:
        return await self.result_sets.store_results(results, offer_id=offer_id, lead_batch_id=lead_batch_id)

    async def get_latest_results(self) -> Optional[ResultSet]:
        return await self.result_sets.get_latest()

    async def get_results(self, results_id: str) -> Optional[ResultSet]:
        return await self.result_sets.find_by_id(results_id)

    async def clear_results(self) -> None:
        await self.result_sets.clear()

    async def clear_all(self) -> None:
        await self.clear_offers()
        await self.clear_leads()
        await self.clear_results()

    async def get_status(self) -> dict:
        has_offer = self.offers.has_current
        has_leads = self.lead_batches.has_current
        return {
            "offers": await self.offers.count(),
            "lead_batches": await self.lead_batches.count(),
            "result_sets": await self.result_sets.count(),
            "has_current_offer": has_offer,
            "has_current_leads": has_leads,
            "ready": has_offer and has_leads,
        }
