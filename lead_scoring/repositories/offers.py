"""
Offer Repository
"""
from typing import Optional

from .base import CurrentRecordRepository
from ..models.offer import Offer, OfferFields
from ..utils.observability import logger


class OfferRepository(CurrentRecordRepository[Offer]):
    """Stored offers; the most recently uploaded one is current."""

    def __init__(self):
        super().__init__("offers")

    async def save_offer(self, fields: OfferFields) -> Offer:
        offer = Offer(**fields.model_dump(include=set(OfferFields.model_fields)))
        await self.set_current(offer)
        logger.info(f"📝 New offer stored: {offer.name} (ID: {offer.id})")
        return offer

    async def get_current_offer(self) -> Optional[Offer]:
        return await self.get_current()
