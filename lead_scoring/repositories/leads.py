"""
Lead Batch Repository
"""
from typing import Optional, Sequence

from .base import CurrentRecordRepository
from ..models.lead import Lead, LeadBatch
from ..utils.observability import logger


class LeadBatchRepository(CurrentRecordRepository[LeadBatch]):
    """Uploaded lead batches; the most recent upload is current."""

    def __init__(self):
        super().__init__("lead_batches")

    async def save_leads(self, leads: Sequence[Lead], source_filename: Optional[str] = None) -> LeadBatch:
        batch = LeadBatch(leads=list(leads), source_filename=source_filename)
        await self.set_current(batch)
        logger.info(
            f"Stored {batch.count} leads",
            extra={"batch_id": batch.id, "invalid": batch.invalid_count}
        )
        return batch

    async def get_current_leads(self) -> Optional[LeadBatch]:
        return await self.get_current()
