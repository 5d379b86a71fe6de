"""
Result Set Repository
"""
from typing import Optional, Sequence

from .base import InMemoryRepository
from ..models.result_set import ResultSet
from ..models.scoring import ScoredLead
from ..utils.observability import logger


class ResultSetRepository(InMemoryRepository[ResultSet]):
    """Every scoring run appends a new result set; nothing is updated in place."""

    def __init__(self):
        super().__init__("result_sets")

    async def store_results(
        self,
        results: Sequence[ScoredLead],
        offer_id: Optional[str] = None,
        lead_batch_id: Optional[str] = None,
    ) -> ResultSet:
        result_set = ResultSet(
            results=list(results),
            offer_id=offer_id,
            lead_batch_id=lead_batch_id,
        )
        await self.create(result_set)
        logger.info(f"Stored result set {result_set.id} with {result_set.count} leads")
        return result_set

    async def get_latest(self) -> Optional[ResultSet]:
        """Most recent result set by timestamp; on a tie the later insert wins."""
        latest: Optional[ResultSet] = None
        for result_set in await self.find_all():
            if latest is None or result_set.scored_at >= latest.scored_at:
                latest = result_set
        return latest
