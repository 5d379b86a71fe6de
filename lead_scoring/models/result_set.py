import datetime as dt
from typing import List, Optional
from pydantic import Field, computed_field
from lead_scoring.models.base import RecordModel
from lead_scoring.models.scoring import ScoredLead


class ResultSet(RecordModel):
    """
    One generation of scored leads.
    The store keeps every generation and serves the most recent by scored_at.
    """
    results: List[ScoredLead] = Field(default_factory=list)
    offer_id: Optional[str] = None
    lead_batch_id: Optional[str] = None

    @computed_field
    @property
    def count(self) -> int:
        return len(self.results)

    @property
    def scored_at(self) -> dt.datetime:
        return self.created_at
