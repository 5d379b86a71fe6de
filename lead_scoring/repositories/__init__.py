"""
Repositories Layer
In-memory persistence for offers, lead batches and scoring results.
"""
from .base import InMemoryRepository, CurrentRecordRepository
from .offers import OfferRepository
from .leads import LeadBatchRepository
from .results import ResultSetRepository
from .store import ScoringStore

__all__ = [
    "InMemoryRepository",
    "CurrentRecordRepository",
    "OfferRepository",
    "LeadBatchRepository",
    "ResultSetRepository",
    "ScoringStore",
]
