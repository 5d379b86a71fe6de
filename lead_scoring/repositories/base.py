"""
Generic In-Memory Repository
Async CRUD over an insertion-ordered dict of domain records.
"""
import asyncio
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from ..models.base import RecordModel
from ..utils.observability import logger

T = TypeVar("T", bound=RecordModel)


class InMemoryRepository(Generic[T]):
    """
    Process-local repository. Data does not survive a restart.

    Usage:
        class OfferRepository(CurrentRecordRepository[Offer]):
            def __init__(self):
                super().__init__("offers")
    """

    def __init__(self, collection_name: str):
        self.collection_name = collection_name
        self._records: Dict[str, T] = {}
        self._lock = asyncio.Lock()

    async def create(self, document: T) -> T:
        async with self._lock:
            if document.id in self._records:
                raise ValueError(f"Duplicate id {document.id} in {self.collection_name}")
            self._records[document.id] = document

        logger.debug(
            f"Created document in {self.collection_name}",
            extra={"document_id": document.id}
        )
        return document

    async def find_by_id(self, document_id: str) -> Optional[T]:
        return self._records.get(document_id)

    async def find_all(self, predicate: Optional[Callable[[T], bool]] = None) -> List[T]:
        """All records in insertion order, optionally filtered."""
        records = list(self._records.values())
        if predicate is None:
            return records
        return [record for record in records if predicate(record)]

    async def delete(self, document_id: str) -> bool:
        async with self._lock:
            return self._records.pop(document_id, None) is not None

    async def clear(self) -> None:
        async with self._lock:
            self._records.clear()
        logger.debug(f"Cleared {self.collection_name}")

    async def count(self) -> int:
        return len(self._records)


class CurrentRecordRepository(InMemoryRepository[T]):
    """A repository with a "current" pointer: the record the next scoring run uses."""

    def __init__(self, collection_name: str):
        super().__init__(collection_name)
        self._current_id: Optional[str] = None

    async def set_current(self, document: T) -> T:
        await self.create(document)
        self._current_id = document.id
        return document

    async def get_current(self) -> Optional[T]:
        if self._current_id is None:
            return None
        return await self.find_by_id(self._current_id)

    @property
    def has_current(self) -> bool:
        return self._current_id is not None

    async def delete(self, document_id: str) -> bool:
        deleted = await super().delete(document_id)
        if deleted and document_id == self._current_id:
            self._current_id = None
        return deleted

    async def clear(self) -> None:
        await super().clear()
        self._current_id = None
