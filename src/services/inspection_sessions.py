"""In-process inspection sessions.

One engine per property stays in memory so that a mutation is visible to the
next read of the same session even while its save is still in flight.
"""
from typing import Dict, Optional

import anyio

from src.models.inspection import PropertyInspectionData
from src.services.inspection_engine import InspectionEngine
from src.services.persistence import InspectionRepository, get_inspection_repository
from src.utils.logging import get_logger

logger = get_logger(__name__)


class InspectionSessionManager:
    """Loads engines on first access and snapshots them for saving.

    A property's first load and its saves each run under a per-property lock:
    concurrent first requests share one engine, and saves reach the store one
    at a time, each carrying the state as of the moment it acquired the lock.
    """

    def __init__(self, repository: Optional[InspectionRepository] = None):
        self._repository = repository
        self._engines: Dict[str, InspectionEngine] = {}
        self._load_locks: Dict[str, anyio.Lock] = {}
        self._save_locks: Dict[str, anyio.Lock] = {}

    @property
    def repository(self) -> InspectionRepository:
        if self._repository is None:
            self._repository = get_inspection_repository()
        return self._repository

    async def get_engine(self, property_id: str) -> InspectionEngine:
        engine = self._engines.get(property_id)
        if engine is not None:
            return engine

        async with self._load_locks.setdefault(property_id, anyio.Lock()):
            # Another request may have finished the load while we waited
            engine = self._engines.get(property_id)
            if engine is None:
                data = await self.repository.load(property_id)
                engine = InspectionEngine(data)
                self._engines[property_id] = engine
                logger.info("Inspection session opened", property_id=property_id)
        return engine

    @staticmethod
    def snapshot(engine: InspectionEngine) -> PropertyInspectionData:
        return engine.data.model_copy(deep=True)

    async def save(self, snapshot: PropertyInspectionData) -> bool:
        async with self._save_locks.setdefault(snapshot.property_id, anyio.Lock()):
            return await self.repository.save(snapshot)

    async def persist(self, engine: InspectionEngine) -> bool:
        """Save the engine's state as of when this save gets its turn."""
        async with self._save_locks.setdefault(engine.data.property_id, anyio.Lock()):
            return await self.repository.save(self.snapshot(engine))

    def close(self, property_id: str) -> None:
        if self._engines.pop(property_id, None) is not None:
            self._load_locks.pop(property_id, None)
            logger.info("Inspection session closed", property_id=property_id)


# Global singleton instance
_session_manager: Optional[InspectionSessionManager] = None


def get_session_manager() -> InspectionSessionManager:
    global _session_manager
    if _session_manager is None:
        _session_manager = InspectionSessionManager()
    return _session_manager
