"""Persistence gateway for per-property inspection aggregates.

The engine reaches storage only through ``InspectionRepository.load`` and
``InspectionRepository.save``. Saves write the whole aggregate (last writer
wins) and are best-effort: a failed or slow write is logged and reported,
never raised, and never rolls back the in-memory aggregate.
"""
import json
from typing import Any, Dict, Optional, Protocol

import anyio
from pydantic import ValidationError

from src.azure.cosmos_client import CosmosDBClient, get_cosmos_client
from src.config import settings
from src.errors import ErrorCode, PersistenceError
from src.models.inspection import PropertyInspectionData
from src.utils.logging import get_logger

logger = get_logger(__name__)

DOCUMENT_TYPE = "property_inspection"


class InspectionStore(Protocol):
    """Opaque keyed store: one document per property id."""

    async def read(self, property_id: str) -> Optional[Dict[str, Any]]:
        ...

    async def write(self, property_id: str, document: Dict[str, Any]) -> None:
        ...

    async def health_check(self) -> bool:
        ...


class InMemoryInspectionStore:
    """Process-local store for development and tests.

    Documents are kept as JSON text so readers never share objects with the
    writer.
    """

    def __init__(self):
        self._documents: Dict[str, str] = {}

    async def read(self, property_id: str) -> Optional[Dict[str, Any]]:
        raw = self._documents.get(property_id)
        return json.loads(raw) if raw is not None else None

    async def write(self, property_id: str, document: Dict[str, Any]) -> None:
        self._documents[property_id] = json.dumps(document, ensure_ascii=False)

    async def health_check(self) -> bool:
        return True

    def raw(self, property_id: str) -> Optional[str]:
        return self._documents.get(property_id)


class CosmosInspectionStore:
    """Cosmos DB container partitioned by property id."""

    def __init__(self, client: Optional[CosmosDBClient] = None):
        self._client = client or get_cosmos_client()

    async def read(self, property_id: str) -> Optional[Dict[str, Any]]:
        return await self._client.read_item(item_id=property_id, partition_key=property_id)

    async def write(self, property_id: str, document: Dict[str, Any]) -> None:
        await self._client.upsert_item({**document, "id": property_id, "type": DOCUMENT_TYPE})

    async def health_check(self) -> bool:
        return await self._client.health_check()


class InspectionRepository:
    """load/save of whole aggregates through a keyed store."""

    def __init__(self, store: InspectionStore, save_timeout_seconds: Optional[float] = None):
        self.store = store
        self.save_timeout_seconds = (
            save_timeout_seconds if save_timeout_seconds is not None
            else settings.persistence_save_timeout_seconds
        )

    async def load(self, property_id: str) -> PropertyInspectionData:
        """Stored aggregate, or a fresh default when none exists yet.

        Raises:
            PersistenceError: the store could not be read or held an
                unreadable document
        """
        try:
            document = await self.store.read(property_id)
        except Exception as e:
            logger.error("Failed to load inspection", property_id=property_id, error=str(e))
            raise PersistenceError(
                f"Could not load inspection for {property_id}",
                property_id=property_id,
                details={"error": str(e)},
            ) from e

        if document is None:
            logger.info("No stored inspection, starting fresh", property_id=property_id)
            return PropertyInspectionData.create_initial(property_id)

        try:
            data = PropertyInspectionData.from_document(document)
        except ValidationError as e:
            logger.error("Stored inspection is invalid", property_id=property_id, error=str(e))
            raise PersistenceError(
                f"Stored inspection for {property_id} is invalid",
                property_id=property_id,
                details={"error": str(e)},
            ) from e

        logger.info("Inspection loaded", property_id=property_id,
                    evaluated_items=len(data.evaluations))
        return data

    async def save(self, data: PropertyInspectionData) -> bool:
        """Best-effort write of the whole aggregate.

        Returns:
            True if the store accepted the write, False otherwise
        """
        document = data.to_document()
        try:
            with anyio.fail_after(self.save_timeout_seconds):
                await self.store.write(data.property_id, document)
        except TimeoutError:
            logger.error("Inspection save timed out", property_id=data.property_id,
                         code=ErrorCode.PERSISTENCE_TIMEOUT,
                         timeout_seconds=self.save_timeout_seconds)
            return False
        except Exception as e:
            logger.error("Inspection save failed", property_id=data.property_id,
                         code=ErrorCode.PERSISTENCE_ERROR, error=str(e))
            return False

        logger.info("Inspection saved", property_id=data.property_id, updated_at=data.updated_at)
        return True


def create_store() -> InspectionStore:
    if settings.uses_cosmos:
        return CosmosInspectionStore()
    return InMemoryInspectionStore()


# Global singleton instance
_repository: Optional[InspectionRepository] = None


def get_inspection_repository() -> InspectionRepository:
    """Get the global repository, backed by the configured store."""
    global _repository
    if _repository is None:
        _repository = InspectionRepository(create_store())
        logger.info("Inspection repository initialized", backend=settings.inspection_store_backend)
    return _repository
