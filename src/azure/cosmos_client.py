"""Cosmos DB access for inspection documents (Entra ID auth, sync SDK off-loop)."""
from typing import Any, Dict, Optional

import anyio
from azure.cosmos import ContainerProxy, CosmosClient
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError
from azure.identity import DefaultAzureCredential

from src.config import settings
from src.errors import ErrorCode, InspectionError
from src.utils.logging import get_logger

logger = get_logger(__name__)


class CosmosDBClient:
    """One container of per-property documents, partitioned by property id.

    Nothing touches the network until the first call; a missing endpoint is
    reported then, so the in-memory backend never needs Azure settings.
    """

    def __init__(self):
        self._client: Optional[CosmosClient] = None
        self._container: Optional[ContainerProxy] = None

    def _connect(self) -> CosmosClient:
        if self._client is None:
            endpoint = settings.azure_cosmosdb_endpoint
            if not endpoint:
                raise InspectionError(
                    code=ErrorCode.STORE_NOT_CONFIGURED,
                    message="AZURE_COSMOSDB_ENDPOINT is not set",
                )
            self._client = CosmosClient(url=endpoint, credential=DefaultAzureCredential())
            logger.info("Cosmos DB client created", endpoint=endpoint,
                        database=settings.azure_cosmosdb_database_name)
        return self._client

    @property
    def container(self) -> ContainerProxy:
        if self._container is None:
            database = self._connect().get_database_client(settings.azure_cosmosdb_database_name)
            self._container = database.get_container_client(settings.azure_cosmosdb_container_name)
        return self._container

    async def read_item(self, item_id: str, partition_key: str) -> Optional[Dict[str, Any]]:
        """Point read; None when the document does not exist."""

        def _read() -> Dict[str, Any]:
            return self.container.read_item(item=item_id, partition_key=partition_key)

        try:
            return await anyio.to_thread.run_sync(_read)
        except CosmosResourceNotFoundError:
            logger.info("Cosmos document not found", item_id=item_id)
            return None
        except CosmosHttpResponseError as e:
            logger.error("Cosmos read failed", item_id=item_id, status_code=e.status_code, error=str(e))
            raise

    async def upsert_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """Whole-document create-or-replace; the last writer wins."""

        def _upsert() -> Dict[str, Any]:
            return self.container.upsert_item(body=item)

        try:
            stored = await anyio.to_thread.run_sync(_upsert)
        except CosmosHttpResponseError as e:
            logger.error("Cosmos upsert failed", item_id=item.get("id"), status_code=e.status_code, error=str(e))
            raise
        logger.info("Cosmos document upserted", item_id=stored["id"])
        return stored

    async def health_check(self) -> bool:
        try:
            await anyio.to_thread.run_sync(self.container.read)
        except Exception as e:
            logger.error("Cosmos DB health check failed", error=str(e))
            return False
        return True


# Global singleton instance
_cosmos_client: Optional[CosmosDBClient] = None


def get_cosmos_client() -> CosmosDBClient:
    global _cosmos_client
    if _cosmos_client is None:
        _cosmos_client = CosmosDBClient()
    return _cosmos_client
