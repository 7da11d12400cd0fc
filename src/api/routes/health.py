"""Health check endpoints."""
from fastapi import APIRouter

from src.config import settings
from src.models import HealthResponse
from src.services.persistence import get_inspection_repository
from src.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint.

    Returns:
        HealthResponse with reachability of the inspection store
    """
    logger.info("Performing health check")

    store_key = "cosmos_db" if settings.uses_cosmos else "memory_store"
    services_status = {store_key: False}

    try:
        repository = get_inspection_repository()
        services_status[store_key] = await repository.store.health_check()
    except Exception as e:
        logger.error("Inspection store health check error", error=str(e))

    status = "healthy" if all(services_status.values()) else "degraded"

    logger.info("Health check completed", status=status, services=services_status)

    return HealthResponse(
        status=status,
        services=services_status
    )
