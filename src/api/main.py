"""FastAPI application entry point."""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.routes import health, inspection
from src.config import settings
from src.errors import InspectionError, InspectionValidationError, PersistenceError
from src.services.checklist_master import get_checklist_master
from src.utils.logging import setup_logging, get_logger

# Setup logging before anything else
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    master = get_checklist_master()
    logger.info("Inspection service starting",
                environment=settings.environment,
                store_backend=settings.inspection_store_backend,
                checklist_items=master.total_item_count())
    yield
    logger.info("Inspection service stopped")


app = FastAPI(
    title="Building Inspection Checklist API",
    description="Per-property building-condition inspection checklist: evaluations, "
                "survey status, exclusions, progress and completion",
    version=settings.api_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if not settings.is_production else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _status_for(exc: InspectionError) -> int:
    if isinstance(exc, InspectionValidationError):
        return 422
    if isinstance(exc, PersistenceError):
        return 503
    return 500


@app.exception_handler(InspectionError)
async def inspection_error_handler(request: Request, exc: InspectionError) -> JSONResponse:
    """Engine errors that escaped a route keep their structured body and the
    status the routes would have given them."""
    status_code = _status_for(exc)
    logger.error("Unhandled inspection error", path=request.url.path, code=exc.code,
                 message=exc.message, status_code=status_code)
    return JSONResponse(status_code=status_code, content={"detail": exc.to_dict()})


app.include_router(health.router, tags=["Health"])
app.include_router(inspection.router, prefix=f"/api/{settings.api_version}")


@app.get("/")
async def root():
    return {
        "service": settings.service_name,
        "version": settings.api_version,
        "environment": settings.environment,
        "store_backend": settings.inspection_store_backend,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "src.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=not settings.is_production,
        log_level=settings.log_level.lower(),
    )
