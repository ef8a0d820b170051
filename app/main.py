"""
FastAPI application for qrmfg.

Exposes the access-control surface of the core: health, the current user's
plant access summary, and uniform rendering of access-control errors.

Usage:
    uvicorn app.main:app --reload --port 8000
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from app.access.routes import router as access_router
from app.workflows.routes import router as workflows_router
from qrmfg_core.auth.middleware import AuthMiddleware
from qrmfg_core.config import settings
from qrmfg_core.logging import setup_logging
from qrmfg_core.runtime.errors import ServiceError

# Initialize logging
setup_logging()

app = FastAPI(
    title="QRMFG",
    description="Plant-scoped access control for the quality-risk workflow",
    version="1.0.0",
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render service errors (401/403 for access control) as JSON bodies."""
    logger.warning(f"Request to {request.url.path} failed with {exc.status_code}: {exc}")
    body = exc.to_dict()
    body["path"] = request.url.path
    return JSONResponse(status_code=exc.status_code, content=body)


# Auth middleware (REQUIRE_AUTH=false runs unauthenticated calls as a dev admin)
app.add_middleware(AuthMiddleware, require_auth=settings.REQUIRE_AUTH)

app.include_router(access_router, tags=["Access"])
app.include_router(workflows_router, tags=["Workflows"])


@app.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
        dict: Status and service information.
    """
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": "1.0.0",
        "plant_filtering_enabled": settings.PLANT_FILTERING_ENABLED,
    }
