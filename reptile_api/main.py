"""
REST API main application.
Entry point for the FastAPI REST server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from reptile_api.models import Base
from reptile_api.routers import enclosures_router, feedings_router, reptiles_router
from reptile_api.services.audit import build_audit_recorder
from reptile_api.services.resource_types import build_resource_registry
from shared.config.logging import rest_api_logger as logger, setup_logging
from shared.config.settings import settings
from shared.infrastructure.correlation import CorrelationIdMiddleware
from shared.infrastructure.db import get_engine
from shared.utils.exceptions import AppException


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and shutdown.
    """
    setup_logging()

    config_errors = settings.validate_production_settings()
    if config_errors:
        for error in config_errors:
            logger.error("Configuration error", error=error)
        if settings.environment == "production":
            raise RuntimeError(f"Production configuration errors: {'; '.join(config_errors)}")
        logger.warning("Running with development defaults")

    logger.info("Starting REST API", port=settings.rest_api_port, env=settings.environment)

    Base.metadata.create_all(bind=get_engine())
    logger.info("Database tables created/verified")

    # Tests may install their own collaborators before startup
    if getattr(app.state, "resources", None) is None:
        app.state.resources = build_resource_registry()
    if getattr(app.state, "audit", None) is None:
        app.state.audit = build_audit_recorder(settings)

    yield

    logger.info("Shutting down REST API")


app = FastAPI(
    title="Reptile Keeper REST API",
    description="Reptile and enclosure record keeping API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity violation", path=request.url.path, error=str(exc.orig))
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Request conflicts with existing data"},
    )


# =============================================================================
# Health Check
# =============================================================================


@app.get("/api/health")
def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": "rest-api",
        "environment": settings.environment,
    }


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(enclosures_router)
app.include_router(reptiles_router)
app.include_router(feedings_router)


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "reptile_api.main:app",
        host="0.0.0.0",
        port=settings.rest_api_port,
        reload=True,
    )
