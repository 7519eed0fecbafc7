# matter_diff/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from matter_diff.api.dependencies import close_clients
from matter_diff.api.middleware import AuditTriggerMiddleware, CorrelationIdMiddleware
from matter_diff.api.routers import diffs, health, matters
from matter_diff.application.exceptions import (
    ApplicationError,
    DiffStoreError,
    UpstreamUnavailableError,
)
from matter_diff.config.logging import configure_logging
from matter_diff.config.settings import get_settings
from matter_diff.domain.exceptions import DomainError, DomainValidationError

logger = logging.getLogger(__name__)

settings = get_settings()
configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_clients()


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Middleware order: last added runs first (outermost). Request flow: CorrelationId -> AuditTrigger.
app.add_middleware(AuditTriggerMiddleware)
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(DomainValidationError)
async def domain_validation_error_handler(request, exc: DomainValidationError):
    return JSONResponse(status_code=422, content={"success": False, "detail": exc.message})


@app.exception_handler(DomainError)
async def domain_error_handler(request, exc: DomainError):
    return JSONResponse(status_code=400, content={"success": False, "detail": exc.message})


@app.exception_handler(DiffStoreError)
async def diff_store_error_handler(request, exc: DiffStoreError):
    logger.error("diff_store_unavailable", extra={"path": request.url.path, "error": exc.message})
    return JSONResponse(status_code=503, content={"success": False, "detail": "Diff store unavailable"})


@app.exception_handler(UpstreamUnavailableError)
async def upstream_unavailable_error_handler(request, exc: UpstreamUnavailableError):
    logger.error("backend_unavailable", extra={"path": request.url.path, "error": exc.message})
    return JSONResponse(status_code=502, content={"detail": "Backend unavailable"})


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    return JSONResponse(status_code=500, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request, exc: Exception):
    logger.exception("unhandled_error", extra={"path": request.url.path})
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Routers: /health, /api/matters (proxy), /internal (diff store)
app.include_router(health.router)
app.include_router(matters.router, prefix="/api/matters")
app.include_router(diffs.router, prefix="/internal")
