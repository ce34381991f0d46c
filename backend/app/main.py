"""LodgeFlow API entry point: lead conversion and studio occupancy."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.core.database import SessionLocal, engine
from app.core.env_validation import validate_environment
from app.core.exceptions import LodgeFlowError, to_http_exception
from app.routers import (
    leads_router,
    residents_router,
    studios_router,
    invoices_router,
    payment_plans_router,
)

# Exits with status 1 on missing or unsafe configuration
validate_environment()

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"[STARTUP] {settings.app_name} {API_VERSION} mounted at {settings.api_v1_prefix}")
    yield
    logger.info("[SHUTDOWN] Disposing database engine")
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Converts enquiries into students or tourists and keeps studio occupancy in step with them.",
    version=API_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

logger.info(f"[STARTUP] CORS origins: {settings.cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in (leads_router, residents_router, studios_router, invoices_router, payment_plans_router):
    app.include_router(router, prefix=settings.api_v1_prefix)


@app.exception_handler(LodgeFlowError)
async def lodgeflow_error_handler(request: Request, exc: LodgeFlowError):
    """Domain errors that escape a router still get their mapped status."""
    http_exc = to_http_exception(exc)
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


@app.get("/health")
async def health_check():
    """Liveness plus a database round trip."""
    try:
        async with SessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"[HEALTH] Database check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "service": settings.app_name, "database": "unreachable"},
        )
    return {"status": "healthy", "service": settings.app_name, "database": "ok"}


@app.get("/")
async def root():
    return {
        "service": settings.app_name,
        "version": API_VERSION,
        "docs": "/docs" if settings.debug else "Disabled in production",
    }
