"""
FastAPI application entry point
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from courtbell.core.config import settings
from courtbell.api.v1.api import api_router
from courtbell.api.v1.deps import get_session_registry
from courtbell.core.logger import logger
from courtbell.db.database import init_db
from courtbell.middleware.correlation import CorrelationMiddleware
from courtbell.services.background_jobs import shutdown_scheduler, start_scheduler

app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(api_router, prefix="/api/v1")

# ── Correlation ID middleware (must be added before CORS) ─────────────────────
app.add_middleware(CorrelationMiddleware)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID"],
)


@app.get("/")
def read_root():
    logger.info("Root endpoint accessed")
    return {"message": "CourtBell API is running", "version": "1.0.0", "docs": "/docs"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}


@app.on_event("startup")
async def on_startup() -> None:
    init_db()
    start_scheduler()
    logger.info("%s started (storage=%s)", settings.APP_NAME, settings.STORAGE_BACKEND)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    closed = get_session_registry().close_all()
    shutdown_scheduler()
    logger.info("%s stopped (%d sessions closed)", settings.APP_NAME, closed)
