from __future__ import annotations

import logging

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from velohub.core.config import settings
from velohub.db.session import engine
from velohub.models.base import Base
import velohub.models  # noqa: F401  (register every table on Base.metadata)

from velohub.routes.reports import router as reports_router
from velohub.routes.store_expenses import router as store_expenses_router
from velohub.routes.vehicles import router as vehicles_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

SERVICE_NAME = "velohub-api"
VERSION = "1.0.0"

# ============================================================
# DB table creation (DEV ONLY)
# - In production, run Alembic migrations.
# - Guarded so a transient DB outage doesn't prevent app startup.
# ============================================================
if settings.RUN_CREATE_ALL:
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("DB tables ensured via create_all (RUN_CREATE_ALL=1).")
    except SQLAlchemyError:
        logger.exception("Base.metadata.create_all failed; continuing startup without it.")

app = FastAPI(
    title="Velohub API",
    version=VERSION,
)

# ============================================================
# CORS
# - localhost for dev, FRONTEND_URL for production.
# ============================================================
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
]

frontend_url = settings.FRONTEND_URL
if isinstance(frontend_url, str) and frontend_url.strip():
    origins.append(frontend_url.strip())

allow_origins = sorted({o for o in origins if o})

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

API_PREFIX = "/api/v1"


@app.api_route("/", methods=["GET", "HEAD"], status_code=status.HTTP_200_OK)
def root():
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "version": VERSION,
    }


@app.api_route("/health", methods=["GET", "HEAD"], status_code=status.HTTP_200_OK)
def health_check():
    """Health check for uptime monitoring."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "version": VERSION,
            "database": "connected",
        }

    except SQLAlchemyError:
        logger.warning("health check: database unreachable")
        return {
            "status": "error",
            "service": SERVICE_NAME,
            "database": "disconnected",
        }


# Routers
app.include_router(vehicles_router, prefix=API_PREFIX)
app.include_router(reports_router, prefix=API_PREFIX)
app.include_router(store_expenses_router, prefix=API_PREFIX)
