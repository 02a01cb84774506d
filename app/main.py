"""
Main FastAPI Application for the construction schedule engine.
Serves the v1 REST endpoints for schedule generation, conflicts and alerts.
"""
import logging

from fastapi import FastAPI

from app.config import get_config
from app.models import init_db, get_db
from app.api.v1 import api_router as v1_router

logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title="Construction Schedule Engine",
    description="Generate self-build construction schedules, detect trade conflicts "
                "and track supplier / fabrication reminders",
    version="1.0.0"
)

# Include v1 API routes
app.include_router(v1_router)


# Initialize database on startup
@app.on_event("startup")
async def startup_event():
    init_db()
    config = get_config()
    logger.info(f"Schedule catalog v{config.version} loaded ({len(config.phase_catalog())} phases)")


@app.get("/health")
def health():
    """Liveness probe."""
    return {"status": "ok", "catalog_version": get_config().version}


__all__ = ['app', 'get_db']
