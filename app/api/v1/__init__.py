"""
API v1 - REST endpoints for construction schedules.

- Schedule endpoints (generate, list, conflicts, delays, alerts, summary)
- Manual tasks, row updates with re-chaining, alert dismissal
- Duration estimates
"""
from fastapi import APIRouter

from .schedules import router as schedules_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(schedules_router, prefix="/schedules", tags=["Schedules"])
