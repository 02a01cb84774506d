"""
Infrastructure Layer - Storage implementations for the schedule engine.

This module provides:
- Repository pattern for schedule rows and alerts (SQLAlchemy)
"""

from .repositories import (
    BaseRepository,
    ScheduleRepository,
    AlertRepository,
)

__all__ = [
    'BaseRepository',
    'ScheduleRepository',
    'AlertRepository',
]
