"""
Repository implementations for data access layer.
"""
from .base_repository import BaseRepository
from .schedule_repository import ScheduleRepository
from .alert_repository import AlertRepository

__all__ = [
    'BaseRepository',
    'ScheduleRepository',
    'AlertRepository',
]
