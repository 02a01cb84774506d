"""
Domain Layer - Core entities and services for construction scheduling.

This module contains:
- entities/: Phase catalog, trades, schedule rows, alerts, conflicts
- services/: Business-day calendar, schedulers, conflict and alert logic
"""

from .entities.phase import Phase, PhaseCatalog, PhaseGroup, MandatoryDelay
from .entities.trade import TradeType, TradeCatalog
from .entities.schedule_item import (
    ScheduleItem, ScheduleStatus, ManualTask, ScheduleAlert, AlertType, Conflict, DelayWindow,
)

__all__ = [
    'Phase', 'PhaseCatalog', 'PhaseGroup', 'MandatoryDelay',
    'TradeType', 'TradeCatalog',
    'ScheduleItem', 'ScheduleStatus', 'ManualTask', 'ScheduleAlert', 'AlertType',
    'Conflict', 'DelayWindow',
]
