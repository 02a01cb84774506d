"""
Domain Entities - Catalog definitions and schedule value objects.
"""

from .trade import TradeType, TradeCatalog
from .phase import Phase, PhaseCatalog, PhaseGroup, Measurement, MandatoryDelay, CatalogDefaults
from .schedule_item import (
    ScheduleItem, ScheduleStatus, ManualTask, ScheduleAlert, AlertType, Conflict, DelayWindow,
)

__all__ = [
    'TradeType', 'TradeCatalog',
    'Phase', 'PhaseCatalog', 'PhaseGroup', 'Measurement', 'MandatoryDelay', 'CatalogDefaults',
    'ScheduleItem', 'ScheduleStatus', 'ManualTask', 'ScheduleAlert', 'AlertType',
    'Conflict', 'DelayWindow',
]
