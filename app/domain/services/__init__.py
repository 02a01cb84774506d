"""
Domain Services - Pure scheduling logic over an injected PhaseCatalog.

ProjectScheduleService (storage-backed) lives in
app.domain.services.project_schedule_service and is imported from there.
"""

from .business_calendar import (
    add_business_days,
    subtract_business_days,
    compute_end_date,
    compute_start_date,
    count_business_days,
    parse_iso_date,
    format_iso_date,
)
from .schedule_generator import ScheduleGenerator, DurationEstimate
from .mandatory_delay_service import MandatoryDelayService
from .alert_service import AlertService, AlertSyncPlan
from .conflict_detector import detect_conflicts
from .manual_task_service import ManualTaskService
from .schedule_order import sort_by_execution_order
from .schedule_rechain_service import ScheduleRechainService

__all__ = [
    'add_business_days',
    'subtract_business_days',
    'compute_end_date',
    'compute_start_date',
    'count_business_days',
    'parse_iso_date',
    'format_iso_date',
    'ScheduleGenerator',
    'DurationEstimate',
    'MandatoryDelayService',
    'AlertService',
    'AlertSyncPlan',
    'detect_conflicts',
    'ManualTaskService',
    'sort_by_execution_order',
    'ScheduleRechainService',
]
