"""
Schedule Entities - Dated schedule rows, manual tasks, alerts and conflicts.

Dates are datetime.date inside the domain. to_dict() is the boundary form
and always renders ISO yyyy-MM-dd strings.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Optional, Tuple

MANUAL_STEP_PREFIX = "manual-"


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


class ScheduleStatus(Enum):
    """Lifecycle status of a schedule row."""
    SCHEDULED = "scheduled"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class AlertType(Enum):
    """Reminder kinds derived from lead times."""
    SUPPLIER_CALL = "supplier_call"
    FABRICATION_START = "fabrication_start"


@dataclass
class ScheduleItem:
    """
    One dated phase instance (or materialized manual task) for a project.

    Attributes:
        project_id: Owning project
        step_id: Catalog phase id, or 'manual-<hex>' for manual tasks
        step_name: Display name
        trade_type: Trade responsible for the work
        trade_color: Display color
        estimated_days: Planned duration in business days
        start_date: First working day (inclusive)
        end_date: Last working day (inclusive)
        status: ScheduleStatus
        actual_days: Real duration, set on completion
        supplier_schedule_lead_days: Calendar days before start to call the supplier
        fabrication_lead_days: Calendar days before start to launch fabrication
        measurement_required: Whether on-site measurement is needed
        measurement_after_step_id: Phase after which to measure (manual tasks: linked step)
        measurement_notes: Measurement instructions
        is_manual_date: User-pinned dates, never re-chained
        is_overlay: Visual-only manual task, ignored by conflicts and re-chaining
        notes: Free-form notes
        id: Storage identifier, None until persisted
    """

    project_id: int
    step_id: str
    step_name: str
    trade_type: str
    trade_color: str
    estimated_days: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: ScheduleStatus = ScheduleStatus.SCHEDULED
    actual_days: Optional[int] = None
    supplier_schedule_lead_days: int = 0
    fabrication_lead_days: int = 0
    measurement_required: bool = False
    measurement_after_step_id: Optional[str] = None
    measurement_notes: Optional[str] = None
    is_manual_date: bool = False
    is_overlay: bool = False
    notes: Optional[str] = None
    id: Optional[int] = None

    @property
    def is_manual_task(self) -> bool:
        return self.step_id.startswith(MANUAL_STEP_PREFIX)

    @property
    def has_dates(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    def display_duration_days(self) -> int:
        """
        Calendar width used by the Gantt view.

        Completed rows with an actual duration use it; otherwise the span
        between start and end, inclusive.
        """
        if self.status is ScheduleStatus.COMPLETED and self.actual_days:
            return self.actual_days
        if self.has_dates:
            return (self.end_date - self.start_date).days + 1
        return self.estimated_days

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'project_id': self.project_id,
            'step_id': self.step_id,
            'step_name': self.step_name,
            'trade_type': self.trade_type,
            'trade_color': self.trade_color,
            'estimated_days': self.estimated_days,
            'actual_days': self.actual_days,
            'start_date': _iso(self.start_date),
            'end_date': _iso(self.end_date),
            'status': self.status.value,
            'supplier_schedule_lead_days': self.supplier_schedule_lead_days,
            'fabrication_lead_days': self.fabrication_lead_days,
            'measurement_required': self.measurement_required,
            'measurement_after_step_id': self.measurement_after_step_id,
            'measurement_notes': self.measurement_notes,
            'is_manual_date': self.is_manual_date,
            'is_overlay': self.is_overlay,
            'notes': self.notes,
        }


@dataclass
class ManualTask:
    """A user-created ad-hoc task, before materialization."""
    description: str
    start_date: date
    estimated_days: int = 1
    linked_step_id: Optional[str] = None
    is_overlay: bool = False
    trade_type: str = "autre"
    trade_color: Optional[str] = None


@dataclass
class ScheduleAlert:
    """Supplier / fabrication reminder tied to a persisted schedule row."""
    project_id: int
    schedule_id: int
    alert_type: AlertType
    alert_date: date
    message: str
    is_dismissed: bool = False
    id: Optional[int] = None

    @property
    def key(self) -> Tuple[int, AlertType]:
        return (self.schedule_id, self.alert_type)

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'project_id': self.project_id,
            'schedule_id': self.schedule_id,
            'alert_type': self.alert_type.value,
            'alert_date': _iso(self.alert_date),
            'message': self.message,
            'is_dismissed': self.is_dismissed,
        }


@dataclass(frozen=True)
class Conflict:
    """A calendar day on which two or more distinct trades are active."""
    date: date
    trades: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict:
        return {'date': self.date.isoformat(), 'trades': list(self.trades)}


@dataclass(frozen=True)
class DelayWindow:
    """
    Observed gap between two phases bound by a mandatory delay.

    window_start / window_end bound the idle calendar days between the
    phases; both are None when the phases are back to back or overlap.
    """
    phase_id: str
    after_phase_id: str
    gap_days: int
    minimum_days: int
    reason: str
    window_start: Optional[date] = None
    window_end: Optional[date] = None

    @property
    def satisfied(self) -> bool:
        return self.gap_days >= self.minimum_days

    def to_dict(self) -> Dict:
        return {
            'phase_id': self.phase_id,
            'after_phase_id': self.after_phase_id,
            'gap_days': self.gap_days,
            'minimum_days': self.minimum_days,
            'reason': self.reason,
            'window_start': _iso(self.window_start),
            'window_end': _iso(self.window_end),
            'satisfied': self.satisfied,
        }
