"""
Schedule Repository - Data access layer for project schedule rows.

Implements the schedule storage contract:
- Bulk insert returning generated ids
- Replace-all regeneration (delete then insert, one transaction)
- Listing, partial updates and deletion
"""
from typing import Any, Dict, List
from datetime import date
from sqlalchemy.orm import Session

from app.models import ProjectSchedule, ScheduleAlertEntity
from app.domain.entities.schedule_item import ScheduleItem, ScheduleStatus
from app.domain.exceptions import (
    ScheduleItemNotFoundError,
    InvalidScheduleDateRangeError,
    ValidationError,
)
from app.domain.services.business_calendar import parse_iso_date
from .base_repository import BaseRepository

UPDATABLE_FIELDS = frozenset({
    'step_name', 'trade_type', 'trade_color', 'estimated_days', 'actual_days',
    'start_date', 'end_date', 'status', 'supplier_schedule_lead_days',
    'fabrication_lead_days', 'measurement_required', 'measurement_after_step_id',
    'measurement_notes', 'is_manual_date', 'is_overlay', 'notes',
})


class ScheduleRepository(BaseRepository[ProjectSchedule]):
    """
    Repository for ProjectSchedule rows.

    Speaks ScheduleItem to callers; ProjectSchedule never leaves this class.
    Transactions are left to the caller (flush, no commit).
    """

    def __init__(self, session: Session):
        super().__init__(session, ProjectSchedule)

    def exists(self, **criteria) -> bool:
        """Check if a ProjectSchedule matching the criteria exists."""
        query = self.session.query(ProjectSchedule)
        for field, value in criteria.items():
            query = query.filter(getattr(ProjectSchedule, field) == value)
        return query.first() is not None

    # =========================================================================
    # Mapping
    # =========================================================================

    @staticmethod
    def to_entity(row: ProjectSchedule) -> ScheduleItem:
        return ScheduleItem(
            id=row.id,
            project_id=row.project_id,
            step_id=row.step_id,
            step_name=row.step_name,
            trade_type=row.trade_type,
            trade_color=row.trade_color,
            estimated_days=row.estimated_days,
            actual_days=row.actual_days,
            start_date=row.start_date,
            end_date=row.end_date,
            status=ScheduleStatus(row.status),
            supplier_schedule_lead_days=row.supplier_schedule_lead_days or 0,
            fabrication_lead_days=row.fabrication_lead_days or 0,
            measurement_required=bool(row.measurement_required),
            measurement_after_step_id=row.measurement_after_step_id,
            measurement_notes=row.measurement_notes,
            is_manual_date=bool(row.is_manual_date),
            is_overlay=bool(row.is_overlay),
            notes=row.notes,
        )

    @staticmethod
    def to_row(project_id: int, item: ScheduleItem) -> ProjectSchedule:
        if item.has_dates and item.start_date > item.end_date:
            raise InvalidScheduleDateRangeError(item.start_date, item.end_date)
        return ProjectSchedule(
            project_id=project_id,
            step_id=item.step_id,
            step_name=item.step_name,
            trade_type=item.trade_type,
            trade_color=item.trade_color,
            estimated_days=item.estimated_days,
            actual_days=item.actual_days,
            start_date=item.start_date,
            end_date=item.end_date,
            status=item.status.value,
            supplier_schedule_lead_days=item.supplier_schedule_lead_days,
            fabrication_lead_days=item.fabrication_lead_days,
            measurement_required=item.measurement_required,
            measurement_after_step_id=item.measurement_after_step_id,
            measurement_notes=item.measurement_notes,
            is_manual_date=item.is_manual_date,
            is_overlay=item.is_overlay,
            notes=item.notes,
        )

    # =========================================================================
    # Storage contract
    # =========================================================================

    def insert_schedules(self, project_id: int, items: List[ScheduleItem]) -> List[ScheduleItem]:
        """
        Insert rows and return them with their generated ids.

        Args:
            project_id: Owning project
            items: Unsaved rows

        Returns:
            Persisted copies (id set), in input order
        """
        rows = [self.to_row(project_id, item) for item in items]
        self.add_all(rows)
        self.flush()
        return [self.to_entity(row) for row in rows]

    def replace_schedules(self, project_id: int, items: List[ScheduleItem]) -> List[ScheduleItem]:
        """
        Delete every row (and alert) of a project, then insert the new rows.

        Runs inside the caller's transaction: a rollback restores the
        previous schedule untouched.
        """
        self.session.query(ScheduleAlertEntity).filter(
            ScheduleAlertEntity.project_id == project_id
        ).delete(synchronize_session='fetch')
        self.session.query(ProjectSchedule).filter(
            ProjectSchedule.project_id == project_id
        ).delete(synchronize_session='fetch')
        return self.insert_schedules(project_id, items)

    def list_schedules(self, project_id: int) -> List[ScheduleItem]:
        """All rows of a project ordered by start date (undated rows last)."""
        rows = self.session.query(ProjectSchedule).filter(
            ProjectSchedule.project_id == project_id
        ).order_by(
            ProjectSchedule.start_date.is_(None),
            ProjectSchedule.start_date,
            ProjectSchedule.id,
        ).all()
        return [self.to_entity(row) for row in rows]

    def get_item(self, schedule_id: int) -> ScheduleItem:
        """
        Raises:
            ScheduleItemNotFoundError: If no row has this id
        """
        row = self.get_by_id(schedule_id)
        if row is None:
            raise ScheduleItemNotFoundError(schedule_id)
        return self.to_entity(row)

    def update_schedule(self, schedule_id: int, **partial: Any) -> ScheduleItem:
        """
        Apply a partial update.

        Dates accept yyyy-MM-dd strings; status accepts its string value.

        Raises:
            ScheduleItemNotFoundError: If no row has this id
            ValidationError: On an unknown field or value
            InvalidScheduleDateRangeError: If the result ends before it starts
        """
        row = self.get_by_id(schedule_id)
        if row is None:
            raise ScheduleItemNotFoundError(schedule_id)

        for field, value in partial.items():
            if field not in UPDATABLE_FIELDS:
                raise ValidationError(field, "is not an updatable schedule field")
            if field in ('start_date', 'end_date') and value is not None:
                value = parse_iso_date(value, field=field)
            elif field == 'status':
                value = self._status_value(value)
            setattr(row, field, value)

        if row.start_date and row.end_date and row.start_date > row.end_date:
            raise InvalidScheduleDateRangeError(row.start_date, row.end_date)

        self.flush()
        return self.to_entity(row)

    def save_item(self, item: ScheduleItem) -> ScheduleItem:
        """Write back every updatable field of an existing row."""
        values: Dict[str, Any] = {field: getattr(item, field) for field in UPDATABLE_FIELDS}
        return self.update_schedule(item.id, **values)

    def delete_schedule(self, schedule_id: int) -> None:
        """
        Delete a row and its alerts.

        Raises:
            ScheduleItemNotFoundError: If no row has this id
        """
        row = self.get_by_id(schedule_id)
        if row is None:
            raise ScheduleItemNotFoundError(schedule_id)
        self.delete(row)
        self.flush()

    # =========================================================================
    # Queries
    # =========================================================================

    def get_active_on_date(self, project_id: int, target_date: date) -> List[ScheduleItem]:
        """Rows whose inclusive interval covers target_date."""
        rows = self.session.query(ProjectSchedule).filter(
            ProjectSchedule.project_id == project_id,
            ProjectSchedule.start_date <= target_date,
            ProjectSchedule.end_date >= target_date,
        ).order_by(ProjectSchedule.start_date).all()
        return [self.to_entity(row) for row in rows]

    @staticmethod
    def _status_value(value: Any) -> str:
        if isinstance(value, ScheduleStatus):
            return value.value
        try:
            return ScheduleStatus(value).value
        except ValueError:
            raise ValidationError('status', f"'{value}' is not a schedule status")
