"""
Manual Task Service - Merges user-created tasks into a schedule.

A manual task becomes a ScheduleItem-shaped row so calendar and Gantt
views can treat it like any phase. Its dates are pinned: re-chaining never
moves it. Overlay tasks are visual only and never count toward conflicts.
"""
import logging
import uuid
from typing import Iterable, List

from app.domain.entities.phase import PhaseCatalog
from app.domain.entities.schedule_item import (
    MANUAL_STEP_PREFIX,
    ManualTask,
    ScheduleItem,
    ScheduleStatus,
)
from app.domain.exceptions import InvalidDurationError, UnknownPhaseError, ValidationError
from .business_calendar import compute_end_date, parse_iso_date

logger = logging.getLogger(__name__)


class ManualTaskService:
    """Validates and materializes manual tasks."""

    def __init__(self, catalog: PhaseCatalog):
        self.catalog = catalog

    def validate(self, task: ManualTask) -> None:
        """
        Raises:
            ValidationError: Blank description or bad start date
            InvalidDurationError: estimated_days < 1
            UnknownPhaseError: linked_step_id not in the catalog
        """
        if not task.description or not task.description.strip():
            raise ValidationError("description", "must not be blank")
        task.start_date = parse_iso_date(task.start_date, field="start_date")
        if isinstance(task.estimated_days, bool) or not isinstance(task.estimated_days, int) \
                or task.estimated_days < 1:
            raise InvalidDurationError(task.estimated_days, field="estimated_days")
        if task.linked_step_id and task.linked_step_id not in self.catalog:
            raise UnknownPhaseError(task.linked_step_id)

    def materialize(self, project_id: int, task: ManualTask) -> ScheduleItem:
        """Turn a validated ManualTask into an unsaved schedule row."""
        self.validate(task)

        trade_type = task.trade_type or self.catalog.defaults.trade
        step_id = f"{MANUAL_STEP_PREFIX}{uuid.uuid4().hex[:12]}"
        item = ScheduleItem(
            project_id=project_id,
            step_id=step_id,
            step_name=task.description.strip(),
            trade_type=trade_type,
            trade_color=self.catalog.trades.display_color(step_id, trade_type, task.trade_color),
            estimated_days=task.estimated_days,
            start_date=task.start_date,
            end_date=compute_end_date(task.start_date, task.estimated_days),
            status=ScheduleStatus.SCHEDULED,
            measurement_after_step_id=task.linked_step_id,
            is_manual_date=True,
            is_overlay=task.is_overlay,
        )
        logger.debug(f"Materialized manual task '{item.step_name}' as {item.step_id} (overlay={item.is_overlay})")
        return item


def conflict_candidates(items: Iterable[ScheduleItem]) -> List[ScheduleItem]:
    """Rows that take part in conflict detection: everything dated except overlays."""
    return [item for item in items if item.has_dates and not item.is_overlay]
