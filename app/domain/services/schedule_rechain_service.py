"""
Schedule Rechain Service - Re-derives dates after a schedule row moves.

When a row moves, every later row in execution order is pulled along so
that each starts the business day after the previous one ends. Pinned rows
(is_manual_date), manual tasks and overlays keep their dates.
"""
import logging
from dataclasses import replace
from datetime import date
from typing import List, Optional, Sequence, Union

from app.domain.entities.phase import PhaseCatalog
from app.domain.entities.schedule_item import ScheduleItem
from app.domain.exceptions import ScheduleItemNotFoundError
from .business_calendar import add_business_days, compute_end_date, parse_iso_date
from .schedule_order import sort_by_execution_order

logger = logging.getLogger(__name__)


class ScheduleRechainService:
    """Pure re-chaining over a project's rows."""

    def __init__(self, catalog: PhaseCatalog):
        self.catalog = catalog

    def rechain(
        self,
        items: Sequence[ScheduleItem],
        moved_item_id: int,
        new_start_date: Union[str, date],
        estimated_days: Optional[int] = None,
    ) -> List[ScheduleItem]:
        """
        Move one row and re-chain everything after it.

        Args:
            items: All rows of the project
            moved_item_id: Storage id of the row the user moved
            new_start_date: Its new start date
            estimated_days: Optional new duration for the moved row

        Returns:
            Updated copies of every row whose dates changed, moved row first.
            The moved row comes back pinned (is_manual_date=True).

        Raises:
            ScheduleItemNotFoundError: If moved_item_id is not among items
            InvalidDateError / InvalidDurationError: On bad input
        """
        ordered = sort_by_execution_order(self.catalog, items)
        position = next((i for i, item in enumerate(ordered) if item.id == moved_item_id), None)
        if position is None:
            raise ScheduleItemNotFoundError(moved_item_id)

        original = ordered[position]
        start = parse_iso_date(new_start_date, field="start_date")
        duration = estimated_days if estimated_days is not None else original.estimated_days
        moved = replace(
            original,
            start_date=start,
            end_date=compute_end_date(start, duration),
            estimated_days=duration,
            is_manual_date=True,
        )

        changed = [moved]
        if moved.is_overlay or moved.is_manual_task:
            return changed

        cursor = moved.end_date
        for item in ordered[position + 1:]:
            if item.is_overlay or item.is_manual_task:
                continue
            if item.is_manual_date:
                if item.end_date is not None:
                    cursor = item.end_date
                continue

            new_start = add_business_days(cursor, 1)
            new_end = compute_end_date(new_start, item.estimated_days)
            if (new_start, new_end) != (item.start_date, item.end_date):
                changed.append(replace(item, start_date=new_start, end_date=new_end))
            cursor = new_end

        logger.info(
            f"Rechained from '{original.step_id}' to {start.isoformat()}: "
            f"{len(changed) - 1} later row(s) moved"
        )
        return changed
