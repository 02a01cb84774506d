"""
Schedule Generator - Turns a target start date into a dated phase schedule.

Two passes over the catalog:
- Preparation phases (planning, financing, permits) are scheduled BACKWARD
  so that they finish the business day before the target date.
- Construction phases are scheduled FORWARD from the target date, each
  phase starting the business day after the previous one ends.

The target date is day 1 of construction. All durations are business days.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence, Union

from app.domain.entities.phase import Phase, PhaseCatalog
from app.domain.entities.schedule_item import ScheduleItem, ScheduleStatus
from .business_calendar import (
    add_business_days,
    compute_end_date,
    compute_start_date,
    parse_iso_date,
    subtract_business_days,
)
from .mandatory_delay_service import MandatoryDelayService

logger = logging.getLogger(__name__)


@dataclass
class DurationEstimate:
    """Business-day totals shown before a schedule is generated."""
    preparation_days: int
    construction_days: int

    @property
    def total_days(self) -> int:
        return self.preparation_days + self.construction_days

    def to_dict(self) -> Dict:
        return {
            'preparation_days': self.preparation_days,
            'construction_days': self.construction_days,
            'total_days': self.total_days,
        }


class ScheduleGenerator:
    """
    Pure schedule computation over an injected PhaseCatalog.

    Nothing here touches storage: build_schedule() returns unsaved
    ScheduleItem rows (id=None).
    """

    def __init__(self, catalog: PhaseCatalog, delay_service: Optional[MandatoryDelayService] = None):
        self.catalog = catalog
        self.delay_service = delay_service or MandatoryDelayService(catalog)

    # =========================================================================
    # Full schedule
    # =========================================================================

    def build_schedule(
        self,
        project_id: int,
        target_start_date: Union[str, date],
        current_stage: Optional[str] = None,
    ) -> List[ScheduleItem]:
        """
        Compute every dated row for a project.

        Args:
            project_id: Owning project
            target_start_date: First day of construction (yyyy-MM-dd or date)
            current_stage: Optional project stage; earlier phases are skipped

        Returns:
            Preparation rows (earliest first) followed by construction rows

        Raises:
            InvalidDateError: If target_start_date cannot be parsed
        """
        target = parse_iso_date(target_start_date, field="target_start_date")
        phases = self.catalog.phases_from_stage(current_stage)
        preparation, construction = PhaseCatalog.split_preparation(phases)

        items = self.schedule_backward(project_id, preparation, target)
        items.extend(self.schedule_forward(project_id, construction, target))

        self.delay_service.tag_lead_times(items)

        logger.info(
            f"Built schedule for project {project_id}: {len(preparation)} preparation + "
            f"{len(construction)} construction phases from {target.isoformat()}"
        )
        return items

    # =========================================================================
    # Forward / backward passes
    # =========================================================================

    def schedule_forward(
        self,
        project_id: int,
        phases: Sequence[Phase],
        target_start_date: date,
    ) -> List[ScheduleItem]:
        """Chain phases forward: next start = previous end + 1 business day."""
        items: List[ScheduleItem] = []
        current_date = target_start_date

        for phase in phases:
            duration = self.catalog.duration_for(phase.id)
            end_date = compute_end_date(current_date, duration)
            items.append(self._make_item(project_id, phase, current_date, end_date, duration))
            current_date = add_business_days(end_date, 1)

        return items

    def schedule_backward(
        self,
        project_id: int,
        phases: Sequence[Phase],
        target_start_date: date,
    ) -> List[ScheduleItem]:
        """
        Chain phases backward so the last one ends the business day before the target.

        Phases are walked in reverse to compute dates; the result keeps
        catalog order.
        """
        items: List[ScheduleItem] = []
        segment_end = subtract_business_days(target_start_date, 1)

        for phase in reversed(phases):
            duration = self.catalog.duration_for(phase.id)
            start_date = compute_start_date(segment_end, duration)
            items.insert(0, self._make_item(project_id, phase, start_date, segment_end, duration))
            segment_end = subtract_business_days(start_date, 1)

        return items

    def _make_item(
        self,
        project_id: int,
        phase: Phase,
        start_date: date,
        end_date: date,
        duration: int,
    ) -> ScheduleItem:
        trade_type = self.catalog.trade_for(phase.id)
        measurement = None if phase.is_preparation else phase.measurement
        return ScheduleItem(
            project_id=project_id,
            step_id=phase.id,
            step_name=phase.title,
            trade_type=trade_type,
            trade_color=self.catalog.trades.schedule_color(phase.id, trade_type),
            estimated_days=duration,
            start_date=start_date,
            end_date=end_date,
            status=ScheduleStatus.SCHEDULED,
            measurement_required=measurement is not None,
            measurement_after_step_id=measurement.after_phase_id if measurement else None,
            measurement_notes=measurement.notes if measurement else None,
        )

    # =========================================================================
    # Estimates
    # =========================================================================

    def calculate_total_project_duration(self, current_stage: Optional[str] = None) -> DurationEstimate:
        """Preparation and construction business-day totals for the phases still ahead."""
        phases = self.catalog.phases_from_stage(current_stage)
        preparation, construction = PhaseCatalog.split_preparation(phases)
        return DurationEstimate(
            preparation_days=sum(self.catalog.duration_for(p.id) for p in preparation),
            construction_days=sum(self.catalog.duration_for(p.id) for p in construction),
        )

    def calculate_preparation_start_date(
        self,
        target_construction_date: Union[str, date],
        current_stage: Optional[str] = None,
    ) -> date:
        """Date preparation must begin for construction to start on target."""
        target = parse_iso_date(target_construction_date, field="target_start_date")
        estimate = self.calculate_total_project_duration(current_stage)
        return subtract_business_days(target, estimate.preparation_days)
