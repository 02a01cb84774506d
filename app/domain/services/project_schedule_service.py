"""
Project Schedule Service - Storage-backed entry point for schedule operations.

Wires the pure schedulers to the repositories:
1. Generation: replace-all of the project's rows in one transaction
2. Alert insertion as a second, best-effort transaction
3. Manual tasks, moves (with re-chaining), deletion
4. Read models: conflicts, delay windows, alerts, summary
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import Project
from app.domain.entities.phase import PhaseCatalog
from app.domain.entities.schedule_item import (
    Conflict,
    DelayWindow,
    ManualTask,
    ScheduleAlert,
    ScheduleItem,
    ScheduleStatus,
)
from app.domain.exceptions import (
    DomainError,
    InvalidDurationError,
    InvalidScheduleDateRangeError,
    SchedulePersistenceError,
    ValidationError,
)
from app.infrastructure.repositories import AlertRepository, ScheduleRepository
from .alert_service import AlertService
from .business_calendar import count_business_days, parse_iso_date
from .conflict_detector import detect_conflicts
from .mandatory_delay_service import MandatoryDelayService
from .manual_task_service import ManualTaskService
from .schedule_generator import ScheduleGenerator
from .schedule_order import sort_by_execution_order
from .schedule_rechain_service import ScheduleRechainService

logger = logging.getLogger(__name__)

MOVE_FIELDS = frozenset({'start_date', 'end_date', 'estimated_days'})


@dataclass
class GenerationResult:
    """Outcome of generate_project_schedule()."""
    success: bool
    error: Optional[str] = None
    schedule_count: int = 0
    alert_count: int = 0
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'success': self.success,
            'error': self.error,
            'schedule_count': self.schedule_count,
            'alert_count': self.alert_count,
            'warnings': list(self.warnings),
        }


def summarize(
    items: Iterable[ScheduleItem],
    conflicts: Iterable[Conflict],
    alerts: Iterable[ScheduleAlert],
) -> Dict[str, int]:
    """Dashboard counters for a project schedule. Dismissed alerts do not count."""
    items = list(items)
    return {
        'total': len(items),
        'pending': sum(1 for i in items if i.status == ScheduleStatus.PENDING),
        'in_progress': sum(1 for i in items if i.status == ScheduleStatus.IN_PROGRESS),
        'completed': sum(1 for i in items if i.status == ScheduleStatus.COMPLETED),
        'conflicts': len(list(conflicts)),
        'alerts': sum(1 for a in alerts if not a.is_dismissed),
    }


class ProjectScheduleService:
    """
    Schedule operations for one database session.

    The session's transaction is committed or rolled back here; repositories
    only flush.
    """

    def __init__(
        self,
        session: Session,
        catalog: Optional[PhaseCatalog] = None,
        today: Optional[date] = None,
    ):
        if catalog is None:
            from app.config import get_config
            catalog = get_config().phase_catalog()

        self.session = session
        self.catalog = catalog
        self.today = today
        self.schedules = ScheduleRepository(session)
        self.alerts = AlertRepository(session)
        self.generator = ScheduleGenerator(catalog)
        self.delay_service = MandatoryDelayService(catalog)
        self.alert_service = AlertService()
        self.manual_tasks = ManualTaskService(catalog)
        self.rechainer = ScheduleRechainService(catalog)

    # =========================================================================
    # Generation
    # =========================================================================

    def generate_project_schedule(
        self,
        project_id: int,
        target_start_date: Union[str, date],
        current_stage: Optional[str] = None,
    ) -> GenerationResult:
        """
        Rebuild a project's whole schedule.

        The previous rows and alerts are replaced in a single transaction;
        on any failure the previous schedule is left untouched. Alerts are
        written afterwards and a failure there is only logged. An alert the
        user dismissed stays dismissed while its step keeps the same date.

        Args:
            project_id: Project to schedule
            target_start_date: First day of construction (yyyy-MM-dd)
            current_stage: Optional stage; earlier phases are skipped

        Returns:
            GenerationResult (success=False with an error message on failure)
        """
        try:
            items = self.generator.build_schedule(project_id, target_start_date, current_stage)
            dismissed = self.alert_service.dismissed_keys(
                self.schedules.list_schedules(project_id),
                self.alerts.list_alerts(project_id, include_dismissed=True),
            )
            saved = self.schedules.replace_schedules(project_id, items)
            self._remember_target(project_id, items, current_stage)
            self.session.commit()
        except DomainError as e:
            self.session.rollback()
            logger.warning(f"Schedule generation rejected for project {project_id}: {e.message}")
            return GenerationResult(success=False, error=e.message)
        except SQLAlchemyError as e:
            self.session.rollback()
            error = SchedulePersistenceError(project_id, str(e))
            logger.error(error.message)
            return GenerationResult(success=False, error=error.message)

        result = GenerationResult(success=True, schedule_count=len(saved))

        try:
            alerts = self.alert_service.generate_alerts(saved, today=self.today)
            self.alert_service.carry_dismissals(alerts, saved, dismissed)
            self.alerts.insert_alerts(alerts)
            self.session.commit()
            result.alert_count = len(alerts)
        except (DomainError, SQLAlchemyError) as e:
            self.session.rollback()
            logger.warning(f"Alert generation failed for project {project_id}: {e}")
            result.warnings.append(f"Alerts not generated: {e}")

        logger.info(
            f"Generated {result.schedule_count} schedule rows and "
            f"{result.alert_count} alerts for project {project_id}"
        )
        return result

    def _remember_target(self, project_id: int, items: List[ScheduleItem], current_stage: Optional[str]) -> None:
        project = self.session.get(Project, project_id)
        if project is None:
            return
        construction = [i for i in items if not self.catalog.get(i.step_id).is_preparation]
        if construction:
            project.target_start_date = construction[0].start_date
        project.current_stage = current_stage

    # =========================================================================
    # Reads
    # =========================================================================

    def list_schedule(self, project_id: int) -> List[ScheduleItem]:
        return self.schedules.list_schedules(project_id)

    def list_in_execution_order(self, project_id: int) -> List[ScheduleItem]:
        """Rows in construction order, manual tasks next to their linked phase."""
        return sort_by_execution_order(self.catalog, self.schedules.list_schedules(project_id))

    def get_conflicts(self, project_id: int) -> List[Conflict]:
        return detect_conflicts(self.schedules.list_schedules(project_id))

    def get_delay_windows(self, project_id: int, phase_id: Optional[str] = None) -> List[DelayWindow]:
        items = self.schedules.list_schedules(project_id)
        if phase_id is None:
            return self.delay_service.evaluate(items)
        window = self.delay_service.window_for(items, phase_id)
        return [window] if window else []

    def list_active_on(self, project_id: int, day: Union[str, date]) -> List[ScheduleItem]:
        """Rows scheduled on a given calendar day, weekends included."""
        return self.schedules.get_active_on_date(project_id, parse_iso_date(day, field='on'))

    def list_alerts(self, project_id: int, include_dismissed: bool = False) -> List[ScheduleAlert]:
        return self.alerts.list_alerts(project_id, include_dismissed=include_dismissed)

    def summary(self, project_id: int) -> Dict[str, int]:
        items = self.schedules.list_schedules(project_id)
        return summarize(items, detect_conflicts(items), self.alerts.list_alerts(project_id))

    def estimate(
        self,
        current_stage: Optional[str] = None,
        target_start_date: Union[str, date, None] = None,
    ) -> Dict[str, Any]:
        """
        Duration totals for the phases still ahead, plus the preparation
        start date when a construction target is given.
        """
        estimate = self.generator.calculate_total_project_duration(current_stage).to_dict()
        if target_start_date is not None:
            start = self.generator.calculate_preparation_start_date(target_start_date, current_stage)
            estimate['preparation_start_date'] = start.isoformat()
        return estimate

    # =========================================================================
    # Writes
    # =========================================================================

    def add_manual_task(self, project_id: int, task: ManualTask) -> ScheduleItem:
        """
        Materialize and store a manual task.

        Raises:
            ValidationError: On invalid task input
            UnknownPhaseError: If the linked step is not in the catalog
        """
        item = self.manual_tasks.materialize(project_id, task)
        try:
            saved = self.schedules.insert_schedules(project_id, [item])[0]
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        logger.info(f"Added manual task '{saved.step_name}' to project {project_id}")
        return saved

    def move_schedule(
        self,
        schedule_id: int,
        new_start_date: Union[str, date],
        estimated_days: Optional[int] = None,
    ) -> List[ScheduleItem]:
        """
        Move a row and re-chain every later row.

        Returns:
            The rows whose dates changed, moved row first
        """
        moved = self.schedules.get_item(schedule_id)
        items = self.schedules.list_schedules(moved.project_id)
        changed = self.rechainer.rechain(items, schedule_id, new_start_date, estimated_days)

        try:
            saved = [self.schedules.save_item(item) for item in changed]
            self.session.commit()
        except (DomainError, SQLAlchemyError):
            self.session.rollback()
            raise

        self._sync_alerts(moved.project_id, saved)
        return saved

    def update_schedule(self, schedule_id: int, **partial: Any) -> List[ScheduleItem]:
        """
        Partial update. A new start date, end date or duration goes through
        move_schedule(); an end date is turned into the business-day
        duration it implies. Other fields are written as given.

        Returns:
            Every row that changed, the updated row first
        """
        partial = {k: v for k, v in partial.items() if v is not None}
        moved: List[ScheduleItem] = []
        if MOVE_FIELDS & partial.keys():
            current = self.schedules.get_item(schedule_id)
            start = parse_iso_date(partial.pop('start_date', current.start_date), field='start_date')
            estimated_days = partial.pop('estimated_days', None)
            if 'end_date' in partial:
                estimated_days = self._duration_from_end(
                    start, partial.pop('end_date'), estimated_days
                )
            moved = self.move_schedule(schedule_id, start, estimated_days)
        if not partial:
            return moved

        try:
            updated = self.schedules.update_schedule(schedule_id, **partial)
            self.session.commit()
        except (DomainError, SQLAlchemyError):
            self.session.rollback()
            raise
        return [updated] + moved[1:]

    @staticmethod
    def _duration_from_end(start: date, end_value: Union[str, date], estimated_days: Optional[int]) -> int:
        """
        Business-day duration implied by a new end date.

        Raises:
            InvalidScheduleDateRangeError: If the end is before the start
            ValidationError: If the end disagrees with an explicit duration
        """
        end = parse_iso_date(end_value, field='end_date')
        if end < start:
            raise InvalidScheduleDateRangeError(start, end)
        duration = count_business_days(start, end)
        if duration < 1:
            raise InvalidDurationError(duration, field='end_date')
        if estimated_days is not None and estimated_days != duration:
            raise ValidationError(
                'end_date',
                f"spans {duration} business day(s) but estimated_days is {estimated_days}",
            )
        return duration

    def delete_schedule(self, schedule_id: int) -> None:
        try:
            self.schedules.delete_schedule(schedule_id)
            self.session.commit()
        except (DomainError, SQLAlchemyError):
            self.session.rollback()
            raise

    def dismiss_alert(self, alert_id: int) -> ScheduleAlert:
        try:
            alert = self.alerts.dismiss_alert(alert_id)
            self.session.commit()
        except (DomainError, SQLAlchemyError):
            self.session.rollback()
            raise
        return alert

    def _sync_alerts(self, project_id: int, changed: List[ScheduleItem]) -> None:
        try:
            existing = self.alerts.list_alerts(project_id, include_dismissed=True)
            plan = self.alert_service.plan_sync(changed, existing, today=self.today)
            self.alerts.delete_alerts(alert.id for alert in plan.stale)
            self.alerts.insert_alerts(plan.to_insert)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.warning(f"Alert resync failed for project {project_id}: {e}")
