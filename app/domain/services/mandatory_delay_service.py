"""
Mandatory Delay Service - Lead-time tagging and advisory delay windows.

Delays such as concrete curing are reported, not enforced: the forward
chain is never stretched to honor them. evaluate() tells the caller how
large the real gap is and whether it meets the configured minimum.
"""
import logging
from datetime import timedelta
from typing import Dict, Iterable, List, Optional

from app.domain.entities.phase import MandatoryDelay, PhaseCatalog
from app.domain.entities.schedule_item import DelayWindow, ScheduleItem

logger = logging.getLogger(__name__)


class MandatoryDelayService:
    """Applies the catalog's lead-time and mandatory-delay tables to scheduled rows."""

    def __init__(self, catalog: PhaseCatalog):
        self.catalog = catalog

    def tag_lead_times(self, items: Iterable[ScheduleItem]) -> None:
        """
        Copy supplier / fabrication lead times from the catalog onto rows.

        Manual tasks keep whatever they carry. Phases absent from the
        lead-time tables get the catalog defaults (0 unless configured).
        """
        for item in items:
            if item.is_manual_task:
                continue
            item.supplier_schedule_lead_days = self.catalog.supplier_lead_days_for(item.step_id)
            item.fabrication_lead_days = self.catalog.fabrication_lead_days_for(item.step_id)

    def evaluate(self, items: Iterable[ScheduleItem]) -> List[DelayWindow]:
        """
        Measure every configured delay whose two phases are both scheduled.

        gap_days counts the idle calendar days strictly between the end of
        the earlier phase and the start of the later one. It is negative
        when the phases overlap.
        """
        by_step: Dict[str, ScheduleItem] = {}
        for item in items:
            if item.has_dates and not item.is_manual_task:
                by_step.setdefault(item.step_id, item)

        windows = []
        for delay in self.catalog.mandatory_delays:
            window = self._measure(delay, by_step.get(delay.after_phase_id), by_step.get(delay.phase_id))
            if window is None:
                continue
            if not window.satisfied:
                logger.info(
                    f"Delay '{delay.reason}' not met: {delay.phase_id} starts {window.gap_days} "
                    f"day(s) after {delay.after_phase_id}, minimum {delay.minimum_days}"
                )
            windows.append(window)
        return windows

    def window_for(self, items: Iterable[ScheduleItem], phase_id: str) -> Optional[DelayWindow]:
        """Delay window for a single phase (e.g. 'structure' curing band)."""
        for window in self.evaluate(items):
            if window.phase_id == phase_id:
                return window
        return None

    @staticmethod
    def _measure(
        delay: MandatoryDelay,
        before: Optional[ScheduleItem],
        after: Optional[ScheduleItem],
    ) -> Optional[DelayWindow]:
        if before is None or after is None:
            return None

        gap_days = (after.start_date - before.end_date).days - 1
        window_start = window_end = None
        if gap_days >= 1:
            window_start = before.end_date + timedelta(days=1)
            window_end = after.start_date - timedelta(days=1)

        return DelayWindow(
            phase_id=delay.phase_id,
            after_phase_id=delay.after_phase_id,
            gap_days=gap_days,
            minimum_days=delay.minimum_days,
            reason=delay.reason,
            window_start=window_start,
            window_end=window_end,
        )
