"""
Alert Service - Supplier-call and fabrication-start reminders.

Alerts are derived from persisted schedule rows: each needs the row's
storage id, so generation always runs after the rows are saved.

Reminder date = phase start - lead days (calendar days). Reminders whose
date is already in the past are dropped.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Set, Tuple

from app.domain.entities.schedule_item import AlertType, ScheduleAlert, ScheduleItem

logger = logging.getLogger(__name__)


@dataclass
class AlertSyncPlan:
    """Alerts to insert and stale alerts to delete after a schedule change."""
    to_insert: List[ScheduleAlert] = field(default_factory=list)
    stale: List[ScheduleAlert] = field(default_factory=list)


class AlertService:
    """Computes reminder alerts for schedule rows."""

    MESSAGES = {
        AlertType.SUPPLIER_CALL: "Appeler le fournisseur pour {step_name}",
        AlertType.FABRICATION_START: "Début de fabrication pour {step_name}",
    }

    def generate_alerts(
        self,
        items: Iterable[ScheduleItem],
        today: Optional[date] = None,
    ) -> List[ScheduleAlert]:
        """
        Build the alerts due today or later.

        Args:
            items: Persisted schedule rows (id must be set)
            today: Reference date (default: date.today())

        Returns:
            New, undismissed alerts in row order
        """
        if today is None:
            today = date.today()

        alerts: List[ScheduleAlert] = []
        for item in items:
            if item.start_date is None:
                continue
            if item.id is None:
                logger.warning(f"Skipping alerts for unsaved schedule row '{item.step_id}'")
                continue

            for alert_type, lead_days in (
                (AlertType.SUPPLIER_CALL, item.supplier_schedule_lead_days),
                (AlertType.FABRICATION_START, item.fabrication_lead_days),
            ):
                if not lead_days or lead_days <= 0:
                    continue
                alert_date = item.start_date - timedelta(days=lead_days)
                if alert_date < today:
                    continue
                alerts.append(ScheduleAlert(
                    project_id=item.project_id,
                    schedule_id=item.id,
                    alert_type=alert_type,
                    alert_date=alert_date,
                    message=self.MESSAGES[alert_type].format(step_name=item.step_name),
                ))

        return alerts

    def plan_sync(
        self,
        items: Iterable[ScheduleItem],
        existing: Iterable[ScheduleAlert],
        today: Optional[date] = None,
    ) -> AlertSyncPlan:
        """
        Reconcile freshly computed alerts with stored ones.

        An alert already stored with the same row, type and date is kept as
        is, dismissed or not. A stored alert whose row now yields a different
        date (or no alert at all) is stale.
        """
        items = list(items)
        fresh = self.generate_alerts(items, today=today)
        stored: Dict[Tuple[int, AlertType], List[ScheduleAlert]] = defaultdict(list)
        for alert in existing:
            stored[alert.key].append(alert)
        item_ids = {item.id for item in items if item.id is not None}

        plan = AlertSyncPlan()
        fresh_keys = set()
        for alert in fresh:
            fresh_keys.add(alert.key)
            matches = stored.get(alert.key, [])
            kept = next((a for a in matches if a.alert_date == alert.alert_date), None)
            # Only one alert per row and type survives
            plan.stale.extend(a for a in matches if a is not kept)
            if kept is None:
                plan.to_insert.append(alert)

        for key, alerts in stored.items():
            if key[0] in item_ids and key not in fresh_keys:
                plan.stale.extend(alerts)

        return plan

    @staticmethod
    def dismissed_keys(
        items: Iterable[ScheduleItem],
        alerts: Iterable[ScheduleAlert],
    ) -> Set[Tuple[str, AlertType, date]]:
        """
        (step_id, alert_type, alert_date) of every dismissed alert.

        Keyed by step rather than row id so dismissals outlive a
        regeneration that replaces the rows.
        """
        step_ids = {item.id: item.step_id for item in items if item.id is not None}
        return {
            (step_ids[alert.schedule_id], alert.alert_type, alert.alert_date)
            for alert in alerts
            if alert.is_dismissed and alert.schedule_id in step_ids
        }

    @staticmethod
    def carry_dismissals(
        alerts: Iterable[ScheduleAlert],
        items: Iterable[ScheduleItem],
        dismissed: Set[Tuple[str, AlertType, date]],
    ) -> int:
        """
        Mark fresh alerts dismissed when the same step, type and date was
        dismissed before. A row whose dates moved yields a new alert date
        and is reminded again.

        Returns:
            Number of alerts marked dismissed
        """
        step_ids = {item.id: item.step_id for item in items if item.id is not None}
        count = 0
        for alert in alerts:
            if (step_ids.get(alert.schedule_id), alert.alert_type, alert.alert_date) in dismissed:
                alert.is_dismissed = True
                count += 1
        return count
