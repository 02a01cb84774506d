"""
Alert Repository - Data access layer for schedule alerts.
"""
from typing import Iterable, List
from sqlalchemy.orm import Session

from app.models import ScheduleAlertEntity
from app.domain.entities.schedule_item import AlertType, ScheduleAlert
from app.domain.exceptions import ScheduleAlertNotFoundError
from .base_repository import BaseRepository


class AlertRepository(BaseRepository[ScheduleAlertEntity]):
    """Repository for ScheduleAlertEntity rows, exchanged as ScheduleAlert."""

    def __init__(self, session: Session):
        super().__init__(session, ScheduleAlertEntity)

    def exists(self, **criteria) -> bool:
        """Check if an alert matching the criteria exists."""
        query = self.session.query(ScheduleAlertEntity)
        for field, value in criteria.items():
            query = query.filter(getattr(ScheduleAlertEntity, field) == value)
        return query.first() is not None

    @staticmethod
    def to_entity(row: ScheduleAlertEntity) -> ScheduleAlert:
        return ScheduleAlert(
            id=row.id,
            project_id=row.project_id,
            schedule_id=row.schedule_id,
            alert_type=AlertType(row.alert_type),
            alert_date=row.alert_date,
            message=row.message,
            is_dismissed=bool(row.is_dismissed),
        )

    def insert_alerts(self, alerts: Iterable[ScheduleAlert]) -> List[ScheduleAlert]:
        """Insert alerts and return them with their generated ids."""
        rows = [
            ScheduleAlertEntity(
                project_id=alert.project_id,
                schedule_id=alert.schedule_id,
                alert_type=alert.alert_type.value,
                alert_date=alert.alert_date,
                message=alert.message,
                is_dismissed=alert.is_dismissed,
            )
            for alert in alerts
        ]
        self.add_all(rows)
        self.flush()
        return [self.to_entity(row) for row in rows]

    def list_alerts(self, project_id: int, include_dismissed: bool = False) -> List[ScheduleAlert]:
        """
        Alerts of a project ordered by alert date.

        Args:
            project_id: Owning project
            include_dismissed: Also return dismissed alerts
        """
        query = self.session.query(ScheduleAlertEntity).filter(
            ScheduleAlertEntity.project_id == project_id
        )
        if not include_dismissed:
            query = query.filter(ScheduleAlertEntity.is_dismissed == False)
        rows = query.order_by(ScheduleAlertEntity.alert_date, ScheduleAlertEntity.id).all()
        return [self.to_entity(row) for row in rows]

    def dismiss_alert(self, alert_id: int) -> ScheduleAlert:
        """
        Raises:
            ScheduleAlertNotFoundError: If no alert has this id
        """
        row = self.get_by_id(alert_id)
        if row is None:
            raise ScheduleAlertNotFoundError(alert_id)
        row.is_dismissed = True
        self.flush()
        return self.to_entity(row)

    def delete_alerts(self, alert_ids: Iterable[int]) -> int:
        """Delete alerts by id, returning how many were removed."""
        alert_ids = [alert_id for alert_id in alert_ids if alert_id is not None]
        if not alert_ids:
            return 0
        count = self.session.query(ScheduleAlertEntity).filter(
            ScheduleAlertEntity.id.in_(alert_ids)
        ).delete(synchronize_session='fetch')
        self.flush()
        return count
