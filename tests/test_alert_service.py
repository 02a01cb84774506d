"""
Tests for supplier-call / fabrication-start alerts.
"""
import pytest
from dataclasses import replace
from datetime import date

from app.domain.entities.schedule_item import AlertType, ScheduleAlert
from app.domain.services.alert_service import AlertService
from app.domain.services.schedule_generator import ScheduleGenerator


@pytest.fixture
def saved_items(catalog):
    """Generated rows with storage ids assigned in order (1..7)."""
    items = ScheduleGenerator(catalog).build_schedule(1, "2025-06-02")
    return [replace(item, id=i) for i, item in enumerate(items, start=1)]


def by_type(alerts, schedule_id):
    return {a.alert_type: a for a in alerts if a.schedule_id == schedule_id}


class TestGenerateAlerts:
    """Tests for AlertService.generate_alerts."""

    def test_dates_and_messages(self, saved_items):
        alerts = AlertService().generate_alerts(saved_items, today=date(2025, 1, 1))
        assert len(alerts) == 4

        # fenetres-portes (id 5) starts 2025-07-14
        windows = by_type(alerts, 5)
        assert windows[AlertType.SUPPLIER_CALL].alert_date == date(2025, 6, 2)
        assert windows[AlertType.FABRICATION_START].alert_date == date(2025, 6, 16)
        assert windows[AlertType.SUPPLIER_CALL].message == "Appeler le fournisseur pour Fenetres Portes"

        # cuisine-sdb (id 7) starts 2025-08-11
        kitchen = by_type(alerts, 7)
        assert kitchen[AlertType.SUPPLIER_CALL].alert_date == date(2025, 7, 7)
        assert kitchen[AlertType.FABRICATION_START].alert_date == date(2025, 7, 21)
        assert kitchen[AlertType.FABRICATION_START].message == "Début de fabrication pour Cuisine Sdb"

    def test_new_alerts_not_dismissed(self, saved_items):
        for alert in AlertService().generate_alerts(saved_items, today=date(2025, 1, 1)):
            assert alert.is_dismissed is False
            assert alert.id is None
            assert alert.project_id == 1

    def test_past_alerts_suppressed(self, saved_items):
        alerts = AlertService().generate_alerts(saved_items, today=date(2025, 6, 10))
        assert len(alerts) == 3
        assert AlertType.SUPPLIER_CALL not in by_type(alerts, 5)

    def test_alert_due_today_kept(self, saved_items):
        alerts = AlertService().generate_alerts(saved_items, today=date(2025, 6, 2))
        assert AlertType.SUPPLIER_CALL in by_type(alerts, 5)

    def test_zero_lead_days_yield_no_alert(self, saved_items):
        alerts = AlertService().generate_alerts(saved_items, today=date(2025, 1, 1))
        assert {a.schedule_id for a in alerts} == {5, 7}

    def test_unsaved_rows_skipped(self, catalog):
        items = ScheduleGenerator(catalog).build_schedule(1, "2025-06-02")
        assert AlertService().generate_alerts(items, today=date(2025, 1, 1)) == []


class TestPlanSync:
    """Tests for reconciling stored alerts after a move."""

    def test_unchanged_alert_kept_even_if_dismissed(self, saved_items):
        service = AlertService()
        stored = [
            replace(alert, id=i, is_dismissed=True)
            for i, alert in enumerate(service.generate_alerts(saved_items, today=date(2025, 1, 1)), start=1)
        ]
        plan = service.plan_sync(saved_items, stored, today=date(2025, 1, 1))
        assert plan.to_insert == []
        assert plan.stale == []

    def test_moved_row_replaces_alert(self, saved_items):
        service = AlertService()
        stored = [
            replace(alert, id=i)
            for i, alert in enumerate(service.generate_alerts(saved_items, today=date(2025, 1, 1)), start=1)
        ]
        moved = replace(saved_items[4], start_date=date(2025, 7, 21), end_date=date(2025, 7, 25))

        plan = service.plan_sync([moved], stored, today=date(2025, 1, 1))

        assert {a.alert_date for a in plan.to_insert} == {date(2025, 6, 9), date(2025, 6, 23)}
        assert {a.schedule_id for a in plan.stale} == {5}
        assert len(plan.stale) == 2

    def test_alert_in_past_after_move_is_stale(self, saved_items):
        service = AlertService()
        stored = [
            ScheduleAlert(1, 5, AlertType.SUPPLIER_CALL, date(2025, 6, 2), "x", id=11),
        ]
        moved = replace(saved_items[4], start_date=date(2025, 7, 9), end_date=date(2025, 7, 15))

        plan = service.plan_sync([moved], stored, today=date(2025, 6, 10))

        # 2025-07-09 - 42 days is already past: no new supplier alert
        assert [a.id for a in plan.stale] == [11]
        assert [a.alert_type for a in plan.to_insert] == [AlertType.FABRICATION_START]

    def test_duplicate_stored_alerts_are_stale(self, saved_items):
        service = AlertService()
        stored = [
            ScheduleAlert(1, 5, AlertType.SUPPLIER_CALL, date(2025, 6, 2), "x", id=11),
            ScheduleAlert(1, 5, AlertType.SUPPLIER_CALL, date(2025, 6, 2), "x", id=12),
            ScheduleAlert(1, 5, AlertType.FABRICATION_START, date(2025, 6, 16), "x", id=13),
        ]

        plan = service.plan_sync([saved_items[4]], stored, today=date(2025, 1, 1))

        assert [a.id for a in plan.stale] == [12]
        assert plan.to_insert == []

    def test_duplicates_of_moved_row_all_stale(self, saved_items):
        service = AlertService()
        stored = [
            ScheduleAlert(1, 5, AlertType.SUPPLIER_CALL, date(2025, 6, 2), "x", id=11),
            ScheduleAlert(1, 5, AlertType.SUPPLIER_CALL, date(2025, 5, 26), "x", id=12),
        ]
        moved = replace(saved_items[4], start_date=date(2025, 7, 21), end_date=date(2025, 7, 25))

        plan = service.plan_sync([moved], stored, today=date(2025, 1, 1))

        assert sorted(a.id for a in plan.stale) == [11, 12]
        assert {(a.alert_type, a.alert_date) for a in plan.to_insert} == {
            (AlertType.SUPPLIER_CALL, date(2025, 6, 9)),
            (AlertType.FABRICATION_START, date(2025, 6, 23)),
        }


class TestDismissals:
    """Tests for carrying dismissals across a regeneration."""

    @pytest.fixture
    def stored(self, saved_items):
        alerts = AlertService().generate_alerts(saved_items, today=date(2025, 1, 1))
        # First alert: fenetres-portes supplier call on 2025-06-02
        return [replace(alert, id=i, is_dismissed=(i == 1)) for i, alert in enumerate(alerts, start=1)]

    def test_dismissed_keys(self, saved_items, stored):
        assert AlertService.dismissed_keys(saved_items, stored) == {
            ("fenetres-portes", AlertType.SUPPLIER_CALL, date(2025, 6, 2)),
        }

    def test_carried_to_new_rows(self, saved_items, stored):
        dismissed = AlertService.dismissed_keys(saved_items, stored)
        regenerated = [replace(item, id=item.id + 100) for item in saved_items]
        fresh = AlertService().generate_alerts(regenerated, today=date(2025, 1, 1))

        assert AlertService.carry_dismissals(fresh, regenerated, dismissed) == 1
        assert [(a.schedule_id, a.alert_type) for a in fresh if a.is_dismissed] == [
            (105, AlertType.SUPPLIER_CALL),
        ]

    def test_not_carried_when_dates_change(self, saved_items, stored):
        dismissed = AlertService.dismissed_keys(saved_items, stored)
        moved = [replace(saved_items[4], start_date=date(2025, 7, 21), end_date=date(2025, 7, 25))]
        fresh = AlertService().generate_alerts(moved, today=date(2025, 1, 1))

        assert AlertService.carry_dismissals(fresh, moved, dismissed) == 0
        assert not any(a.is_dismissed for a in fresh)
