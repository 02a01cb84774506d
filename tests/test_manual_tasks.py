"""
Tests for manual task materialization and execution ordering.
"""
import json
import pytest
from datetime import date

from app.domain.entities.schedule_item import ManualTask, ScheduleItem
from app.domain.exceptions import (
    InvalidDateError,
    InvalidDurationError,
    UnknownPhaseError,
    ValidationError,
)
from app.domain.services.conflict_detector import detect_conflicts
from app.domain.services.manual_task_service import ManualTaskService, conflict_candidates
from app.domain.services.schedule_generator import ScheduleGenerator
from app.domain.services.schedule_order import (
    UNKNOWN_STEP_ORDER,
    linked_step_id,
    schedule_execution_order,
    sort_by_execution_order,
)


@pytest.fixture
def service(catalog):
    return ManualTaskService(catalog)


class TestMaterialize:
    """Tests for ManualTaskService.materialize."""

    def test_basic_task(self, service):
        item = service.materialize(1, ManualTask(
            description="  Livraison des fermes de toit ",
            start_date="2025-07-03",
            estimated_days=3,
            trade_type="charpentier",
        ))
        assert item.step_id.startswith("manual-")
        assert len(item.step_id) == len("manual-") + 12
        assert item.is_manual_task is True
        assert item.step_name == "Livraison des fermes de toit"
        assert item.start_date == date(2025, 7, 3)
        # Thursday + 3 business days -> Monday
        assert item.end_date == date(2025, 7, 7)
        assert item.is_manual_date is True
        assert item.trade_color == "#B45309"

    def test_explicit_color_wins(self, service):
        item = service.materialize(1, ManualTask("Visite", "2025-07-03", trade_color="#123456"))
        assert item.trade_color == "#123456"

    def test_linked_step_recorded(self, service):
        item = service.materialize(1, ManualTask("Mesures", "2025-08-08", linked_step_id="gypse"))
        assert item.measurement_after_step_id == "gypse"

    def test_unique_step_ids(self, service):
        first = service.materialize(1, ManualTask("A", "2025-07-03"))
        second = service.materialize(1, ManualTask("A", "2025-07-03"))
        assert first.step_id != second.step_id

    def test_blank_description(self, service):
        with pytest.raises(ValidationError):
            service.materialize(1, ManualTask("   ", "2025-07-03"))

    def test_bad_date(self, service):
        with pytest.raises(InvalidDateError):
            service.materialize(1, ManualTask("A", "03/07/2025"))

    def test_bad_duration(self, service):
        with pytest.raises(InvalidDurationError):
            service.materialize(1, ManualTask("A", "2025-07-03", estimated_days=0))

    def test_unknown_linked_step(self, service):
        with pytest.raises(UnknownPhaseError):
            service.materialize(1, ManualTask("A", "2025-07-03", linked_step_id="piscine"))


class TestManualTasksAndConflicts:
    """Manual tasks take part in conflicts unless they are overlays."""

    def test_task_conflicts_with_phase(self, service, catalog):
        items = ScheduleGenerator(catalog).build_schedule(1, "2025-06-02")
        task = service.materialize(1, ManualTask(
            "Inspection électrique", "2025-06-25", trade_type="electricite",
        ))
        conflicts = detect_conflicts(items + [task])
        assert [c.date for c in conflicts] == [date(2025, 6, 25)]
        assert conflicts[0].trades == ("charpentier", "electricite")

    def test_overlay_never_conflicts(self, service, catalog):
        items = ScheduleGenerator(catalog).build_schedule(1, "2025-06-02")
        overlay = service.materialize(1, ManualTask(
            "Vacances de la construction", "2025-07-21", estimated_days=10, is_overlay=True,
        ))
        assert detect_conflicts(items + [overlay]) == detect_conflicts(items)
        assert overlay not in conflict_candidates(items + [overlay])


def make_row(step_id, notes=None, linked=None):
    return ScheduleItem(
        project_id=1, step_id=step_id, step_name=step_id, trade_type="autre",
        trade_color="#000000", estimated_days=1, notes=notes, measurement_after_step_id=linked,
    )


class TestExecutionOrder:
    """Tests for schedule_order."""

    def test_phases_follow_catalog(self, catalog):
        rows = [make_row("gypse"), make_row("structure"), make_row("planification")]
        assert [r.step_id for r in sort_by_execution_order(catalog, rows)] == [
            "planification", "structure", "gypse",
        ]

    def test_linked_manual_task_follows_its_step(self, catalog):
        task = make_row("manual-aaa", linked="structure")
        rows = [make_row("gypse"), task, make_row("structure"), make_row("fenetres-portes")]
        ordered = sort_by_execution_order(catalog, rows)
        assert [r.step_id for r in ordered] == ["structure", "manual-aaa", "fenetres-portes", "gypse"]
        assert schedule_execution_order(catalog, task) == 3.5

    def test_link_from_json_notes(self, catalog):
        task = make_row("manual-bbb", notes=json.dumps({"linkedStepId": "gypse"}))
        assert linked_step_id(task) == "gypse"
        assert schedule_execution_order(catalog, task) == 5.5

    def test_unlinked_and_unknown_go_last(self, catalog):
        assert schedule_execution_order(catalog, make_row("manual-ccc", notes="plain text")) == UNKNOWN_STEP_ORDER
        assert schedule_execution_order(catalog, make_row("piscine")) == UNKNOWN_STEP_ORDER
