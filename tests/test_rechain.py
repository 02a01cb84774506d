"""
Tests for re-chaining rows after a move.
"""
import pytest
from dataclasses import replace
from datetime import date

from app.domain.exceptions import InvalidDateError, ScheduleItemNotFoundError
from app.domain.services.schedule_generator import ScheduleGenerator
from app.domain.services.schedule_rechain_service import ScheduleRechainService


@pytest.fixture
def items(catalog):
    """Generated rows with ids 1..7 in catalog order."""
    rows = ScheduleGenerator(catalog).build_schedule(1, "2025-06-02")
    return [replace(row, id=i) for i, row in enumerate(rows, start=1)]


@pytest.fixture
def rechainer(catalog):
    return ScheduleRechainService(catalog)


def dates(rows):
    return {row.step_id: (row.start_date, row.end_date) for row in rows}


class TestRechain:
    """Tests for ScheduleRechainService.rechain."""

    def test_move_pulls_later_rows(self, rechainer, items):
        changed = rechainer.rechain(items, moved_item_id=4, new_start_date="2025-06-30")

        assert [row.step_id for row in changed] == ["structure", "fenetres-portes", "gypse", "cuisine-sdb"]
        assert dates(changed) == {
            "structure": (date(2025, 6, 30), date(2025, 7, 18)),
            "fenetres-portes": (date(2025, 7, 21), date(2025, 7, 25)),
            "gypse": (date(2025, 7, 28), date(2025, 8, 15)),
            "cuisine-sdb": (date(2025, 8, 18), date(2025, 8, 29)),
        }

    def test_moved_row_is_pinned(self, rechainer, items):
        moved = rechainer.rechain(items, 4, "2025-06-30")[0]
        assert moved.is_manual_date is True
        assert moved.id == 4

    def test_earlier_rows_untouched(self, rechainer, items):
        changed = rechainer.rechain(items, 4, "2025-06-30")
        assert not {"planification", "plans-permis", "excavation-fondation"} & set(dates(changed))

    def test_new_duration(self, rechainer, items):
        changed = rechainer.rechain(items, 4, "2025-06-23", estimated_days=20)
        result = dates(changed)
        assert result["structure"] == (date(2025, 6, 23), date(2025, 7, 18))
        assert changed[0].estimated_days == 20
        assert result["fenetres-portes"][0] == date(2025, 7, 21)

    def test_pinned_row_resets_chain(self, rechainer, items):
        items[5] = replace(items[5], start_date=date(2025, 9, 1), end_date=date(2025, 9, 19), is_manual_date=True)

        changed = rechainer.rechain(items, 4, "2025-06-30")
        result = dates(changed)

        assert "gypse" not in result
        assert result["cuisine-sdb"] == (date(2025, 9, 22), date(2025, 10, 3))

    def test_unchanged_rows_not_returned(self, rechainer, items):
        changed = rechainer.rechain(items, 4, "2025-06-23")
        assert [row.step_id for row in changed] == ["structure"]

    def test_manual_task_moves_alone(self, rechainer, items, catalog):
        task = replace(items[3], id=99, step_id="manual-abcdef123456", measurement_after_step_id="structure")
        changed = rechainer.rechain(items + [task], 99, "2025-07-01")
        assert len(changed) == 1
        assert changed[0].start_date == date(2025, 7, 1)

    def test_manual_tasks_and_overlays_skipped(self, rechainer, items):
        task = replace(items[4], id=98, step_id="manual-000000000001", is_manual_date=True,
                       measurement_after_step_id="structure")
        overlay = replace(items[4], id=97, step_id="manual-000000000002", is_overlay=True,
                          measurement_after_step_id="structure")

        changed = rechainer.rechain(items + [task, overlay], 4, "2025-06-30")

        assert {row.id for row in changed} == {4, 5, 6, 7}

    def test_unknown_row(self, rechainer, items):
        with pytest.raises(ScheduleItemNotFoundError):
            rechainer.rechain(items, 404, "2025-06-30")

    def test_bad_date(self, rechainer, items):
        with pytest.raises(InvalidDateError):
            rechainer.rechain(items, 4, "next monday")
