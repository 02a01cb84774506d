"""
Schedule Order - Execution order of schedule rows.

Rows follow catalog order. A manual task linked to a step sits right after
that step (index + 0.5); unknown steps go last.
"""
import json
from typing import Iterable, List, Optional

from app.domain.entities.phase import PhaseCatalog
from app.domain.entities.schedule_item import ScheduleItem

UNKNOWN_STEP_ORDER = 999


def step_execution_order(catalog: PhaseCatalog, step_id: str) -> float:
    index = catalog.index_of(step_id)
    return UNKNOWN_STEP_ORDER if index is None else index


def linked_step_id(item: ScheduleItem) -> Optional[str]:
    """Step a manual task is attached to, from its row or its JSON notes."""
    if item.measurement_after_step_id:
        return item.measurement_after_step_id
    if not item.notes:
        return None
    try:
        payload = json.loads(item.notes)
    except ValueError:
        return None
    if isinstance(payload, dict):
        return payload.get("linkedStepId") or None
    return None


def schedule_execution_order(catalog: PhaseCatalog, item: ScheduleItem) -> float:
    if item.is_manual_task:
        linked = linked_step_id(item)
        if linked:
            return step_execution_order(catalog, linked) + 0.5
    return step_execution_order(catalog, item.step_id)


def sort_by_execution_order(catalog: PhaseCatalog, items: Iterable[ScheduleItem]) -> List[ScheduleItem]:
    """Stable sort; rows sharing an order keep their input order."""
    return sorted(items, key=lambda item: schedule_execution_order(catalog, item))
