"""
Conflict Detector - Days on which two or more distinct trades overlap.

Every calendar day (weekends included) covered by a dated, non-overlay
item is checked. Overlay manual tasks are excluded entirely.
"""
from collections import OrderedDict
from datetime import date
from typing import Dict, Iterable, List, Set

from app.domain.entities.schedule_item import Conflict, ScheduleItem
from .business_calendar import iter_calendar_days, parse_iso_date


def detect_conflicts(items: Iterable[ScheduleItem]) -> List[Conflict]:
    """
    Find every day with at least two distinct active trades.

    Args:
        items: Schedule rows and materialized manual tasks

    Returns:
        Conflicts sorted by date; trades listed in order of first
        appearance in the input
    """
    trades_by_day: Dict[date, "OrderedDict[str, None]"] = {}

    for item in items:
        if item.is_overlay or not item.has_dates:
            continue
        for day in iter_calendar_days(item.start_date, item.end_date):
            trades_by_day.setdefault(day, OrderedDict())[item.trade_type] = None

    return [
        Conflict(date=day, trades=tuple(trades))
        for day, trades in sorted(trades_by_day.items())
        if len(trades) >= 2
    ]


def trades_in_conflict(conflicts: Iterable[Conflict]) -> Set[str]:
    """Every trade that takes part in at least one conflict."""
    trades: Set[str] = set()
    for conflict in conflicts:
        trades.update(conflict.trades)
    return trades


def has_conflict(conflicts: Iterable[Conflict], day) -> bool:
    day = parse_iso_date(day)
    return any(c.date == day for c in conflicts)


def conflict_trades(conflicts: Iterable[Conflict], day) -> List[str]:
    """Trades in conflict on a given day (empty if none)."""
    day = parse_iso_date(day)
    for conflict in conflicts:
        if conflict.date == day:
            return list(conflict.trades)
    return []
