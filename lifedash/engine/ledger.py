"""Progress ledger — one value per (goal, calendar day), upsert only."""

from __future__ import annotations

import logging
from datetime import date

from lifedash.config import settings
from lifedash.engine.models import Goal, GoalHistoryEntry
from lifedash.engine.store import Store
from lifedash.errors import NotFound

logger = logging.getLogger(__name__)


def _goal_id(goal: Goal) -> int:
    if goal.id is None:
        raise NotFound("Goal has not been saved")
    return goal.id


async def set_progress(store: Store, goal: Goal, day: date, value: float) -> GoalHistoryEntry:
    """Replace (not add to) the value recorded for `day`."""
    entry = await store.upsert_progress(_goal_id(goal), day, value)
    logger.info("Goal %s progress for %s set to %s", goal.id, entry.date, entry.value)
    return GoalHistoryEntry(date=entry.date, value=entry.value)


async def sum_in_range(store: Store, goal: Goal, start: date, end_inclusive: date) -> float:
    entries = await store.progress_between(_goal_id(goal), start, end_inclusive)
    return sum((e.value for e in entries), 0.0)


async def recent_entries(store: Store, goal: Goal, limit: int | None = None) -> list[GoalHistoryEntry]:
    entries = await store.recent_progress(_goal_id(goal), limit or settings.goal_history_limit)
    return [GoalHistoryEntry(date=e.date, value=e.value) for e in entries]
