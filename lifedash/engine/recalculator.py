"""Goal progress recalculation.

`current_value` on a goal is a cache of recompute()'s output for the goal's
current window. It is refreshed explicitly after activity ingestion and after
ledger writes, never as a side effect of touching the goal.

Source selection: when the ledger holds any entry inside the window, the
result is the ledger sum and raw activities are ignored. Only a goal without
in-window ledger entries (or one not saved yet) sums raw activities. Starting
to use the ledger can therefore lower a goal's value until enough days are
recorded.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from datetime import datetime, timedelta

from lifedash.engine import features
from lifedash.engine.models import ActivityType, Goal, UserAccount
from lifedash.engine.store import Store
from lifedash.engine.windows import Window, resolve_window, resolve_zone, utcnow
from lifedash.errors import require_user

logger = logging.getLogger(__name__)


class GoalLocks:
    """asyncio.Lock per goal id, alive only while someone holds or awaits it."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = weakref.WeakValueDictionary()

    def for_goal(self, goal_id: int) -> asyncio.Lock:
        lock = self._locks.get(goal_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[goal_id] = lock
        return lock


goal_locks = GoalLocks()


def goal_window(user: UserAccount, goal: Goal, now: datetime | None = None) -> Window:
    return resolve_window(
        goal.period,
        resolve_zone(user.timezone),
        start_date=goal.start_date,
        end_date=goal.end_date,
        custom_period_days=goal.custom_period_days,
        now=now,
    )


async def _compute(store: Store, user: UserAccount, goal: Goal, now: datetime) -> float:
    window = goal_window(user, goal, now)

    if goal.id is not None:
        entries = await store.progress_between(goal.id, window.start_date, window.end_date)
        if entries:
            logger.debug(
                "Goal %s: %d ledger entries in %s..%s, raw activities ignored",
                goal.id, len(entries), window.start_date, window.end_date,
            )
            return sum((e.value for e in entries), 0.0)

    end = window.end
    if goal.end_date is None:
        # Open windows end at `now`; an activity stamped at `now` is inside.
        end += timedelta(microseconds=1)
    activities = await store.list_activities(
        user.id,
        activity_type=goal.activity_type,
        start=window.start,
        end=end,
    )
    return features.sum_contributions(activities)


async def recompute(
    store: Store,
    user: UserAccount,
    goal: Goal,
    *,
    now: datetime | None = None,
) -> float:
    """Recompute and store `goal.current_value`; returns the new value.

    Saved goals are recomputed under their per-goal lock so concurrent
    refreshes of one goal never interleave their read and write.
    """
    require_user(user)
    now = now or utcnow()

    if goal.id is None:
        goal.current_value = await _compute(store, user, goal, now)
        return goal.current_value

    async with goal_locks.for_goal(goal.id):
        value = await _compute(store, user, goal, now)
        goal.current_value = value
        await store.save_goal(goal)

    logger.debug("Goal %s recomputed: %s", goal.id, value)
    return value


async def recompute_matching(
    store: Store,
    user: UserAccount,
    activity_type: ActivityType,
    *,
    now: datetime | None = None,
) -> list[Goal]:
    """Refresh every goal of `user` tracking `activity_type`."""
    require_user(user)
    now = now or utcnow()
    goals = await store.list_goals(user.id, activity_type=activity_type)
    for goal in goals:
        await recompute(store, user, goal, now=now)
    return goals
