"""Goal operations — every goal-scoped call checks ownership first."""

from __future__ import annotations

import logging
from datetime import date, datetime

from lifedash.engine import ledger
from lifedash.engine.models import Goal, GoalHistoryEntry, GoalRequest, UserAccount
from lifedash.engine.recalculator import recompute
from lifedash.engine.store import Store
from lifedash.engine.windows import local_today, resolve_zone, utcnow
from lifedash.errors import NotFound, require_user

logger = logging.getLogger(__name__)


async def create_goal(
    store: Store,
    user: UserAccount,
    request: GoalRequest,
    *,
    now: datetime | None = None,
) -> Goal:
    """Always a new goal; several goals may share a category and period."""
    require_user(user)
    goal = Goal(user_id=user.id, **request.model_dump())
    # Not saved yet, so the initial value comes from raw activities.
    await recompute(store, user, goal, now=now)
    saved = await store.save_goal(goal)
    logger.info("User %s created %s goal %s (%s)", user.id, saved.period.value, saved.id, saved.name)
    return saved


async def list_goals(store: Store, user: UserAccount) -> list[Goal]:
    require_user(user)
    return await store.list_goals(user.id)


async def get_owned_goal(store: Store, user: UserAccount, goal_id: int) -> Goal:
    require_user(user)
    goal = await store.get_goal(goal_id)
    if goal is None or goal.user_id != user.id:
        logger.warning("Goal %s not found for user %s", goal_id, user.id)
        raise NotFound("Goal not found")
    return goal


async def goal_history(
    store: Store,
    user: UserAccount,
    goal_id: int,
    limit: int | None = None,
) -> list[GoalHistoryEntry]:
    goal = await get_owned_goal(store, user, goal_id)
    return await ledger.recent_entries(store, goal, limit)


async def set_goal_progress(
    store: Store,
    user: UserAccount,
    goal_id: int,
    value: float,
    day: date | None = None,
    *,
    now: datetime | None = None,
) -> GoalHistoryEntry:
    """Record `value` for `day` (default: today for the user) and refresh the goal."""
    goal = await get_owned_goal(store, user, goal_id)
    now = now or utcnow()
    day = day or local_today(resolve_zone(user.timezone), now)
    entry = await ledger.set_progress(store, goal, day, value)
    await recompute(store, user, goal, now=now)
    return entry


async def delete_goal(store: Store, user: UserAccount, goal_id: int) -> None:
    goal = await get_owned_goal(store, user, goal_id)
    await store.delete_goal(goal.id)
    logger.info("User %s deleted goal %s", user.id, goal_id)
