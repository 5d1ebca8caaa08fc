"""In-process Store — dict tables, snapshot copies on every read."""

from __future__ import annotations

import itertools
import threading
from datetime import date, datetime

from lifedash.engine.models import (
    Activity,
    ActivityType,
    Goal,
    GoalProgressEntry,
    UserAccount,
)


class MemoryStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: dict[int, UserAccount] = {}
        self._activities: dict[int, Activity] = {}
        self._goals: dict[int, Goal] = {}
        self._progress: dict[tuple[int, date], GoalProgressEntry] = {}
        self._activity_ids = itertools.count(1)
        self._goal_ids = itertools.count(1)

    # -- users ---------------------------------------------------------------

    async def get_user(self, user_id: int) -> UserAccount | None:
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def save_user(self, user: UserAccount) -> UserAccount:
        with self._lock:
            self._users[user.id] = user.model_copy(deep=True)
        return user

    # -- activities ----------------------------------------------------------

    async def save_activity(self, activity: Activity) -> Activity:
        with self._lock:
            stored = activity.model_copy(update={"id": next(self._activity_ids)})
            self._activities[stored.id] = stored
        return stored

    async def list_activities(
        self,
        user_id: int,
        *,
        activity_type: ActivityType | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
        newest_first: bool = False,
    ) -> list[Activity]:
        rows = [
            a
            for a in list(self._activities.values())
            if a.user_id == user_id
            and (activity_type is None or a.type == activity_type)
            and (start is None or a.occurred_at >= start)
            and (end is None or a.occurred_at < end)
        ]
        rows.sort(key=lambda a: (a.occurred_at, a.id or 0), reverse=newest_first)
        if limit is not None:
            rows = rows[:limit]
        return rows

    # -- goals ---------------------------------------------------------------

    async def save_goal(self, goal: Goal) -> Goal:
        with self._lock:
            if goal.id is None:
                goal.id = next(self._goal_ids)
            elif goal.id not in self._goals:
                # Deleted meanwhile; an UPDATE would match no row.
                return goal
            self._goals[goal.id] = goal.model_copy(deep=True)
        return goal

    async def get_goal(self, goal_id: int) -> Goal | None:
        goal = self._goals.get(goal_id)
        return goal.model_copy(deep=True) if goal else None

    async def list_goals(
        self,
        user_id: int,
        *,
        activity_type: ActivityType | None = None,
    ) -> list[Goal]:
        return [
            g.model_copy(deep=True)
            for g in sorted(self._goals.values(), key=lambda g: g.id or 0)
            if g.user_id == user_id and (activity_type is None or g.activity_type == activity_type)
        ]

    async def delete_goal(self, goal_id: int) -> None:
        with self._lock:
            self._goals.pop(goal_id, None)
            for key in [k for k in self._progress if k[0] == goal_id]:
                del self._progress[key]

    # -- ledger --------------------------------------------------------------

    async def upsert_progress(self, goal_id: int, day: date, value: float) -> GoalProgressEntry:
        entry = GoalProgressEntry(goal_id=goal_id, date=day, value=value)
        with self._lock:
            self._progress[(goal_id, day)] = entry
        return entry

    async def progress_between(
        self,
        goal_id: int,
        start: date,
        end_inclusive: date,
    ) -> list[GoalProgressEntry]:
        return sorted(
            (e for (gid, day), e in list(self._progress.items()) if gid == goal_id and start <= day <= end_inclusive),
            key=lambda e: e.date,
        )

    async def recent_progress(self, goal_id: int, limit: int) -> list[GoalProgressEntry]:
        entries = [e for (gid, _), e in list(self._progress.items()) if gid == goal_id]
        entries.sort(key=lambda e: e.date, reverse=True)
        return entries[:limit]
