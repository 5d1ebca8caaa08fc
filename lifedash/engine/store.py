"""Storage boundary — the only read/write operations the engine relies on.

Every query takes an explicit owner or goal identity; nothing walks an
object graph. Implementations: MemoryStore (in-process) and SqlStore
(async SQLAlchemy).
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Protocol

from lifedash.engine.models import (
    Activity,
    ActivityType,
    Goal,
    GoalProgressEntry,
    UserAccount,
)


class Store(Protocol):
    async def get_user(self, user_id: int) -> UserAccount | None: ...

    async def save_user(self, user: UserAccount) -> UserAccount: ...

    async def save_activity(self, activity: Activity) -> Activity: ...

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
        """Activities with start <= occurred_at < end, oldest first by default."""
        ...

    async def save_goal(self, goal: Goal) -> Goal:
        """Insert when `goal.id` is None, update otherwise. Returns the stored goal."""
        ...

    async def get_goal(self, goal_id: int) -> Goal | None: ...

    async def list_goals(
        self,
        user_id: int,
        *,
        activity_type: ActivityType | None = None,
    ) -> list[Goal]: ...

    async def delete_goal(self, goal_id: int) -> None:
        """Remove a goal together with its ledger entries."""
        ...

    async def upsert_progress(self, goal_id: int, day: date, value: float) -> GoalProgressEntry:
        """Atomic insert-or-replace on (goal_id, day)."""
        ...

    async def progress_between(
        self,
        goal_id: int,
        start: date,
        end_inclusive: date,
    ) -> list[GoalProgressEntry]: ...

    async def recent_progress(self, goal_id: int, limit: int) -> list[GoalProgressEntry]:
        """Newest first."""
        ...
