"""Database connector — async Store over users, activities, goals, goal_progress.

Hand-written SQL through an AsyncSession. Writes commit immediately so
every engine call either fully persists or surfaces the failure.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from lifedash.engine.models import (
    Activity,
    ActivityType,
    Goal,
    GoalProgressEntry,
    UserAccount,
)

_ACTIVITY_COLUMNS = (
    "id, user_id, type, rpg_stat, description, metric_value, metadata, occurred_at, "
    "platform, repository, difficulty, time_spent_minutes, sets_completed, reps_completed, "
    "likes, comments, shares"
)

_GOAL_COLUMNS = (
    "id, user_id, activity_type, name, period, rpg_stat, target_value, custom_period_days, "
    "unit, current_value, start_date, end_date, created_at"
)


def _rows(result: Any) -> list[dict[str, Any]]:
    columns = list(result.keys())
    return [dict(zip(columns, r)) for r in result.fetchall()]


def _user_from_row(row: dict[str, Any]) -> UserAccount:
    tracked = row.get("tracked_activities") or []
    if isinstance(tracked, str):
        tracked = json.loads(tracked)
    return UserAccount(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        timezone=row.get("timezone"),
        tracked_activities=set(tracked),
        notifications_enabled=row.get("notifications_enabled", True),
        weekly_email_enabled=row.get("weekly_email_enabled", False),
        created_at=row["created_at"],
    )


def _activity_from_row(row: dict[str, Any]) -> Activity:
    data = dict(row)
    data["value"] = data.pop("metric_value", None)
    return Activity.model_validate(data)


def _goal_from_row(row: dict[str, Any]) -> Goal:
    return Goal.model_validate(row)


def _entry_from_row(goal_id: int, row: dict[str, Any]) -> GoalProgressEntry:
    return GoalProgressEntry(goal_id=goal_id, date=row["progress_date"], value=row["metric_value"])


class SqlStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # -- users ---------------------------------------------------------------

    async def get_user(self, user_id: int) -> UserAccount | None:
        result = await self._session.execute(
            text(
                "SELECT id, name, email, timezone, tracked_activities, notifications_enabled, "
                "weekly_email_enabled, created_at FROM users WHERE id = :id"
            ),
            {"id": user_id},
        )
        rows = _rows(result)
        return _user_from_row(rows[0]) if rows else None

    async def save_user(self, user: UserAccount) -> UserAccount:
        await self._session.execute(
            text(
                "UPDATE users SET name = :name, timezone = :timezone, "
                "tracked_activities = :tracked_activities, "
                "notifications_enabled = :notifications_enabled, "
                "weekly_email_enabled = :weekly_email_enabled "
                "WHERE id = :id"
            ),
            {
                "id": user.id,
                "name": user.name,
                "timezone": user.timezone,
                "tracked_activities": json.dumps(sorted(user.tracked_activities)),
                "notifications_enabled": user.notifications_enabled,
                "weekly_email_enabled": user.weekly_email_enabled,
            },
        )
        await self._session.commit()
        return user

    # -- activities ----------------------------------------------------------

    async def save_activity(self, activity: Activity) -> Activity:
        params = activity.model_dump(exclude={"id"})
        params["metric_value"] = params.pop("value")
        params["type"] = activity.type.value
        params["rpg_stat"] = activity.rpg_stat.value if activity.rpg_stat else None
        result = await self._session.execute(
            text(
                "INSERT INTO activities (user_id, type, rpg_stat, description, metric_value, metadata, "
                "occurred_at, platform, repository, difficulty, time_spent_minutes, sets_completed, "
                "reps_completed, likes, comments, shares) VALUES (:user_id, :type, :rpg_stat, "
                ":description, :metric_value, :metadata, :occurred_at, :platform, :repository, "
                ":difficulty, :time_spent_minutes, :sets_completed, :reps_completed, :likes, "
                ":comments, :shares) RETURNING id"
            ),
            params,
        )
        new_id = result.scalar_one()
        await self._session.commit()
        return activity.model_copy(update={"id": new_id})

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
        query = f"SELECT {_ACTIVITY_COLUMNS} FROM activities WHERE user_id = :user_id"
        params: dict[str, Any] = {"user_id": user_id}
        if activity_type is not None:
            query += " AND type = :type"
            params["type"] = activity_type.value
        if start is not None:
            query += " AND occurred_at >= :start"
            params["start"] = start
        if end is not None:
            query += " AND occurred_at < :end"
            params["end"] = end
        query += " ORDER BY occurred_at DESC, id DESC" if newest_first else " ORDER BY occurred_at, id"
        if limit is not None:
            query += " LIMIT :limit"
            params["limit"] = limit

        result = await self._session.execute(text(query), params)
        return [_activity_from_row(r) for r in _rows(result)]

    # -- goals ---------------------------------------------------------------

    async def save_goal(self, goal: Goal) -> Goal:
        params = goal.model_dump(mode="json", exclude={"id", "created_at"})
        params["created_at"] = goal.created_at
        params["start_date"] = goal.start_date
        params["end_date"] = goal.end_date
        if goal.id is None:
            result = await self._session.execute(
                text(
                    "INSERT INTO goals (user_id, activity_type, name, period, rpg_stat, target_value, "
                    "custom_period_days, unit, current_value, start_date, end_date, created_at) "
                    "VALUES (:user_id, :activity_type, :name, :period, :rpg_stat, :target_value, "
                    ":custom_period_days, :unit, :current_value, :start_date, :end_date, :created_at) "
                    "RETURNING id"
                ),
                params,
            )
            goal.id = result.scalar_one()
        else:
            params["id"] = goal.id
            await self._session.execute(
                text(
                    "UPDATE goals SET activity_type = :activity_type, name = :name, period = :period, "
                    "rpg_stat = :rpg_stat, target_value = :target_value, "
                    "custom_period_days = :custom_period_days, unit = :unit, "
                    "current_value = :current_value, start_date = :start_date, end_date = :end_date "
                    "WHERE id = :id"
                ),
                params,
            )
        await self._session.commit()
        return goal

    async def get_goal(self, goal_id: int) -> Goal | None:
        result = await self._session.execute(
            text(f"SELECT {_GOAL_COLUMNS} FROM goals WHERE id = :id"),
            {"id": goal_id},
        )
        rows = _rows(result)
        return _goal_from_row(rows[0]) if rows else None

    async def list_goals(
        self,
        user_id: int,
        *,
        activity_type: ActivityType | None = None,
    ) -> list[Goal]:
        query = f"SELECT {_GOAL_COLUMNS} FROM goals WHERE user_id = :user_id"
        params: dict[str, Any] = {"user_id": user_id}
        if activity_type is not None:
            query += " AND activity_type = :activity_type"
            params["activity_type"] = activity_type.value
        query += " ORDER BY id"
        result = await self._session.execute(text(query), params)
        return [_goal_from_row(r) for r in _rows(result)]

    async def delete_goal(self, goal_id: int) -> None:
        await self._session.execute(text("DELETE FROM goal_progress WHERE goal_id = :id"), {"id": goal_id})
        await self._session.execute(text("DELETE FROM goals WHERE id = :id"), {"id": goal_id})
        await self._session.commit()

    # -- ledger --------------------------------------------------------------

    async def upsert_progress(self, goal_id: int, day: date, value: float) -> GoalProgressEntry:
        # Relies on uq_goal_progress_goal_date; concurrent writers collapse to one row.
        result = await self._session.execute(
            text(
                "INSERT INTO goal_progress (goal_id, progress_date, metric_value) "
                "VALUES (:goal_id, :day, :value) "
                "ON CONFLICT (goal_id, progress_date) DO UPDATE SET metric_value = excluded.metric_value "
                "RETURNING progress_date, metric_value"
            ),
            {"goal_id": goal_id, "day": day, "value": value},
        )
        row = _rows(result)[0]
        await self._session.commit()
        return _entry_from_row(goal_id, row)

    async def progress_between(
        self,
        goal_id: int,
        start: date,
        end_inclusive: date,
    ) -> list[GoalProgressEntry]:
        result = await self._session.execute(
            text(
                "SELECT progress_date, metric_value FROM goal_progress "
                "WHERE goal_id = :goal_id AND progress_date >= :start AND progress_date <= :end "
                "ORDER BY progress_date"
            ),
            {"goal_id": goal_id, "start": start, "end": end_inclusive},
        )
        return [_entry_from_row(goal_id, r) for r in _rows(result)]

    async def recent_progress(self, goal_id: int, limit: int) -> list[GoalProgressEntry]:
        result = await self._session.execute(
            text(
                "SELECT progress_date, metric_value FROM goal_progress "
                "WHERE goal_id = :goal_id ORDER BY progress_date DESC LIMIT :limit"
            ),
            {"goal_id": goal_id, "limit": limit},
        )
        return [_entry_from_row(goal_id, r) for r in _rows(result)]
