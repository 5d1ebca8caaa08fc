"""HTTP router — activities, goals, dashboard, reminders, profile."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from lifedash.auth import current_user
from lifedash.config import settings
from lifedash.db import get_store
from lifedash.engine import activities, dashboard, goals, profile, reminders
from lifedash.engine.models import (
    Activity,
    ActivityRequest,
    ActivityType,
    DashboardSummary,
    Goal,
    GoalHistoryEntry,
    GoalRequest,
    ProfileUpdate,
    ReminderDigest,
    UserAccount,
)
from lifedash.engine.store import Store

router = APIRouter(prefix="/api")


def _parse_date(value: str | None, name: str) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid date for '{name}': {value}")


# ---------------------------------------------------------------------------
# /api/activities
# ---------------------------------------------------------------------------


@router.post("/activities", response_model=Activity, tags=["activities"])
async def create_activity(
    request: ActivityRequest,
    store: Store = Depends(get_store),
    user: UserAccount = Depends(current_user),
) -> Activity:
    return await activities.log_activity(store, user, request)


@router.get("/activities", response_model=list[Activity], tags=["activities"])
async def recent_activities(
    store: Store = Depends(get_store),
    user: UserAccount = Depends(current_user),
) -> list[Activity]:
    return await activities.recent_activities(store, user)


@router.get("/activities/feed", response_model=list[Activity], tags=["activities"])
async def activity_feed(
    store: Store = Depends(get_store),
    user: UserAccount = Depends(current_user),
    limit: int | None = Query(default=None, description="Max entries (clamped to 1..50)"),
) -> list[Activity]:
    return await activities.activity_feed(store, user, limit)


@router.get("/activities/by-type/{activity_type}", response_model=list[Activity], tags=["activities"])
async def activities_by_type(
    activity_type: ActivityType,
    store: Store = Depends(get_store),
    user: UserAccount = Depends(current_user),
) -> list[Activity]:
    return await activities.activities_by_type(store, user, activity_type)


# ---------------------------------------------------------------------------
# /api/goals
# ---------------------------------------------------------------------------


@router.post("/goals", response_model=Goal, tags=["goals"])
async def create_goal(
    request: GoalRequest,
    store: Store = Depends(get_store),
    user: UserAccount = Depends(current_user),
) -> Goal:
    return await goals.create_goal(store, user, request)


@router.get("/goals", response_model=list[Goal], tags=["goals"])
async def list_goals(
    store: Store = Depends(get_store),
    user: UserAccount = Depends(current_user),
) -> list[Goal]:
    return await goals.list_goals(store, user)


@router.get("/goals/{goal_id}/history", response_model=list[GoalHistoryEntry], tags=["goals"])
async def goal_history(
    goal_id: int,
    store: Store = Depends(get_store),
    user: UserAccount = Depends(current_user),
) -> list[GoalHistoryEntry]:
    return await goals.goal_history(store, user, goal_id)


@router.post("/goals/{goal_id}/history", response_model=GoalHistoryEntry, tags=["goals"])
async def set_goal_progress(
    goal_id: int,
    store: Store = Depends(get_store),
    user: UserAccount = Depends(current_user),
    value: float = Query(..., description="Progress value for the day"),
    day: str | None = Query(default=None, alias="date", description="Day (YYYY-MM-DD, default: today)"),
) -> GoalHistoryEntry:
    return await goals.set_goal_progress(store, user, goal_id, value, _parse_date(day, "date"))


@router.delete("/goals/{goal_id}", status_code=204, tags=["goals"])
async def delete_goal(
    goal_id: int,
    store: Store = Depends(get_store),
    user: UserAccount = Depends(current_user),
) -> Response:
    await goals.delete_goal(store, user, goal_id)
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# /api/dashboard
# ---------------------------------------------------------------------------


@router.get("/dashboard", response_model=DashboardSummary, tags=["dashboard"])
async def dashboard_summary(
    store: Store = Depends(get_store),
    user: UserAccount = Depends(current_user),
) -> DashboardSummary:
    return await dashboard.summary_for_user(store, user)


# ---------------------------------------------------------------------------
# /api/reminders
# ---------------------------------------------------------------------------


@router.get("/reminders", response_model=list[str], tags=["reminders"])
async def pending_reminders(
    store: Store = Depends(get_store),
    user: UserAccount = Depends(current_user),
) -> list[str]:
    return await reminders.pending_goals(store, user)


@router.post("/reminders/email", response_model=ReminderDigest | None, status_code=202, tags=["reminders"])
async def reminder_email(
    store: Store = Depends(get_store),
    user: UserAccount = Depends(current_user),
) -> ReminderDigest | None:
    if not settings.email_reminders_enabled:
        raise HTTPException(status_code=501, detail="Email reminders are disabled")
    return await reminders.reminder_digest(store, user)


# ---------------------------------------------------------------------------
# /api/profile
# ---------------------------------------------------------------------------


@router.get("/profile", response_model=UserAccount, tags=["profile"])
async def get_profile(user: UserAccount = Depends(current_user)) -> UserAccount:
    return user


@router.patch("/profile", response_model=UserAccount, tags=["profile"])
async def update_profile(
    update: ProfileUpdate,
    store: Store = Depends(get_store),
    user: UserAccount = Depends(current_user),
) -> UserAccount:
    return await profile.update_profile(store, user, update)
