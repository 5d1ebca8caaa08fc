"""Entities and contracts — Pydantic v2 models.

Entities mirror the persisted shapes (user, activity, goal, ledger entry).
Contracts are the already-validated payloads handed to the engine and the
dashboard output consumed by the presentation layer. Everything serializes
with camelCase aliases; snake_case names are accepted on input too.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActivityType(str, Enum):
    GITHUB_COMMITS = "GITHUB_COMMITS"
    STUDY = "STUDY"
    GYM = "GYM"
    LINKEDIN_POST = "LINKEDIN_POST"
    DSA = "DSA"
    CUSTOM = "CUSTOM"


class RpgStat(str, Enum):
    # Declaration order is the canonical order of dashboard stat totals.
    STR = "STR"
    INT = "INT"
    DEX = "DEX"
    WIS = "WIS"
    CHA = "CHA"
    VIT = "VIT"


class GoalPeriod(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    CUSTOM = "CUSTOM"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


class UserAccount(CamelModel):
    id: int
    name: str
    email: str
    timezone: str | None = None
    tracked_activities: set[str] = Field(default_factory=set)
    notifications_enabled: bool = True
    weekly_email_enabled: bool = False
    created_at: datetime = Field(default_factory=_utcnow)


class Activity(CamelModel):
    """Immutable logged fact."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: int | None = None
    user_id: int
    type: ActivityType
    rpg_stat: RpgStat | None = None
    description: str | None = None
    value: float | None = None  # None counts as one unit
    metadata: str | None = None
    occurred_at: datetime
    platform: str | None = None
    repository: str | None = None
    difficulty: str | None = None
    time_spent_minutes: int | None = None
    sets_completed: int | None = None
    reps_completed: int | None = None
    likes: int | None = None
    comments: int | None = None
    shares: int | None = None


class Goal(CamelModel):
    id: int | None = None  # None until persisted
    user_id: int
    activity_type: ActivityType
    name: str
    period: GoalPeriod
    rpg_stat: RpgStat | None = None
    target_value: float
    custom_period_days: float | None = None
    unit: str | None = None
    current_value: float = 0.0  # derived, written only by the recalculator
    start_date: date | None = None
    end_date: date | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class GoalProgressEntry(CamelModel):
    goal_id: int
    date: date
    value: float


class GoalHistoryEntry(CamelModel):
    date: date
    value: float


# ---------------------------------------------------------------------------
# Ingestion / configuration contracts
# ---------------------------------------------------------------------------


class ActivityRequest(CamelModel):
    type: ActivityType
    rpg_stat: RpgStat | None = None
    description: str | None = Field(default=None, max_length=255)
    value: float | None = Field(default=None, ge=0)
    metadata: str | None = Field(default=None, max_length=255)
    occurred_at: datetime | None = None
    platform: str | None = Field(default=None, max_length=64)
    repository: str | None = Field(default=None, max_length=255)
    difficulty: str | None = Field(default=None, max_length=64)
    time_spent_minutes: int | None = Field(default=None, ge=0)
    sets_completed: int | None = Field(default=None, ge=0)
    reps_completed: int | None = Field(default=None, ge=0)
    likes: int | None = Field(default=None, ge=0)
    comments: int | None = Field(default=None, ge=0)
    shares: int | None = Field(default=None, ge=0)


class GoalRequest(CamelModel):
    activity_type: ActivityType
    period: GoalPeriod
    target_value: float = Field(ge=0)
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]
    unit: str | None = Field(default=None, max_length=32)
    custom_period_days: float | None = Field(default=None, gt=0)
    rpg_stat: RpgStat | None = None
    start_date: date | None = None
    end_date: date | None = None


class ProfileUpdate(CamelModel):
    name: str | None = None
    timezone: str | None = None
    tracked_activities: set[str] | None = None
    notifications_enabled: bool | None = None
    weekly_email_enabled: bool | None = None


# ---------------------------------------------------------------------------
# Dashboard output contract
# ---------------------------------------------------------------------------


class TrendPoint(CamelModel):
    period: str  # YYYY-MM-DD
    value: float


class ActivityTrend(CamelModel):
    label: str
    points: list[TrendPoint] = Field(default_factory=list)


class Streak(CamelModel):
    activity_type: str
    length: int


class Milestone(CamelModel):
    activity_type: str
    message: str


class GoalProgressView(CamelModel):
    id: int | None
    activity_type: str
    name: str
    period: str
    current_value: float
    target_value: float
    progress: float  # 0–1
    unit: str | None = None
    custom_period_days: float | None = None
    rpg_stat: str | None = None


class DashboardSummary(CamelModel):
    """Full dashboard payload — rebuilt on every request."""

    productivity_score: float = 0.0
    breakdown: dict[str, float] = Field(default_factory=dict)
    rpg_stats: dict[str, float] = Field(default_factory=dict)
    trends: list[ActivityTrend] = Field(default_factory=list)
    streaks: list[Streak] = Field(default_factory=list)
    milestones: list[Milestone] = Field(default_factory=list)
    goals: list[GoalProgressView] = Field(default_factory=list)


class ReminderDigest(CamelModel):
    recipient: str
    subject: str
    body: str
    pending: list[str] = Field(default_factory=list)
