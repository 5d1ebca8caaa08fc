"""Pure stateless dashboard functions — math only, no I/O.

Every sum counts an activity as its `value`, or 1.0 when the value is absent.
Category-keyed outputs follow ActivityType declaration order.
"""

from __future__ import annotations

from datetime import date, timedelta, tzinfo
from typing import Iterable

from lifedash.engine.models import (
    Activity,
    ActivityTrend,
    ActivityType,
    Goal,
    GoalProgressView,
    Milestone,
    RpgStat,
    Streak,
    TrendPoint,
)
from lifedash.engine.stats import MILESTONES, list_stats, resolve_stat
from lifedash.engine.windows import system_zone


def contribution(activity: Activity) -> float:
    return activity.value if activity.value is not None else 1.0


def sum_contributions(activities: Iterable[Activity]) -> float:
    return sum((contribution(a) for a in activities), 0.0)


def _in_type_order(keys: Iterable[ActivityType]) -> list[ActivityType]:
    present = set(keys)
    return [t for t in ActivityType if t in present]


# ---------------------------------------------------------------------------
# Breakdown
# ---------------------------------------------------------------------------

def category_breakdown(activities: Iterable[Activity]) -> dict[ActivityType, float]:
    totals: dict[ActivityType, float] = {}
    for activity in activities:
        totals[activity.type] = totals.get(activity.type, 0.0) + contribution(activity)
    return {t: totals[t] for t in _in_type_order(totals)}


def productivity_score(breakdown: dict[ActivityType, float]) -> float:
    return sum(breakdown.values(), 0.0)


# ---------------------------------------------------------------------------
# Trends
# ---------------------------------------------------------------------------

def build_trends(activities: Iterable[Activity], zone: tzinfo | None = None) -> list[ActivityTrend]:
    """One series per category of per-day sums, days ascending.

    Days are cut at the system's local midnight unless `zone` is given.
    """
    zone = zone or system_zone()
    grouped: dict[ActivityType, dict[str, float]] = {}
    for activity in activities:
        day = activity.occurred_at.astimezone(zone).strftime("%Y-%m-%d")
        per_day = grouped.setdefault(activity.type, {})
        per_day[day] = per_day.get(day, 0.0) + contribution(activity)

    return [
        ActivityTrend(
            label=t.value,
            points=[TrendPoint(period=day, value=v) for day, v in sorted(grouped[t].items())],
        )
        for t in _in_type_order(grouped)
    ]


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------

def activity_days(activities: Iterable[Activity], zone: tzinfo) -> dict[ActivityType, set[date]]:
    """Distinct local calendar days with at least one activity, per category."""
    days: dict[ActivityType, set[date]] = {}
    for activity in activities:
        days.setdefault(activity.type, set()).add(activity.occurred_at.astimezone(zone).date())
    return days


def streak_length(days: set[date], today: date) -> int:
    """Consecutive days ending today that are present in `days`."""
    count = 0
    cursor = today
    while cursor in days:
        count += 1
        cursor -= timedelta(days=1)
    return count


def build_streaks(activities: Iterable[Activity], zone: tzinfo, today: date) -> list[Streak]:
    days_by_type = activity_days(activities, zone)
    streaks: list[Streak] = []
    for t in _in_type_order(days_by_type):
        length = streak_length(days_by_type[t], today)
        if length > 0:
            streaks.append(Streak(activity_type=t.value, length=length))
    return streaks


# ---------------------------------------------------------------------------
# Milestones & stats
# ---------------------------------------------------------------------------

def milestone_for(total: float) -> str | None:
    for threshold, message in MILESTONES:
        if total >= threshold:
            return message
    return None


def build_milestones(breakdown: dict[ActivityType, float]) -> list[Milestone]:
    milestones: list[Milestone] = []
    for t, total in breakdown.items():
        message = milestone_for(total)
        if message is not None:
            milestones.append(Milestone(activity_type=t.value, message=message))
    return milestones


def build_stat_totals(activities: Iterable[Activity]) -> dict[RpgStat, float]:
    totals: dict[RpgStat, float] = {stat: 0.0 for stat in list_stats()}
    for activity in activities:
        stat = resolve_stat(activity.type, activity.rpg_stat)
        totals[stat] += contribution(activity)
    return totals


# ---------------------------------------------------------------------------
# Goal progress view
# ---------------------------------------------------------------------------

def goal_progress_fraction(current: float | None, target: float | None) -> float:
    """current / target capped at 1.0; 0.0 when there is no positive target."""
    if not target or target <= 0:
        return 0.0
    return max(0.0, min(1.0, (current or 0.0) / target))


def goal_progress_view(goal: Goal) -> GoalProgressView:
    return GoalProgressView(
        id=goal.id,
        activity_type=goal.activity_type.value,
        name=goal.name,
        period=goal.period.value,
        current_value=goal.current_value,
        target_value=goal.target_value,
        progress=goal_progress_fraction(goal.current_value, goal.target_value),
        unit=goal.unit,
        custom_period_days=goal.custom_period_days,
        rpg_stat=goal.rpg_stat.value if goal.rpg_stat else None,
    )
