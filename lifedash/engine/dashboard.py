"""Dashboard builder.

Rebuilt from the user's full activity and goal lists on every call; goals
contribute their cached current_value, everything else is fresh.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from lifedash.engine import features
from lifedash.engine.models import Activity, DashboardSummary, Goal, UserAccount
from lifedash.engine.store import Store
from lifedash.engine.windows import local_today, resolve_zone, utcnow
from lifedash.errors import require_user

logger = logging.getLogger(__name__)


def build_summary(
    user: UserAccount,
    activities: Sequence[Activity],
    goals: Sequence[Goal],
    *,
    now: datetime | None = None,
) -> DashboardSummary:
    require_user(user)
    zone = resolve_zone(user.timezone)
    today = local_today(zone, now or utcnow())

    breakdown = features.category_breakdown(activities)
    stats = features.build_stat_totals(activities)

    return DashboardSummary(
        productivity_score=features.productivity_score(breakdown),
        breakdown={t.value: v for t, v in breakdown.items()},
        rpg_stats={s.value: v for s, v in stats.items()},
        trends=features.build_trends(activities),
        streaks=features.build_streaks(activities, zone, today),
        milestones=features.build_milestones(breakdown),
        goals=[features.goal_progress_view(g) for g in goals],
    )


async def summary_for_user(
    store: Store,
    user: UserAccount,
    *,
    now: datetime | None = None,
) -> DashboardSummary:
    require_user(user)
    activities = await store.list_activities(user.id)
    goals = await store.list_goals(user.id)
    summary = build_summary(user, activities, goals, now=now)
    logger.debug(
        "Dashboard for user %s: %d activities, %d goals, score %s",
        user.id, len(activities), len(goals), summary.productivity_score,
    )
    return summary
