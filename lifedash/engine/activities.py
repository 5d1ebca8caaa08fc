"""Activity ingestion and reads.

Manually logged activities and integration imports both enter through
log_activity(); every goal tracking the activity's category is refreshed
before it returns.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from lifedash.config import settings
from lifedash.engine.models import Activity, ActivityRequest, ActivityType, UserAccount
from lifedash.engine.recalculator import recompute_matching
from lifedash.engine.stats import resolve_stat
from lifedash.engine.store import Store
from lifedash.engine.windows import utcnow
from lifedash.errors import require_user

logger = logging.getLogger(__name__)


async def log_activity(
    store: Store,
    user: UserAccount,
    request: ActivityRequest,
    *,
    now: datetime | None = None,
) -> Activity:
    require_user(user)
    now = now or utcnow()
    fields = request.model_dump(exclude={"rpg_stat", "occurred_at"})
    activity = Activity(
        user_id=user.id,
        rpg_stat=resolve_stat(request.type, request.rpg_stat),
        occurred_at=request.occurred_at or now,
        **fields,
    )
    saved = await store.save_activity(activity)
    logger.info("User %s logged %s activity %s", user.id, saved.type.value, saved.id)

    await recompute_matching(store, user, saved.type, now=now)
    return saved


def clamp_feed_limit(limit: int | None) -> int:
    if limit is None:
        limit = settings.feed_default_limit
    return max(1, min(limit, settings.feed_max_limit))


async def activity_feed(store: Store, user: UserAccount, limit: int | None = None) -> list[Activity]:
    """Newest first, at most feed_max_limit entries."""
    require_user(user)
    return await store.list_activities(user.id, limit=clamp_feed_limit(limit), newest_first=True)


async def recent_activities(
    store: Store,
    user: UserAccount,
    *,
    days: int | None = None,
    now: datetime | None = None,
) -> list[Activity]:
    require_user(user)
    now = now or utcnow()
    start = now - timedelta(days=days or settings.recent_activity_days)
    return await store.list_activities(user.id, start=start, end=now + timedelta(microseconds=1))


async def activities_by_type(store: Store, user: UserAccount, activity_type: ActivityType) -> list[Activity]:
    require_user(user)
    return await store.list_activities(user.id, activity_type=activity_type)
