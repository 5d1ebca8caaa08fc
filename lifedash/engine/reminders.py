"""Pending-goal detection for reminders. Delivery is someone else's job."""

from __future__ import annotations

import logging
from datetime import datetime

from lifedash.config import settings
from lifedash.engine.models import Goal, ReminderDigest, UserAccount
from lifedash.engine.store import Store
from lifedash.engine.windows import local_today, resolve_zone, utcnow
from lifedash.errors import require_user

logger = logging.getLogger(__name__)


def _format_target(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def pending_label(goal: Goal) -> str:
    return f"{goal.activity_type.value} · {_format_target(goal.target_value)}"


async def pending_goals(
    store: Store,
    user: UserAccount,
    *,
    now: datetime | None = None,
) -> list[str]:
    """Goals with nothing positive recorded in the ledger for today."""
    require_user(user)
    today = local_today(resolve_zone(user.timezone), now or utcnow())
    pending: list[str] = []
    for goal in await store.list_goals(user.id):
        entries = await store.progress_between(goal.id, today, today)
        if sum((e.value for e in entries), 0.0) <= 0.0:
            pending.append(pending_label(goal))
    return pending


async def reminder_digest(
    store: Store,
    user: UserAccount,
    *,
    now: datetime | None = None,
) -> ReminderDigest | None:
    """Message for an external mailer, or None when nothing should be sent."""
    require_user(user)
    if not settings.email_reminders_enabled:
        logger.debug("Email reminders disabled; skipping digest for user %s", user.id)
        return None
    if not user.notifications_enabled:
        return None

    pending = await pending_goals(store, user, now=now)
    if not pending:
        return None

    body = "Hi {name},\n\nHere are your open goals for today:\n{goals}\n\nStay on it!".format(
        name=user.name,
        goals="\n".join(pending),
    )
    logger.info("Reminder digest for user %s with %d pending goals", user.id, len(pending))
    return ReminderDigest(
        recipient=user.email,
        subject="Goal reminder for today",
        body=body,
        pending=pending,
    )
