"""Profile updates that affect the engine: timezone, tracked categories, flags."""

from __future__ import annotations

import logging

from lifedash.engine.models import ProfileUpdate, UserAccount
from lifedash.engine.store import Store
from lifedash.engine.windows import resolve_zone
from lifedash.errors import require_user

logger = logging.getLogger(__name__)

# Fields an explicit null resets; the rest ignore nulls.
_CLEARABLE = {"timezone"}


async def update_profile(store: Store, user: UserAccount, update: ProfileUpdate) -> UserAccount:
    """Apply the fields that were sent; unsent fields keep their value.

    A null timezone falls back to the configured or system zone.
    """
    require_user(user)
    changes = {
        k: v
        for k, v in update.model_dump(exclude_unset=True).items()
        if v is not None or k in _CLEARABLE
    }
    if update.timezone:
        resolve_zone(update.timezone)  # raises InvalidInput on unknown zones

    updated = user.model_copy(update=changes)
    await store.save_user(updated)
    logger.info("User %s updated profile fields: %s", user.id, ", ".join(sorted(changes)) or "none")
    return updated
