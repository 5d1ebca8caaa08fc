"""API key verification and current-user resolution for the HTTP surface.

Credentials are issued elsewhere; requests arrive with the resolved user id
in X-User-Id.
"""

from fastapi import Depends, HTTPException, Header

from lifedash.config import settings
from lifedash.db import get_store
from lifedash.engine.models import UserAccount
from lifedash.engine.store import Store
from lifedash.errors import Unauthenticated


async def verify_api_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    authorization: str | None = Header(default=None),
) -> str:
    """Validate API key via X-API-Key or Authorization: Bearer.

    If API_KEY is not set, passes through (no auth).
    If set, requires matching key or raises 401.
    """
    if settings.api_key is None:
        return ""

    key = x_api_key
    if key is None and authorization and authorization.startswith("Bearer "):
        key = authorization[7:].strip()

    if key != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")

    return key


async def current_user(
    x_user_id: int | None = Header(default=None, alias="X-User-Id"),
    store: Store = Depends(get_store),
    _: str = Depends(verify_api_key),
) -> UserAccount:
    if x_user_id is None:
        raise Unauthenticated("Missing user identity")
    user = await store.get_user(x_user_id)
    if user is None:
        raise Unauthenticated("Unknown user")
    return user
