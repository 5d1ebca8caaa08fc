"""Shared fixtures for the test suite."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from lifedash.db import get_store
from lifedash.engine.memory import MemoryStore
from lifedash.engine.models import (
    Activity,
    ActivityType,
    Goal,
    GoalPeriod,
    RpgStat,
    UserAccount,
)
from lifedash.main import app

# Wednesday; the week started Monday 2026-02-16.
NOW = datetime(2026, 2, 18, 15, 0, tzinfo=timezone.utc)
TODAY = date(2026, 2, 18)


# ---------------------------------------------------------------------------
# Fake DB session (no real Postgres needed)
# ---------------------------------------------------------------------------

class FakeSession:
    """Minimal stand-in for AsyncSession used in connector tests."""

    def __init__(self, rows: list[dict[str, Any]] | None = None, scalar: Any = 1):
        self._rows = rows or []
        self._scalar = scalar
        self.statements: list[tuple[str, dict[str, Any]]] = []
        self.commits = 0

    async def execute(self, stmt, params=None):
        self.statements.append((str(stmt), dict(params or {})))
        return FakeResult(self._rows, self._scalar)

    async def commit(self):
        self.commits += 1

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        pass


class FakeResult:
    def __init__(self, rows: list[dict[str, Any]], scalar: Any = None):
        self._rows = rows
        self._keys = list(rows[0].keys()) if rows else []
        self._scalar = scalar

    def keys(self):
        return self._keys

    def fetchall(self):
        return [tuple(r[k] for k in self._keys) for r in self._rows]

    def scalar_one(self):
        return self._scalar


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def make_user(user_id: int = 1, tz: str | None = "UTC", **overrides: Any) -> UserAccount:
    fields: dict[str, Any] = dict(
        id=user_id,
        name=f"User {user_id}",
        email=f"user{user_id}@example.com",
        timezone=tz,
    )
    fields.update(overrides)
    return UserAccount(**fields)


def make_activity(
    activity_type: ActivityType,
    occurred_at: datetime,
    value: float | None = None,
    user_id: int = 1,
    rpg_stat: RpgStat | None = None,
    **overrides: Any,
) -> Activity:
    return Activity(
        user_id=user_id,
        type=activity_type,
        occurred_at=occurred_at,
        value=value,
        rpg_stat=rpg_stat,
        **overrides,
    )


def make_goal(
    activity_type: ActivityType = ActivityType.STUDY,
    period: GoalPeriod = GoalPeriod.WEEKLY,
    target_value: float = 5.0,
    user_id: int = 1,
    **overrides: Any,
) -> Goal:
    fields: dict[str, Any] = dict(
        user_id=user_id,
        activity_type=activity_type,
        name=f"{activity_type.value.title()} {period.value.lower()}",
        period=period,
        target_value=target_value,
    )
    fields.update(overrides)
    return Goal(**fields)


def at(day: date, hour: int = 12) -> datetime:
    return datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
async def user(store) -> UserAccount:
    return await store.save_user(make_user())


@pytest.fixture()
def override_store(store):
    """Override the FastAPI dependency so no real DB is needed."""
    async def _override():
        yield store

    app.dependency_overrides[get_store] = _override
    yield store
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_store):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
