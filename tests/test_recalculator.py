"""Tests for the progress ledger and goal recalculation."""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timedelta, timezone

import pytest

from lifedash.engine import ledger
from lifedash.engine.features import goal_progress_fraction
from lifedash.engine.memory import MemoryStore
from lifedash.engine.models import ActivityType, GoalPeriod
from lifedash.engine.recalculator import GoalLocks, goal_window, recompute, recompute_matching
from lifedash.errors import NotFound, Unauthenticated
from tests.conftest import NOW, TODAY, at, make_activity, make_goal, make_user

MONDAY = date(2026, 2, 16)


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------

class TestLedger:
    @pytest.mark.asyncio
    async def test_set_progress_is_idempotent(self, store):
        goal = await store.save_goal(make_goal())
        await ledger.set_progress(store, goal, TODAY, 2.0)
        await ledger.set_progress(store, goal, TODAY, 2.0)
        assert await ledger.sum_in_range(store, goal, TODAY, TODAY) == 2.0
        assert len(await store.progress_between(goal.id, TODAY, TODAY)) == 1

    @pytest.mark.asyncio
    async def test_set_progress_overwrites(self, store):
        goal = await store.save_goal(make_goal())
        await ledger.set_progress(store, goal, TODAY, 2.0)
        entry = await ledger.set_progress(store, goal, TODAY, 5.0)
        assert (entry.date, entry.value) == (TODAY, 5.0)
        assert await ledger.sum_in_range(store, goal, TODAY, TODAY) == 5.0

    @pytest.mark.asyncio
    async def test_sum_in_range_inclusive(self, store):
        goal = await store.save_goal(make_goal())
        for i, v in enumerate([1.0, 2.0, 4.0]):
            await ledger.set_progress(store, goal, MONDAY + timedelta(days=i), v)
        assert await ledger.sum_in_range(store, goal, MONDAY, MONDAY + timedelta(days=1)) == 3.0
        assert await ledger.sum_in_range(store, goal, MONDAY, MONDAY + timedelta(days=2)) == 7.0

    @pytest.mark.asyncio
    async def test_sum_in_range_empty(self, store):
        goal = await store.save_goal(make_goal())
        assert await ledger.sum_in_range(store, goal, MONDAY, TODAY) == 0.0

    @pytest.mark.asyncio
    async def test_recent_entries_newest_first(self, store):
        goal = await store.save_goal(make_goal())
        for i in range(20):
            await ledger.set_progress(store, goal, MONDAY - timedelta(days=i), float(i))
        recent = await ledger.recent_entries(store, goal)
        assert len(recent) == 14
        assert recent[0].date == MONDAY
        assert recent == sorted(recent, key=lambda e: e.date, reverse=True)
        assert len(await ledger.recent_entries(store, goal, 3)) == 3

    @pytest.mark.asyncio
    async def test_unsaved_goal_rejected(self, store):
        with pytest.raises(NotFound):
            await ledger.set_progress(store, make_goal(), TODAY, 1.0)

    @pytest.mark.asyncio
    async def test_entries_scoped_to_goal(self, store):
        a = await store.save_goal(make_goal())
        b = await store.save_goal(make_goal())
        await ledger.set_progress(store, a, TODAY, 3.0)
        assert await ledger.sum_in_range(store, b, TODAY, TODAY) == 0.0


# ---------------------------------------------------------------------------
# Recompute
# ---------------------------------------------------------------------------

class TestRecomputeFromActivities:
    @pytest.mark.asyncio
    async def test_sums_window_activities(self, store, user):
        await store.save_activity(make_activity(ActivityType.STUDY, at(MONDAY), value=2.0))
        await store.save_activity(make_activity(ActivityType.STUDY, at(TODAY)))
        await store.save_activity(make_activity(ActivityType.STUDY, at(MONDAY - timedelta(days=1))))  # last week
        await store.save_activity(make_activity(ActivityType.GYM, at(TODAY)))  # other category
        goal = await store.save_goal(make_goal())

        assert await recompute(store, user, goal, now=NOW) == 3.0
        assert goal.current_value == 3.0
        assert (await store.get_goal(goal.id)).current_value == 3.0

    @pytest.mark.asyncio
    async def test_other_users_ignored(self, store, user):
        await store.save_activity(make_activity(ActivityType.STUDY, at(TODAY), user_id=2))
        goal = await store.save_goal(make_goal())
        assert await recompute(store, user, goal, now=NOW) == 0.0

    @pytest.mark.asyncio
    async def test_future_activities_excluded_without_end_date(self, store, user):
        await store.save_activity(make_activity(ActivityType.STUDY, NOW + timedelta(hours=1)))
        goal = await store.save_goal(make_goal(period=GoalPeriod.DAILY))
        assert await recompute(store, user, goal, now=NOW) == 0.0

    @pytest.mark.asyncio
    async def test_explicit_end_date_is_half_open(self, store, user):
        end = date(2026, 2, 20)
        await store.save_activity(make_activity(ActivityType.STUDY, at(end, 23)))
        await store.save_activity(make_activity(ActivityType.STUDY, at(end + timedelta(days=1), 0)))
        goal = await store.save_goal(make_goal(end_date=end))
        assert await recompute(store, user, goal, now=NOW) == 1.0

    @pytest.mark.asyncio
    async def test_unsaved_goal_is_not_persisted(self, store, user):
        await store.save_activity(make_activity(ActivityType.STUDY, at(TODAY)))
        goal = make_goal()
        assert await recompute(store, user, goal, now=NOW) == 1.0
        assert goal.id is None
        assert await store.list_goals(user.id) == []

    @pytest.mark.asyncio
    async def test_custom_negative_days_is_seven_day_window(self, store, user):
        await store.save_activity(make_activity(ActivityType.GYM, NOW - timedelta(days=6, hours=23)))
        await store.save_activity(make_activity(ActivityType.GYM, NOW - timedelta(days=7, hours=1)))
        negative = await store.save_goal(
            make_goal(ActivityType.GYM, GoalPeriod.CUSTOM, custom_period_days=-1)
        )
        seven = await store.save_goal(
            make_goal(ActivityType.GYM, GoalPeriod.CUSTOM, custom_period_days=7)
        )
        assert await recompute(store, user, negative, now=NOW) == 1.0
        assert await recompute(store, user, seven, now=NOW) == 1.0

    @pytest.mark.asyncio
    async def test_requires_user(self, store):
        with pytest.raises(Unauthenticated):
            await recompute(store, None, make_goal(), now=NOW)


class TestLedgerPrecedence:
    @pytest.mark.asyncio
    async def test_weekly_ledger_progress_fraction(self, store, user):
        goal = await store.save_goal(make_goal(ActivityType.STUDY, GoalPeriod.WEEKLY, target_value=5))
        await ledger.set_progress(store, goal, MONDAY, 1.0)
        await ledger.set_progress(store, goal, MONDAY + timedelta(days=1), 2.0)

        assert await recompute(store, user, goal, now=NOW) == 3.0
        assert goal_progress_fraction(goal.current_value, goal.target_value) == pytest.approx(0.6)

    @pytest.mark.asyncio
    async def test_ledger_wins_over_larger_activity_sum(self, store, user):
        for h in range(10):
            await store.save_activity(make_activity(ActivityType.STUDY, at(TODAY, h)))
        goal = await store.save_goal(make_goal())
        assert await recompute(store, user, goal, now=NOW) == 10.0

        await ledger.set_progress(store, goal, TODAY, 1.0)
        assert await recompute(store, user, goal, now=NOW) == 1.0

    @pytest.mark.asyncio
    async def test_ledger_outside_window_falls_back(self, store, user):
        await store.save_activity(make_activity(ActivityType.STUDY, at(TODAY), value=4.0))
        goal = await store.save_goal(make_goal())
        await ledger.set_progress(store, goal, MONDAY - timedelta(days=3), 9.0)
        assert await recompute(store, user, goal, now=NOW) == 4.0

    @pytest.mark.asyncio
    async def test_zero_ledger_entry_still_takes_precedence(self, store, user):
        await store.save_activity(make_activity(ActivityType.STUDY, at(TODAY), value=4.0))
        goal = await store.save_goal(make_goal())
        await ledger.set_progress(store, goal, TODAY, 0.0)
        assert await recompute(store, user, goal, now=NOW) == 0.0

    @pytest.mark.asyncio
    async def test_ledger_range_uses_user_zone(self, store):
        user = await store.save_user(make_user(tz="Pacific/Kiritimati"))
        goal = await store.save_goal(make_goal(period=GoalPeriod.DAILY))
        # Locally it is already Feb 19.
        await ledger.set_progress(store, goal, TODAY, 5.0)
        await ledger.set_progress(store, goal, TODAY + timedelta(days=1), 2.0)
        assert goal_window(user, goal, NOW).start_date == TODAY + timedelta(days=1)
        assert await recompute(store, user, goal, now=NOW) == 2.0


class TestUserZoneWindows:
    @pytest.mark.asyncio
    async def test_weekly_window_after_dst_change(self, store):
        user = await store.save_user(make_user(tz="America/New_York"))
        goal = await store.save_goal(make_goal(period=GoalPeriod.WEEKLY))
        now = datetime(2026, 3, 11, 15, tzinfo=timezone.utc)
        # Sunday 23:30 EDT, the week before
        await store.save_activity(make_activity(ActivityType.STUDY, datetime(2026, 3, 9, 3, 30, tzinfo=timezone.utc)))
        # Monday 00:30 EDT
        await store.save_activity(make_activity(ActivityType.STUDY, datetime(2026, 3, 9, 4, 30, tzinfo=timezone.utc)))

        assert goal_window(user, goal, now).start == datetime(2026, 3, 9, 4, tzinfo=timezone.utc)
        assert await recompute(store, user, goal, now=now) == 1.0


class TestRecomputeMatching:
    @pytest.mark.asyncio
    async def test_only_matching_category(self, store, user):
        study = await store.save_goal(make_goal(ActivityType.STUDY))
        gym = await store.save_goal(make_goal(ActivityType.GYM))
        await store.save_activity(make_activity(ActivityType.STUDY, at(TODAY)))

        refreshed = await recompute_matching(store, user, ActivityType.STUDY, now=NOW)

        assert [g.id for g in refreshed] == [study.id]
        assert (await store.get_goal(study.id)).current_value == 1.0
        assert (await store.get_goal(gym.id)).current_value == 0.0

    @pytest.mark.asyncio
    async def test_multiple_goals_same_category(self, store, user):
        daily = await store.save_goal(make_goal(period=GoalPeriod.DAILY))
        monthly = await store.save_goal(make_goal(period=GoalPeriod.MONTHLY))
        await store.save_activity(make_activity(ActivityType.STUDY, at(TODAY)))
        await store.save_activity(make_activity(ActivityType.STUDY, at(date(2026, 2, 2))))

        await recompute_matching(store, user, ActivityType.STUDY, now=NOW)

        assert (await store.get_goal(daily.id)).current_value == 1.0
        assert (await store.get_goal(monthly.id)).current_value == 2.0

    @pytest.mark.asyncio
    async def test_deleted_goal_not_restored(self, store, user):
        goal = await store.save_goal(make_goal())
        stale = await store.get_goal(goal.id)
        await store.delete_goal(goal.id)

        await recompute(store, user, stale, now=NOW)

        assert await store.get_goal(goal.id) is None
        assert await store.list_goals(user.id) == []


# ---------------------------------------------------------------------------
# Per-goal serialization
# ---------------------------------------------------------------------------

class SlowStore(MemoryStore):
    """Tracks how many recomputes are between their read and their write."""

    def __init__(self) -> None:
        super().__init__()
        self.in_flight = 0
        self.max_in_flight = 0

    async def progress_between(self, goal_id, start, end_inclusive):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0.01)
        return await super().progress_between(goal_id, start, end_inclusive)

    async def save_goal(self, goal):
        saved = await super().save_goal(goal)
        if goal.id is not None and self.in_flight:
            self.in_flight -= 1
        return saved


class TestGoalLocks:
    def test_same_lock_while_referenced(self):
        locks = GoalLocks()
        lock = locks.for_goal(1)
        assert locks.for_goal(1) is lock
        assert locks.for_goal(2) is not lock

    @pytest.mark.asyncio
    async def test_concurrent_recomputes_do_not_interleave(self):
        store = SlowStore()
        user = await store.save_user(make_user())
        goal = await store.save_goal(make_goal())
        await store.save_activity(make_activity(ActivityType.STUDY, at(TODAY)))
        store.in_flight = 0

        copies = [await store.get_goal(goal.id) for _ in range(5)]
        results = await asyncio.gather(*(recompute(store, user, g, now=NOW) for g in copies))

        assert results == [1.0] * 5
        assert store.max_in_flight == 1
