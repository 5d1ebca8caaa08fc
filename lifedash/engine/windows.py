"""Period window resolution — pure, never touches storage.

A goal's window is the half-open instant interval [start, end) its progress
is summed over. The calendar-day bounds of the same window (inclusive) are
carried alongside for ledger queries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tzlocal import get_localzone

from lifedash.config import settings
from lifedash.engine.models import GoalPeriod
from lifedash.errors import InvalidInput


@dataclass(frozen=True, slots=True)
class Window:
    start: datetime
    end: datetime
    start_date: date
    end_date: date  # inclusive


def system_zone() -> tzinfo:
    """The host's IANA zone, DST rules included."""
    return get_localzone()


def resolve_zone(tz_name: str | None) -> tzinfo:
    """IANA name → zone. Empty falls back to the configured, then system, zone."""
    name = tz_name or settings.default_tz
    if not name:
        return system_zone()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidInput(f"Unknown timezone: {name}")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def start_of_day(day: date, zone: tzinfo) -> datetime:
    """Midnight of `day` in `zone`, as a UTC instant."""
    return datetime.combine(day, time.min, tzinfo=zone).astimezone(timezone.utc)


def local_today(zone: tzinfo, now: datetime | None = None) -> date:
    return (now or utcnow()).astimezone(zone).date()


def quarter_start(day: date) -> date:
    return day.replace(month=((day.month - 1) // 3) * 3 + 1, day=1)


def custom_period_length(custom_period_days: float | None) -> float:
    if custom_period_days is None or custom_period_days <= 0:
        return settings.custom_period_default_days
    return float(custom_period_days)


def natural_start(
    period: GoalPeriod,
    zone: tzinfo,
    now: datetime,
    custom_period_days: float | None = None,
) -> datetime:
    today = local_today(zone, now)
    if period == GoalPeriod.DAILY:
        return start_of_day(today, zone)
    if period == GoalPeriod.WEEKLY:
        return start_of_day(today - timedelta(days=today.weekday()), zone)
    if period == GoalPeriod.MONTHLY:
        return start_of_day(today.replace(day=1), zone)
    if period == GoalPeriod.QUARTERLY:
        return start_of_day(quarter_start(today), zone)
    if period == GoalPeriod.CUSTOM:
        minutes = max(0, round(custom_period_length(custom_period_days) * 24 * 60))
        return now - timedelta(minutes=minutes)
    raise InvalidInput(f"Unknown goal period: {period}")


def resolve_window(
    period: GoalPeriod,
    zone: tzinfo,
    *,
    start_date: date | None = None,
    end_date: date | None = None,
    custom_period_days: float | None = None,
    now: datetime | None = None,
) -> Window:
    """Resolve the active window for a period kind.

    Explicit `start_date` replaces the natural start (midnight in `zone`).
    Explicit `end_date` closes the window at midnight of the following day,
    otherwise the window runs up to `now`. `now` is read once per call.
    """
    now = (now or utcnow()).astimezone(timezone.utc)

    if start_date is not None:
        start = start_of_day(start_date, zone)
    else:
        start = natural_start(period, zone, now, custom_period_days)

    if end_date is not None:
        end = start_of_day(end_date + timedelta(days=1), zone)
        last_day = end_date
    else:
        end = now
        last_day = local_today(zone, now)

    return Window(
        start=start,
        end=end,
        start_date=start.astimezone(zone).date(),
        end_date=last_day,
    )
