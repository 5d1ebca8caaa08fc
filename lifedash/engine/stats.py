"""Static stat and milestone configuration — no DB, config only.

DEFAULT_STAT_BY_TYPE is the single source for the stat an activity counts
toward when it carries no explicit tag. Ingestion and the dashboard stat
totals both read it.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from lifedash.engine.models import ActivityType, RpgStat

DEFAULT_STAT_BY_TYPE: Mapping[ActivityType, RpgStat] = MappingProxyType(
    {
        ActivityType.GITHUB_COMMITS: RpgStat.DEX,
        ActivityType.STUDY: RpgStat.INT,
        ActivityType.GYM: RpgStat.STR,
        ActivityType.LINKEDIN_POST: RpgStat.CHA,
        ActivityType.DSA: RpgStat.WIS,
        ActivityType.CUSTOM: RpgStat.VIT,
    }
)

_missing = set(ActivityType) - set(DEFAULT_STAT_BY_TYPE)
if _missing:
    raise RuntimeError(f"No default stat for: {', '.join(sorted(t.value for t in _missing))}")

# Milestone thresholds, highest first.
MILESTONES: tuple[tuple[float, str], ...] = (
    (50.0, "50+ logged — great consistency"),
    (20.0, "20+ milestone reached"),
)


def default_stat_for(activity_type: ActivityType) -> RpgStat:
    return DEFAULT_STAT_BY_TYPE[activity_type]


def resolve_stat(activity_type: ActivityType, explicit: RpgStat | None = None) -> RpgStat:
    """Explicit tag wins, otherwise the category default."""
    if explicit is not None:
        return explicit
    return default_stat_for(activity_type)


def list_stats() -> list[RpgStat]:
    return list(RpgStat)
