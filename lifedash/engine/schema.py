"""Table definitions — SQLAlchemy Core, used for DDL only.

Queries live in connector.py as hand-written SQL.
"""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
)

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String, nullable=False),
    Column("email", String, nullable=False, unique=True),
    Column("timezone", String),
    Column("tracked_activities", JSON, nullable=False, default=list),
    Column("notifications_enabled", Boolean, nullable=False, default=True),
    Column("weekly_email_enabled", Boolean, nullable=False, default=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

activities = Table(
    "activities",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False, index=True),
    Column("type", String(32), nullable=False),
    Column("rpg_stat", String(8)),
    Column("description", String(255)),
    Column("metric_value", Float),
    Column("metadata", String(255)),
    Column("occurred_at", DateTime(timezone=True), nullable=False, index=True),
    Column("platform", String(64)),
    Column("repository", String(255)),
    Column("difficulty", String(64)),
    Column("time_spent_minutes", Integer),
    Column("sets_completed", Integer),
    Column("reps_completed", Integer),
    Column("likes", Integer),
    Column("comments", Integer),
    Column("shares", Integer),
)

goals = Table(
    "goals",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False, index=True),
    Column("activity_type", String(32), nullable=False),
    Column("name", String(120), nullable=False),
    Column("period", String(16), nullable=False),
    Column("rpg_stat", String(8)),
    Column("target_value", Float, nullable=False),
    Column("custom_period_days", Float),
    Column("unit", String(32)),
    Column("current_value", Float, nullable=False, default=0.0),
    Column("start_date", Date),
    Column("end_date", Date),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

goal_progress = Table(
    "goal_progress",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("goal_id", Integer, ForeignKey("goals.id", ondelete="CASCADE"), nullable=False),
    Column("progress_date", Date, nullable=False),
    Column("metric_value", Float, nullable=False),
    UniqueConstraint("goal_id", "progress_date", name="uq_goal_progress_goal_date"),
)
