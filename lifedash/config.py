from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://localhost:5432/lifedash"
    default_tz: str | None = None  # None = system local zone
    api_key: str | None = None
    log_level: str = "INFO"
    create_tables_on_startup: bool = True

    # Activity feed / history windows
    feed_default_limit: int = 20
    feed_max_limit: int = 50
    recent_activity_days: int = 30
    goal_history_limit: int = 14

    # CUSTOM goals with a missing or non-positive length fall back to this
    custom_period_default_days: float = 7.0

    # Reminders only decide what is pending; delivery lives elsewhere
    email_reminders_enabled: bool = False

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
