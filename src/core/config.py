"""Application configuration using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_AUTO_ASSIGN_BATCH_SIZE = 100


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str
    """Database connection URL (asyncpg driver in production)."""

    # Error Tracking
    sentry_dsn: str | None = None
    """Sentry DSN for error tracking. Optional."""

    # Environment
    environment: str = "development"
    """Current environment (development, staging, production)."""

    debug: bool = False
    """Enable debug mode."""

    log_format: str | None = None
    """Logging format override (json or console). Defaults by environment."""

    # Icon auto-assignment
    auto_assign_batch_size: int = Field(default=DEFAULT_AUTO_ASSIGN_BATCH_SIZE, ge=1)
    """Clients loaded per page when an icon condition is swept across a tenant."""

    auto_assign_sweep_concurrency: int = Field(default=2, ge=1)
    """Max icon sweeps running at the same time in the background scheduler."""

    auto_assign_inline_sweeps: bool = False
    """Run icon sweeps to completion before returning (tests, scripts)."""

    @field_validator("log_format", mode="before")
    @classmethod
    def normalize_log_format(cls, value: object) -> str | None:
        """Accept json/console in any case; blank means environment default."""
        if value is None:
            return None
        text = str(value).strip().lower()
        if not text:
            return None
        if text not in {"json", "console"}:
            raise ValueError("LOG_FORMAT must be 'json' or 'console'.")
        return text


try:
    settings = Settings()
except Exception as exc:
    env_file = Path(".env")
    root_error = str(exc)
    suggestions = [
        "Ensure DATABASE_URL is set.",
        "AUTO_ASSIGN_BATCH_SIZE and AUTO_ASSIGN_SWEEP_CONCURRENCY must be positive integers.",
        "LOG_FORMAT accepts json or console.",
    ]

    raise RuntimeError(
        "Failed to initialize application settings. "
        f"Check environment variables in {env_file.resolve() if env_file.exists() else '.env'}.\n"
        + f"Error: {root_error}\n"
        + "\n".join(suggestions)
    ) from exc
