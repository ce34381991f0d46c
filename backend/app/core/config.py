"""LodgeFlow settings, read from the environment or a local .env file."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process configuration. Only DATABASE_URL is required."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "LodgeFlow"
    debug: bool = False
    api_v1_prefix: str = "/v1"
    log_level: str = "INFO"

    # postgresql+asyncpg://... in deployments, sqlite+aiosqlite://... locally
    database_url: str

    # Comma-separated
    allowed_origins: str = "http://localhost:5173"

    # Invoices issued on conversion
    default_currency: str = "GBP"
    student_invoice_due_days: int = 30
    tourist_invoice_due_days: int = 7

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Settings shared by the whole process."""
    return Settings()
