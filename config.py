"""
Centralised settings loader.

Every value can be overridden through the environment or a local `.env`.
"""

from __future__ import annotations
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ------------------------------------------------------------------ #
#  Master settings model
# ------------------------------------------------------------------ #
class _Settings(BaseSettings):
    # ─── runtime / DB ────────────────────────────────────────────────
    env_name: str = Field("local", alias="ENV_NAME")
    database_url: str = Field("sqlite+aiosqlite:///./mealplanner.db", alias="DATABASE_URL")
    auto_create_tables: bool = Field(True, alias="AUTO_CREATE_TABLES")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    cors_origins: list[str] = Field(["*"], alias="CORS_ORIGINS")

    # ─── auth ────────────────────────────────────────────────────────
    jwt_secret: str = Field("changeme", alias="JWT_SECRET")
    jwt_ttl_minutes: int = Field(60 * 24 * 7, alias="JWT_TTL_MINUTES")

    # ─── Gemini ──────────────────────────────────────────────────────
    gemini_api_key: str | None = Field(None, alias="GEMINI_API_KEY")
    gemini_model: str = Field("gemini-2.0-flash", alias="GEMINI_MODEL")
    gemini_timeout_seconds: float = Field(30.0, alias="GEMINI_TIMEOUT_SECONDS")
    gemini_temperature: float = Field(0.9, alias="GEMINI_TEMPERATURE")
    gemini_max_output_tokens: int = Field(1024, alias="GEMINI_MAX_OUTPUT_TOKENS")

    # how many accepted meals are fed back to the prompt for variety
    recent_meal_limit: int = Field(10, alias="RECENT_MEAL_LIMIT")

    # allow other teammates’ env-vars without crashing
    model_config = SettingsConfigDict(
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )


# ------------------------------------------------------------------ #
#  Cached singleton accessor
# ------------------------------------------------------------------ #
@lru_cache
def _cached() -> _Settings:  # pragma: no cover
    return _Settings()  # type: ignore[call-arg]


settings: _Settings = _cached()
