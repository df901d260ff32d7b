from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="allow")

    environment: Literal["development", "staging", "production"] = "development"
    database_url: str = "sqlite+aiosqlite:///./rewards.db"
    database_echo: bool = False
    log_level: str = "INFO"

    # Provider source letters
    provider_letter_cache_ttl_seconds: int = Field(default=300, ge=0)
    offer_source_letter: str = "O"
    unknown_source_letter: str = "?"

    # Catalog overview
    overview_min_giftcard_value: int = 0

    @field_validator("offer_source_letter", "unknown_source_letter")
    @classmethod
    def _validate_letter(cls, value: str) -> str:
        cleaned = (value or "").strip()
        if len(cleaned) != 1:
            raise ValueError("Source letters must be a single character")
        return cleaned

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        if value is None:
            return "INFO"
        return str(value).strip().upper() or "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]


settings = get_settings()
