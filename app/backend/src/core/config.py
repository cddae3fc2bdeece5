"""Application configuration utilities."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings derived from environment variables."""

    database_url: str = Field(
        default="sqlite:///./garage.db", alias="DATABASE_URL"
    )
    line_item_reference_policy: Literal["both", "either"] = Field(
        default="both", alias="LINE_ITEM_REFERENCE_POLICY"
    )
    max_parts_per_month: int = Field(default=0, ge=0, alias="MAX_PARTS_PER_MONTH")
    max_labor_types_per_month: int = Field(
        default=0, ge=0, alias="MAX_LABOR_TYPES_PER_MONTH"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings"]
