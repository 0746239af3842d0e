"""Application configuration."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    log_level: str = "INFO"
    global_xp_multiplier: float = 1.0
    level_base_xp: int = 100
    max_level: int = 50
    leaderboard_page_size: int = 50

    @field_validator("global_xp_multiplier", mode="after")
    @classmethod
    def positive_multiplier(cls, v: float) -> float:
        """A zero or negative multiplier would wipe or invert every grant."""
        if v <= 0:
            raise ValueError("global_xp_multiplier must be greater than zero")
        return v

    @field_validator("log_level", mode="after")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()


settings = Settings()
