import os
from functools import lru_cache

from loguru import logger
from pydantic_settings import BaseSettings
from pydantic import field_validator, Field


class Settings(BaseSettings):
    """Application settings."""
    # General settings
    debug: bool = False
    app_name: str = "Monopoly Web"

    # Web application
    WEBAPP_HOST: str = Field(default="0.0.0.0", alias='WEBAPP_HOST')
    WEBAPP_PORT: int = Field(default=int(os.environ.get('PORT', 8080)), alias='WEBAPP_PORT')  # Use PORT from environment or default to 8080

    # Logging
    LOG_LEVEL: str = Field(default="INFO", alias='LOG_LEVEL')
    LOG_DIR: str = Field(default="logs", alias='LOG_DIR')

    # Database settings
    db_url: str = Field(default="sqlite+aiosqlite:///./monopoly.db", alias='DATABASE_URL')
    SEED_STATIC_DATA: bool = Field(default=True, alias='SEED_STATIC_DATA')

    # Lobby
    ROOM_CODE_LENGTH: int = Field(default=6, alias='ROOM_CODE_LENGTH')
    DEFAULT_MAX_PLAYERS: int = Field(default=8, alias='DEFAULT_MAX_PLAYERS')
    MIN_PLAYERS: int = Field(default=2, alias='MIN_PLAYERS')

    # Game
    STARTING_CASH: int = Field(default=1500, alias='STARTING_CASH')
    TRADE_OFFER_TTL_SECONDS: int = Field(default=300, alias='TRADE_OFFER_TTL_SECONDS')

    @field_validator('ROOM_CODE_LENGTH')
    @classmethod
    def _check_room_code_length(cls, v: int) -> int:
        # rooms.code is VARCHAR(10)
        if not 4 <= v <= 10:
            logger.warning(f"ROOM_CODE_LENGTH={v} out of range, using 6")
            return 6
        return v

    @field_validator('LOG_LEVEL', mode='before')
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        return str(v).upper() if v else "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"  # Ignore any extra fields not defined above
        populate_by_name = True


@lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    # Clear cache if needed for testing: get_settings.cache_clear()
    return Settings()
