from functools import lru_cache
from pathlib import Path
from typing import Union
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Database
    DB_URL: str = "postgresql://postgres:password@db:5432/travelplanner"
    DB_ECHO: bool = False  # Set to True for SQL query logging in development

    # Connection Pool Settings
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600  # Recycle connections after 1 hour

    # Gemini
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_SUGGESTIONS_MODEL: str = "gemini-2.5-flash"
    GEMINI_TIMEOUT_SECONDS: int = 60

    # Qloo
    QLOO_API_KEY: str = ""
    QLOO_BASE_URL: str = "https://api.qloo.com/v1"
    QLOO_TIMEOUT_SECONDS: float = 15.0

    # Rate Limiting
    ENABLE_RATE_LIMITING: bool = True
    RATE_LIMIT_GENERATE: str = "5/minute"
    RATE_LIMIT_CHAT: str = "30/minute"
    RATE_LIMIT_READ: str = "60/minute"
    RATE_LIMIT_DELETE: str = "10/minute"

    # Application Settings
    CHAT_MODE: str = "catalog"  # "catalog" serves seed records, "generative" calls Gemini + Qloo
    DEFAULT_BUDGET: float = 2500.0
    DEFAULT_TRIP_DAYS: int = 5
    RECOMMENDATION_COUNT: int = 6
    FALLBACK_DESTINATION_ID: str = "swiss-alps"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "app.log"

    # CORS
    ALLOWED_ORIGINS: Union[list, str] = ["http://localhost:5173"]

    @field_validator('ALLOWED_ORIGINS', mode='before')
    @classmethod
    def parse_allowed_origins(cls, v):
        """Parse ALLOWED_ORIGINS from comma-separated string or list"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    @field_validator('CHAT_MODE')
    @classmethod
    def validate_chat_mode(cls, v):
        v = v.strip().lower()
        if v not in ("catalog", "generative"):
            raise ValueError("CHAT_MODE must be 'catalog' or 'generative'")
        return v

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).parents[3] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
