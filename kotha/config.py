from typing import List, Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str
    ENVIRONMENT: Literal["development", "production"] = "development"
    LOG_LEVEL: str = "INFO"
    SQL_ECHO: bool = False

    # Auth
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Public site
    SITE_URL: str = "https://newsandniche.com"
    CORS_ORIGINS: List[str] = [
        "http://localhost",
        "http://localhost:8000",
        "http://localhost:3000",
    ]

    # Search configuration
    SEARCH_RESULTS_PER_PAGE: int = 10
    SEARCH_MAX_PER_PAGE: int = 50
    SEARCH_MIN_QUERY_LENGTH: int = 2
    SEARCH_HIGHLIGHT_TAG: str = "mark"

    # Slugs
    SLUG_MAX_ATTEMPTS: int = 10_000
    SLUG_CONFLICT_RETRIES: int = 3

    READ_WORDS_PER_MINUTE: int = 200

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+asyncpg://", 1)
            elif v.startswith("postgres://"):
                return v.replace("postgres://", "postgresql+asyncpg://", 1)
        return v

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

settings = Settings()
