from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Security
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    BCRYPT_ROUNDS: int = 12

    # Database
    DATABASE_URL: str = "sqlite:///./tasks.db"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    LOG_LEVEL: str = "INFO"
    ACTIVITY_DEFAULT_LIMIT: int = 50


@lru_cache()
def get_settings() -> Settings:
    return Settings()
