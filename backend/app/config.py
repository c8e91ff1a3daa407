"""Centralized application settings loaded from environment variables."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    APP_NAME: str = "Kanban Taskboard API"
    APP_VERSION: str = "1.0.0"
    DATABASE_URL: str = "sqlite:///./taskboard.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # Password hashing
    BCRYPT_ROUNDS: int = 12
    PASSWORD_MIN_LENGTH: int = 6

    # Bootstrap admin account, created on startup when missing
    SEED_DEFAULT_ADMIN: bool = True
    DEFAULT_ADMIN_NAME: str = "Admin User"
    DEFAULT_ADMIN_EMAIL: str = "admin@example.com"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"

    class Config:
        # Load backend/.env regardless of the working directory.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
