"""Configuration settings for FixCity."""

import os
from functools import lru_cache
from typing import Any

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables.

    Keyword arguments override individual values, e.g. ``Settings(JWT_SECRET="x")``.
    """

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./fixcity.db")

    # JWT
    JWT_SECRET: str = os.getenv("JWT_SECRET", "")
    JWT_EXPIRES_MINUTES: int = int(os.getenv("JWT_EXPIRES_MINUTES", "15"))
    JWT_REFRESH_SECRET: str = os.getenv("JWT_REFRESH_SECRET", "")
    JWT_REFRESH_EXPIRES_DAYS: int = int(os.getenv("JWT_REFRESH_EXPIRES_DAYS", "30"))
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

    # Credentials and lockout
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
    MAX_LOGIN_ATTEMPTS: int = int(os.getenv("MAX_LOGIN_ATTEMPTS", "5"))
    LOCK_TIME_MINUTES: int = int(os.getenv("LOCK_TIME_MINUTES", "120"))
    RESET_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "10"))

    # Cookies / CORS
    REFRESH_COOKIE_MAX_AGE_DAYS: int = int(os.getenv("REFRESH_COOKIE_MAX_AGE_DAYS", "30"))
    CORS_ORIGINS: list[str] = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "production")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    def __init__(self, **overrides: Any) -> None:
        for key, value in overrides.items():
            if not hasattr(type(self), key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    def validate(self) -> list[str]:
        """Validate settings and return list of problems."""
        errors = []
        if not self.JWT_SECRET:
            errors.append("JWT_SECRET is not set")
        if not self.JWT_REFRESH_SECRET:
            errors.append("JWT_REFRESH_SECRET is not set")
        if self.JWT_SECRET and self.JWT_SECRET == self.JWT_REFRESH_SECRET:
            errors.append("JWT_SECRET and JWT_REFRESH_SECRET should differ")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
