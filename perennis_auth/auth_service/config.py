"""
Configuration management for the auth service
"""
import logging
import secrets
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Auth service configuration loaded from environment variables"""

    # Runtime
    ENVIRONMENT: Literal["production", "development", "test"] = "production"
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./app.db"

    # Token signing
    JWT_SECRET: Optional[str] = None
    JWT_RESET_SECRET: Optional[str] = None
    SESSION_TOKEN_TTL_HOURS: int = Field(default=24, ge=1)
    RESET_TOKEN_TTL_MINUTES: int = Field(default=15, ge=15, le=60)

    # Password hashing
    BCRYPT_ROUNDS: int = Field(default=12, ge=4, le=31)

    # Reset links and mail
    FRONTEND_URL: str = "http://localhost:3000"
    EMAIL_USER: Optional[str] = None
    EMAIL_PASS: Optional[str] = None
    EMAIL_FROM_NAME: str = "Studio Perennis"
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT: int = 10

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def mail_enabled(self) -> bool:
        return bool(self.EMAIL_USER and self.EMAIL_PASS)

    @property
    def allowed_origins(self) -> List[str]:
        origins = list(self.CORS_ORIGINS)
        frontend = self.FRONTEND_URL.rstrip("/")
        if frontend and frontend not in origins:
            origins.append(frontend)
        return origins

    @model_validator(mode="after")
    def check_secrets(self) -> "Settings":
        """
        Production requires two distinct signing secrets. Elsewhere a missing
        secret is replaced by a random per-process value; the reset secret is
        never derived from the session secret.
        """
        if self.is_production:
            missing = [
                name for name in ("JWT_SECRET", "JWT_RESET_SECRET")
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(f"{', '.join(missing)} must be set in production")
        else:
            if not self.JWT_SECRET:
                logger.warning("JWT_SECRET not set; using a random secret for this process")
                self.JWT_SECRET = secrets.token_hex(32)
            if not self.JWT_RESET_SECRET:
                logger.warning("JWT_RESET_SECRET not set; using a random secret for this process")
                self.JWT_RESET_SECRET = secrets.token_hex(32)

        if self.JWT_SECRET == self.JWT_RESET_SECRET:
            raise ValueError("JWT_RESET_SECRET must differ from JWT_SECRET")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
