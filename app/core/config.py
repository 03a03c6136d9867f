# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import EmailStr, Field


class Settings(BaseSettings):
    DATABASE_URL: str = Field(default="sqlite:///./tickets.db")
    APP_NAME: str = "Helpdesk API"
    APP_DESC: str = "Support tickets with admin triage and email notifications"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # CORS origins, comma separated
    CORS_ORIGINS: str = "*"

    # Notifications go to (and are sent from) this single address
    ADMIN_EMAIL: EmailStr = "admin@example.com"

    # Auth: tokens are issued upstream; without a secret, signatures are not checked
    AUTH_GROUPS_CLAIM: str = "cognito:groups"
    AUTH_ADMIN_GROUP: str = "ADMIN"
    AUTH_JWT_SECRET: str | None = None
    AUTH_JWT_ALGORITHMS: str = "HS256"

    # Attachments
    UPLOAD_DIR: str = "./uploads"
    BLOB_BASE_URL: str = "/uploads"
    ATTACHMENT_CONTENT_TYPE: str = "image/jpeg"

    # SMTP; empty host means emails are only logged
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT: int = 30

    # Background jobs
    SCHEDULER_ENABLED: bool = True
    QUEUE_POLL_SECONDS: int = Field(default=10, ge=1)
    QUEUE_BATCH_SIZE: int = Field(default=10, ge=1)
    REMINDER_HOUR: int = Field(default=8, ge=0, le=23)
    REMINDER_MINUTE: int = Field(default=0, ge=0, le=59)

    # Pydantic v2 style config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def jwt_algorithms(self) -> list[str]:
        return [a.strip() for a in self.AUTH_JWT_ALGORITHMS.split(",") if a.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
