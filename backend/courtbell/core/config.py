# courtbell/core/config.py
"""
Application configuration using Pydantic Settings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
import json
from pydantic import field_validator


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """

    # Application
    APP_NAME: str = "CourtBell"
    DEBUG: bool = True

    # Database
    DATABASE_URL: str = "sqlite:///./courtbell.db"

    # JWT Authentication
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    PASSWORD_RESET_EXPIRY_HOURS: int = 1

    # Persistence backend: "database" (SQL document table) | "local" (JSON files)
    STORAGE_BACKEND: str = "database"
    LOCAL_STORAGE_DIR: str = "./data"

    # Reminders
    REMINDER_NOTICE_SECONDS: int = 20
    REMINDER_MISFIRE_GRACE_SECONDS: int = 60
    SSE_PING_SECONDS: int = 15

    # AWS Configuration (legal tools suggestion)
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "ap-south-1"
    LEGAL_TOOLS_MODEL_ID: str = "anthropic.claude-3-haiku-20240307-v1:0"
    LEGAL_TOOLS_MAX_TOKENS: int = 2048
    LEGAL_TOOLS_TEMPERATURE: float = 0.2

    @field_validator("LEGAL_TOOLS_MODEL_ID", mode="before")
    @classmethod
    def strip_model_id(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("STORAGE_BACKEND", mode="before")
    @classmethod
    def normalize_storage_backend(cls, v: str) -> str:
        value = (v or "database").strip().lower()
        if value not in ("database", "local"):
            raise ValueError("STORAGE_BACKEND must be 'database' or 'local'")
        return value

    # CORS
    CORS_ORIGINS: str = '["http://localhost:3000"]'

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from string to list"""
        try:
            if isinstance(self.CORS_ORIGINS, str):
                return json.loads(self.CORS_ORIGINS)
            return self.CORS_ORIGINS
        except json.JSONDecodeError:
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Create settings instance
settings = Settings()
