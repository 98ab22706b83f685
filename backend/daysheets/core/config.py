from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator
from typing import Any, ClassVar
import json
from pathlib import Path
import os


class Settings(BaseSettings):
    PROJECT_NAME: str = "Daysheets API"
    API_PREFIX: str = "/api"

    # JWT configuration (provide a fallback for local development)
    SECRET_KEY: str = "fallback_secret_for_dev_only"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Failed login throttling (per email and per client IP)
    MAX_LOGIN_ATTEMPTS: int = 5
    LOGIN_ATTEMPT_WINDOW: int = 300

    # Password hashing cost
    BCRYPT_ROUNDS: int = 11

    # Use an absolute path so running the app from different directories
    # (e.g., repo root or backend/) always resolves the same DB file.
    BASE_DIR: ClassVar[Path] = Path(__file__).resolve().parents[2]
    SQLALCHEMY_DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'daysheets.db'}"

    # Redis connection URL for caching; empty or "disabled" turns caching off
    REDIS_URL: str = "redis://localhost:6379/0"

    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    CORS_ALLOW_ALL: bool = False

    LOG_LEVEL: str = "INFO"
    ENABLE_CONSOLE_TRACING: bool = False

    # AviationStack flight status API
    AVSTACK_BASE_URL: str = ""
    AVSTACK_ACCESS_KEY: str = ""
    FLIGHT_CACHE_TTL: int = 300

    # logo.dev airline logo proxy
    LOGO_DEV_API_KEY: str = ""
    LOGO_RATE_LIMIT: int = 10
    LOGO_RATE_WINDOW: int = 60  # seconds
    LOGO_CACHE_TTL: int = 604800  # 7d

    # S3-compatible document storage
    STORAGE_BUCKET: str = "tour-docs"
    STORAGE_ENDPOINT_URL: str = ""
    STORAGE_ACCESS_KEY_ID: str = ""
    STORAGE_SECRET_ACCESS_KEY: str = ""
    STORAGE_REGION: str = "auto"
    SIGNED_URL_TTL: int = 600  # 10 minutes
    MAX_DOCUMENT_BYTES: int = 10 * 1024 * 1024

    INVITE_TTL_DAYS: int = 7
    HOLD_DEFAULT_HOURS: int = 24

    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=True,
    )

    @field_validator("CORS_ORIGINS", mode="before")
    def split_origins(cls, v: Any) -> list[str]:
        """Parse comma-separated or JSON list of origins from environment."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                pass
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator(
        "AVSTACK_BASE_URL",
        "AVSTACK_ACCESS_KEY",
        "LOGO_DEV_API_KEY",
        "STORAGE_ENDPOINT_URL",
        mode="before",
    )
    def strip_whitespace(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @model_validator(mode="after")
    def allow_all_if_requested(cls, values: "Settings") -> "Settings":
        if values.CORS_ALLOW_ALL:
            values.CORS_ORIGINS = ["*"]
        return values

    @property
    def flight_configured(self) -> bool:
        return bool(self.AVSTACK_BASE_URL and self.AVSTACK_ACCESS_KEY)


def load_settings() -> "Settings":
    return Settings(_env_file=os.getenv("ENV_FILE", str(Path(__file__).resolve().parents[3] / ".env")))


settings = load_settings()
