"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).
Each concern gets its own sub-config; AppSettings composes them in a
model_validator so a single AppSettings() call reads everything.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "cwt"
    users_collection: str = "users"


class RedisSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Optional — without Redis the verification ledger lives in process memory
    redis_uri: Optional[str] = None


class EmailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    zepto_api_token: str = ""
    zepto_from_email: str = "noreply@cwt.app"
    zepto_from_name: str = "CWT"
    email_timeout_seconds: float = 10.0


class VerificationSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="VERIFICATION_", extra="ignore"
    )

    max_attempts: int = Field(default=4, gt=0)
    code_length: int = Field(default=6, gt=0)
    code_ttl_seconds: int = Field(default=600, gt=0)
    cooldown_seconds: int = Field(default=86_400, gt=0)
    sweep_interval_seconds: float = Field(default=60.0, gt=0)

    # When False the sweep purges on expires_at alone and can lift an
    # active cooldown early.
    sweep_preserves_cooldown: bool = True


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_url: str = "https://cwt.app"
    app_name: str = "CWT"

    cors_origins: list[str] = ["*"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    redis: Optional[RedisSettings] = None
    email: Optional[EmailSettings] = None
    verification: Optional[VerificationSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if self.db is None:
            self.db = DatabaseSettings()
        if self.redis is None:
            self.redis = RedisSettings()
        if self.email is None:
            self.email = EmailSettings()
        if self.verification is None:
            self.verification = VerificationSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
