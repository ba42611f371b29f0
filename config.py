"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).
Sub-configs share the same env/dotenv source and are composed by
AppSettings in a model_validator.
"""

from __future__ import annotations

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "quire"


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    jwt_issuer: str = "quire"
    jwt_audience: str = "quire.api"
    access_token_ttl_seconds: int = 7200
    jwt_secret: str = ""


class EmailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # "console" logs outgoing mail instead of sending it
    email_transport: str = "console"
    email_from_name: str = "Quire"
    email_from_address: str = "noreply@quire.local"
    zepto_api_token: str = ""

    # False: dispatch in the background and log failures.
    # True: await delivery and surface failures to the caller.
    email_await_delivery: bool = False


class AuthSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    reset_password_ttl_ms: int = 3_600_000
    max_login_attempts: int = 5  # 0 disables lockout
    lock_time_ms: int = 600_000

    # Lets REST callers pass disableEmail and receive the reset token.
    # Only meant for test and seeding environments.
    expose_reset_token: bool = False


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
    app_name: str = "quire"

    # Empty means "derive from the incoming request"
    server_url: str = ""
    admin_route: str = "/admin"
    api_route: str = "/api"
    default_locale: str = "en"

    cors_origins: list[str] = ["*"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    jwt: Optional[JWTSettings] = None
    email: Optional[EmailSettings] = None
    auth: Optional[AuthSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if self.db is None:
            self.db = DatabaseSettings()
        if self.jwt is None:
            self.jwt = JWTSettings()
        if self.email is None:
            self.email = EmailSettings()
        if self.auth is None:
            self.auth = AuthSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        self.admin_route = "/" + self.admin_route.strip("/")
        self.api_route = "/" + self.api_route.strip("/")
        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
