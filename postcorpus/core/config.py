"""Application settings.

Read once at import from environment variables (case-insensitive) and an
optional ``.env`` file. Everything else imports the module-level
``settings`` instance.
"""

from enum import Enum
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "dev-insecure-key-change-me"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Settings are unsafe for the current environment."""


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    environment: Environment = Environment.DEVELOPMENT

    # Metadata tables and version store tables share this database.
    database_url: str = "sqlite:///./postcorpus.db"
    # Pool tuning, ignored for SQLite.
    db_pool_size: int = Field(default=5, ge=1)
    db_max_overflow: int = Field(default=10, ge=0)
    db_pool_timeout: int = Field(default=30, description="Seconds to wait for a pooled connection")
    db_pool_recycle: int = Field(default=1800, description="Seconds before a connection is recycled")

    # With auth disabled every request acts as the anonymous owner.
    auth_enabled: bool = False
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: Literal["HS256"] = "HS256"

    # Comma-separated; wildcards are refused.
    cors_allowed_origins: str = "http://localhost:4321"

    # Category given to posts created without one.
    default_category: str = "root"

    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Invalid log level. Must be one of: {list(_LOG_LEVELS)}")
        return level

    @field_validator("log_format", mode="before")
    @classmethod
    def lowercase_log_format(cls, v):
        return v.lower() if isinstance(v, str) else v

    def get_cors_origins(self) -> List[str]:
        origins = [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]
        if "*" in origins:
            raise ValueError("Wildcard CORS (*) not allowed; list origins in CORS_ALLOWED_ORIGINS")
        return origins

    def security_findings(self) -> List[str]:
        """Settings that would be unsafe in production, as readable messages."""
        findings = []
        if self.jwt_secret_key == DEFAULT_JWT_SECRET:
            findings.append("JWT_SECRET_KEY is the built-in default. Generate one: openssl rand -hex 32")
        if not self.auth_enabled:
            findings.append("AUTH_ENABLED is false; every request acts as the anonymous owner.")
        if self.database_url.startswith("sqlite") and (
            ":memory:" in self.database_url or self.database_url == "sqlite://"
        ):
            findings.append("DATABASE_URL points at an in-memory SQLite database.")
        return findings

    def validate_production_config(self) -> None:
        """Raise ConfigurationError in production when any finding applies.

        Development only logs the findings (see main.py).
        """
        findings = self.security_findings()
        if findings and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is insecure:\n  - " + "\n  - ".join(findings)
            )


settings = Settings()
