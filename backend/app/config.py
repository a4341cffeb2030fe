"""
DocTrack Backend — Application Configuration
==============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types/ranges, and provides a module-level `settings` object.
Who:   Imported by the application factory, middleware and the entry point.
When:  Loaded once at import time; checked again during startup.

Environment variable names follow the deployment this service replaced
(DB_HOST, EMAIL_PASS, PORT, ...) so existing .env files keep working.
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Production deployments must set
    the database and mail relay credentials.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # Either a full DATABASE_URL, or the individual parts below.
    database_url: Optional[str] = Field(
        default=None,
        description="Full async SQLAlchemy URL; overrides the DB_* parts when set",
    )
    db_driver: str = Field(default="postgresql+asyncpg")
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432, ge=1, le=65535)
    db_user: str = Field(default="")
    db_password: str = Field(default="")
    db_name: str = Field(default="doctrack")

    db_pool_size: int = Field(default=5, ge=1, le=100)
    db_max_overflow: int = Field(default=5, ge=0, le=50)

    # Seconds between connection attempts while the database is unreachable
    db_connect_retry_interval: float = Field(default=5.0, ge=0)

    @property
    def sqlalchemy_url(self) -> str:
        """Async connection URL assembled from the DB_* parts unless overridden."""
        if self.database_url:
            return self.database_url
        url = URL.create(
            self.db_driver,
            username=self.db_user or None,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
        return url.render_as_string(hide_password=False)

    # ── Mail Relay ────────────────────────────────────────────────────────
    email_host: str = Field(default="localhost")
    email_port: int = Field(default=587, ge=1, le=65535)
    email_user: str = Field(default="")
    email_pass: str = Field(default="")
    email_from: str = Field(default="", description="Sender address; defaults to EMAIL_USER")
    email_timeout: float = Field(default=30.0, gt=0)

    @property
    def sender_address(self) -> str:
        return self.email_from or self.email_user

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000, ge=1, le=65535)

    # Both must be set to serve over HTTPS
    ssl_keyfile: Optional[str] = Field(default=None)
    ssl_certfile: Optional[str] = Field(default=None)

    @property
    def tls_enabled(self) -> bool:
        return bool(self.ssl_keyfile and self.ssl_certfile)

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Rate Limiting ─────────────────────────────────────────────────────
    # 100 requests per 15 minutes per client address
    rate_limit_requests: int = Field(default=100, ge=1, le=100000)
    rate_limit_window: int = Field(default=900, ge=1, le=86400)  # seconds
    rate_limit_message: str = Field(default="Too many requests, please try again later.")

    # Number of reverse proxies in front of the service; 0 ignores X-Forwarded-For
    trust_proxy_hops: int = Field(default=1, ge=0, le=10)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Checks that the database and mail relay are configured.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises one ValueError listing them.
        """
        errors = []
        if not self.database_url and not self.db_user:
            errors.append("DB_USER is not set (or provide DATABASE_URL)")
        if not self.email_user:
            errors.append("EMAIL_USER is not set; confirmation emails will fail")
        if bool(self.ssl_keyfile) != bool(self.ssl_certfile):
            errors.append("SSL_KEYFILE and SSL_CERTFILE must be set together")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Module-level instance used when no explicit Settings is passed to create_app()
settings = Settings()
