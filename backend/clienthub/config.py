"""
ClientHub Backend - Application Configuration
==============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values. Services
       receive the individual values through their constructors, so tests
       can build them with explicit configuration instead of patching.
When:  Loaded once at module import time; validated before app starts.

Environment variables (case-insensitive):
    DATABASE_URL                       full SQLAlchemy URL (overrides DB_*)
    DB_DRIVER, DB_HOST, DB_PORT,
    DB_USER, DB_PASSWORD, DB_NAME      pieces used when DATABASE_URL is unset
    DB_POOL_SIZE, DB_MAX_OVERFLOW,
    DB_POOL_TIMEOUT, DB_QUEUE_LIMIT    connection pool and admission control
    JWT_SECRET, JWT_ALGORITHM,
    JWT_EXPIRE_MINUTES                 session token signing
    PASSWORD_HASH_ROUNDS               PBKDF2 work factor
    STORAGE_ROOT                       directory for uploaded client images
    CORS_ORIGINS, HOST, PORT, LOG_LEVEL, EXPOSE_ERROR_DETAILS
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL

# Placeholder secret for local development; flagged at startup if still in use.
DEFAULT_JWT_SECRET = "clienthub-dev-secret-change-me-before-deploying"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for development.
    Production deployments MUST override JWT_SECRET and the database credentials.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # When set, used verbatim (e.g. sqlite+aiosqlite:///./dev.db for local runs)
    database_url: Optional[str] = Field(default=None)

    db_driver: str = Field(default="postgresql+asyncpg")
    db_host: str = Field(default="localhost")
    db_port: Optional[int] = Field(default=None, ge=1, le=65535)
    db_user: str = Field(default="clienthub")
    db_password: str = Field(default="")
    db_name: str = Field(default="clienthub")

    # Persistent connections; 10 matches the historical connection limit
    db_pool_size: int = Field(default=10, ge=1, le=100)
    db_max_overflow: int = Field(default=0, ge=0, le=50)

    # Seconds a request may wait for a pooled connection before failing
    db_pool_timeout: int = Field(default=30, ge=1, le=300)

    # Requests allowed to wait for a connection beyond pool capacity.
    # Anything past pool_size + max_overflow + queue_limit is rejected with 503.
    db_queue_limit: int = Field(default=50, ge=0, le=10000)

    db_pool_pre_ping: bool = Field(default=True)

    # ── Session Tokens ────────────────────────────────────────────────────
    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET)
    jwt_algorithm: str = Field(default="HS256")

    # 0 disables the exp claim entirely (tokens then live until the next logout)
    jwt_expire_minutes: int = Field(default=720, ge=0, le=60 * 24 * 30)

    # ── Password Hashing ──────────────────────────────────────────────────
    # PBKDF2-SHA256 iterations; 29000 keeps a verify in the tens of milliseconds
    password_hash_rounds: int = Field(default=29000, ge=1000, le=1_000_000)

    # ── File Storage ──────────────────────────────────────────────────────
    storage_root: str = Field(default="./uploads")

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated origins; "*" allows any origin (admin UI served elsewhere)
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001, ge=1, le=65535)

    log_level: str = Field(default="INFO")

    # Internal admin tool: surface the underlying DB/filesystem message in 500s
    expose_error_details: bool = Field(default=True)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def sqlalchemy_url(self) -> str:
        """
        What: The URL handed to create_async_engine.
        How:  DATABASE_URL wins; otherwise the DB_* pieces are assembled with
              sqlalchemy's URL.create so passwords with special characters are quoted.
        """
        if self.database_url:
            return self.database_url
        url = URL.create(
            drivername=self.db_driver,
            username=self.db_user or None,
            password=self.db_password or None,
            host=self.db_host or None,
            port=self.db_port,
            database=self.db_name or None,
        )
        return url.render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return self.sqlalchemy_url.startswith("sqlite")

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises a single ValueError listing them.
        """
        errors = []
        if not self.jwt_secret or self.jwt_secret == DEFAULT_JWT_SECRET:
            errors.append(
                "JWT_SECRET is not set. Tokens are being signed with the development "
                "placeholder; set a long random value."
            )
        elif len(self.jwt_secret) < 32:
            errors.append("JWT_SECRET is shorter than 32 characters.")
        if self.jwt_expire_minutes == 0:
            errors.append(
                "JWT_EXPIRE_MINUTES is 0. Issued tokens never expire and are only "
                "revoked by an explicit logout."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
