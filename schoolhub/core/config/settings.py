# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for SchoolHub.
Settings are loaded from environment variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from schoolhub.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> settings.session.login_ttl_seconds
    86400
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CentralDatabaseSettings(BaseSettings):
    """Central database configuration.

    The central database is the tenant registry: one school profile per
    host, each pointing at the tenant database holding that school's users.

    Attributes:
        user: PostgreSQL username for central database.
        password: PostgreSQL password for central database.
        host: Database host address.
        port: Database port number.
        database: Database name.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
    """

    model_config = SettingsConfigDict(
        env_prefix="CENTRAL_DB_",
        extra="ignore",
    )

    user: str = "schoolhub"
    password: SecretStr = SecretStr("schoolhub_central_password")
    host: str = "schoolhub-central-db"
    port: int = 5432
    database: str = "tenants"
    pool_size: int = 10
    max_overflow: int = 20

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"


class TenantDatabaseSettings(BaseSettings):
    """Tenant database configuration.

    Every school has its own database on the tenant server; the database
    name comes from the school's profile in the central database.

    Attributes:
        user: PostgreSQL username for tenant databases.
        password: PostgreSQL password for tenant databases.
        host: Tenant database server host.
        port: Tenant database server port.
        pool_size: Connection pool size per tenant.
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANT_DB_",
        extra="ignore",
    )

    user: str = "schoolhub"
    password: SecretStr = SecretStr("schoolhub_tenant_password")
    host: str = "schoolhub-tenant-db"
    port: int = 5432
    pool_size: int = 5

    def url_for(self, db_name: str) -> str:
        """Build the async database URL for one tenant database.

        Args:
            db_name: Name of the tenant database.

        Returns:
            asyncpg connection URL.
        """
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{db_name}"


class RedisSettings(BaseSettings):
    """Redis configuration for the session store.

    Attributes:
        host: Redis server host.
        port: Redis server port.
        password: Redis password.
        database: Redis database number.
        max_connections: Maximum connection pool size.
    """

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        extra="ignore",
    )

    host: str = "schoolhub-redis"
    port: int = 6379
    password: SecretStr = SecretStr("schoolhub_redis_password")
    database: int = 0
    max_connections: int = 50

    @property
    def url(self) -> str:
        """Build the Redis connection URL."""
        pwd = self.password.get_secret_value()
        return f"redis://:{pwd}@{self.host}:{self.port}/{self.database}"


class SessionSettings(BaseSettings):
    """Session, cookie and OTP configuration.

    Attributes:
        login_ttl_seconds: Lifetime of a login session (and its cookie).
        otp_ttl_seconds: Lifetime of an OTP verification session.
        cookie_name: Name of the cookie carrying the session id.
        cookie_samesite: SameSite policy for the session cookie.
        cookie_secure: Force the Secure flag. Defaults to production only.
        expose_otp: Return generated OTP codes in API responses.
            Defaults to development only.
        max_failed_attempts: Failed logins before the account is locked.
        lockout_minutes: How long a locked account stays locked.
    """

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        extra="ignore",
    )

    login_ttl_seconds: int = 60 * 60 * 24
    otp_ttl_seconds: int = 60 * 5
    cookie_name: str = "sessionId"
    cookie_samesite: Literal["lax", "strict", "none"] = "lax"
    cookie_secure: bool | None = None
    expose_otp: bool | None = None
    max_failed_attempts: int = 5
    lockout_minutes: int = 30


class RateLimitSettings(BaseSettings):
    """Rate limiting configuration.

    Attributes:
        requests_per_minute: Maximum requests per minute per client.
        auth_per_minute: Maximum login/OTP attempts per minute per IP.
        storage_uri: limits storage URI. Defaults to the Redis URL.
    """

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        extra="ignore",
    )

    requests_per_minute: int = 60
    auth_per_minute: int = 10
    storage_uri: str | None = None


class CORSSettings(BaseSettings):
    """CORS configuration for API.

    Attributes:
        origins: Comma-separated list of allowed origins.
        allow_credentials: Whether to allow credentials.
        allow_methods: Allowed HTTP methods.
        allow_headers: Allowed HTTP headers.
    """

    model_config = SettingsConfigDict(
        env_prefix="CORS_",
        extra="ignore",
    )

    origins: str = "http://localhost:3000"
    allow_credentials: bool = True
    allow_methods: list[str] = ["*"]
    allow_headers: list[str] = ["*"]

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into a list."""
        return [origin.strip() for origin in self.origins.split(",") if origin.strip()]


class APISettings(BaseSettings):
    """API server configuration.

    Attributes:
        host: Host to bind to.
        port: Port to listen on.
        workers: Number of worker processes.
        reload: Whether to enable auto-reload.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 3000
    workers: int = 2
    reload: bool = False


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        central_db: Central (tenant registry) database settings.
        tenant_db: Tenant database settings.
        redis: Redis settings.
        session: Session, cookie and OTP settings.
        rate_limit: Rate limiting settings.
        cors: CORS settings.
        api: API server settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    central_db: CentralDatabaseSettings = Field(default_factory=CentralDatabaseSettings)
    tenant_db: TenantDatabaseSettings = Field(default_factory=TenantDatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Refuse development-only behaviour in production.

        Raises:
            ValueError: If OTP codes would be exposed in production.
        """
        if self.environment == "production" and self.session.expose_otp:
            raise ValueError(
                "OTP codes must not be returned in API responses in production. "
                "Unset SESSION_EXPOSE_OTP."
            )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def cookie_secure(self) -> bool:
        """Whether the session cookie carries the Secure flag."""
        if self.session.cookie_secure is not None:
            return self.session.cookie_secure
        return self.is_production

    @property
    def expose_otp(self) -> bool:
        """Whether generated OTP codes are echoed back to the client."""
        if self.session.expose_otp is not None:
            return self.session.expose_otp
        return self.is_development


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment,
    typically in tests.
    """
    get_settings.cache_clear()
