# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant database connection management.

Each school keeps its users in its own database on the tenant database
server. The database name comes from the school's profile in the
central registry. Engines are created lazily on first access and cached
per database name for the lifetime of the process.

Example:
    manager = TenantDatabaseManager(settings)

    async with manager.get_session("school_riverside") as session:
        result = await session.execute(select(User))

    await manager.close_all()
"""

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

if TYPE_CHECKING:
    from schoolhub.core.config.settings import Settings


class TenantNotFoundError(Exception):
    """Raised when a tenant has no database assigned.

    Attributes:
        db_name: The database name that was requested.
    """

    def __init__(self, db_name: str | None) -> None:
        super().__init__(f"Tenant database not found or not accessible: {db_name}")
        self.db_name = db_name


class TenantDatabaseManager:
    """Manages database connections for multiple tenants.

    Each tenant database gets its own async engine and session maker,
    created on first access and cached for subsequent requests.
    """

    def __init__(self, settings: "Settings") -> None:
        """Initialize the tenant database manager.

        Args:
            settings: Application settings containing database configuration.
        """
        self._settings = settings
        self._engines: dict[str, AsyncEngine] = {}
        self._sessionmakers: dict[str, async_sessionmaker[AsyncSession]] = {}

    def _get_or_create_engine(self, db_name: str) -> AsyncEngine:
        if not db_name:
            raise TenantNotFoundError(db_name)

        if db_name not in self._engines:
            self._engines[db_name] = create_async_engine(
                self._settings.tenant_db.url_for(db_name),
                pool_size=self._settings.tenant_db.pool_size,
                max_overflow=10,
                pool_pre_ping=True,
                pool_recycle=1800,
            )

        return self._engines[db_name]

    def _get_or_create_sessionmaker(self, db_name: str) -> async_sessionmaker[AsyncSession]:
        if db_name not in self._sessionmakers:
            engine = self._get_or_create_engine(db_name)

            self._sessionmakers[db_name] = async_sessionmaker(
                bind=engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )

        return self._sessionmakers[db_name]

    @asynccontextmanager
    async def get_session(self, db_name: str) -> AsyncIterator[AsyncSession]:
        """Get an async session for a tenant database.

        The session is committed on success and rolled back on exception.

        Args:
            db_name: Name of the tenant database.

        Yields:
            AsyncSession for database operations.

        Raises:
            TenantNotFoundError: If db_name is empty.
            SQLAlchemyError: If a database operation fails.
        """
        sessionmaker = self._get_or_create_sessionmaker(db_name)

        async with sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    @property
    def cached_databases(self) -> list[str]:
        """Names of tenant databases with an open engine."""
        return list(self._engines)

    async def close_tenant(self, db_name: str) -> None:
        """Dispose of the engine for one tenant database."""
        engine = self._engines.pop(db_name, None)
        self._sessionmakers.pop(db_name, None)
        if engine is not None:
            await engine.dispose()

    async def close_all(self) -> None:
        """Dispose of every cached tenant engine."""
        for db_name in list(self._engines):
            await self.close_tenant(db_name)
