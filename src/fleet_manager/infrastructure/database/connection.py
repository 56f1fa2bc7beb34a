"""Database connection management."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from fleet_manager.infrastructure.database.models import Base


def normalize_database_url(database_url: str) -> str:
    """Point plain PostgreSQL URLs at the asyncpg driver."""
    for prefix in ("postgresql://", "postgres://"):
        if database_url.startswith(prefix):
            return "postgresql+asyncpg://" + database_url[len(prefix):]
    return database_url


class DatabaseManager:
    """Owns the async engine and hands out request-scoped sessions."""

    def __init__(self, database_url: str, echo: bool = False, pool_pre_ping: bool = True):
        self._database_url = normalize_database_url(database_url)
        self._echo = echo
        self._pool_pre_ping = pool_pre_ping
        self._engine: AsyncEngine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def database_url(self) -> str:
        return self._database_url

    async def connect(self) -> None:
        self._engine = create_async_engine(
            self._database_url,
            echo=self._echo,
            pool_pre_ping=self._pool_pre_ping,
        )
        self._session_factory = sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def disconnect(self) -> None:
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    async def create_tables(self) -> None:
        async with self.engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        async with self.engine.begin() as connection:
            await connection.run_sync(Base.metadata.drop_all)

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session committed on normal exit and rolled back on error."""
        if not self._session_factory:
            raise RuntimeError("Database not connected. Call connect() first.")

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    @property
    def engine(self) -> AsyncEngine:
        if not self._engine:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._engine
