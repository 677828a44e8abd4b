from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from pydantic import ValidationError
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from .errors import QueryError
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def get_engine_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


def _on_connect(dbapi_connection, connection_record) -> None:
    # Take transaction control away from the driver so DDL runs inside our
    # transactions and SAVEPOINT works; journal mode must be set first.
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def _on_begin(conn) -> None:
    conn.exec_driver_sql("BEGIN")


class Store:
    """Handle on the single on-disk store file.

    Created once by the composition root and passed to every repository.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.path: Path = self.settings.db_path
        self.maintenance = asyncio.Lock()
        self.path.parent.mkdir(parents=True, exist_ok=True)

        self.engine: AsyncEngine = create_async_engine(
            get_engine_url(self.path), echo=self.settings.echo_sql, future=True
        )
        event.listen(self.engine.sync_engine, "connect", _on_connect)
        event.listen(self.engine.sync_engine, "begin", _on_begin)

        self._sessions = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False, autocommit=False
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self._sessions() as session:
            try:
                yield session
            except (SQLAlchemyError, ValidationError) as e:
                await session.rollback()
                logger.error("[fitx] query failed: %s", e)
                raise QueryError(str(e)) from e

    async def dispose(self) -> None:
        """Close pooled connections; the last close folds the WAL back into the file."""
        await self.engine.dispose()

    def exists(self) -> bool:
        return self.path.is_file()
