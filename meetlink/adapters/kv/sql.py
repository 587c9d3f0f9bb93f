"""
SQLAlchemy keyed store.

Stores every key in one ``kv_entries`` table. SQLite (through aiosqlite) is
used for development and tests; any SQLAlchemy async URL works in production.
Each operation opens its own session so that independent operations can be
awaited concurrently.
"""

import os
import logging
from typing import Optional

from sqlalchemy import select, delete, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from meetlink.adapters.kv import KeyPage, KeyValueStore
from meetlink.constants import DEFAULT_PAGE_SIZE
from meetlink.models import Base, KVEntry

logger = logging.getLogger(__name__)


def _is_memory_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite") and (
        database_url.endswith("://") or ":memory:" in database_url
    )


class SQLKeyValueStore(KeyValueStore):
    """Keyed store backed by a SQL table."""

    def __init__(self, database_url: Optional[str] = None, page_size: int = DEFAULT_PAGE_SIZE):
        """Initialize the store.

        Args:
            database_url: SQLAlchemy async URL. Defaults to in-memory SQLite.
            page_size: Default number of keys per listing page
        """
        self.database_url = database_url or "sqlite+aiosqlite://"
        self.page_size = page_size
        self.engine = None
        self.session_factory = None

    async def init(self) -> None:
        """Create the engine and the kv_entries table."""
        try:
            echo = os.getenv("DEBUG", "False").lower() == "true"
            if _is_memory_sqlite(self.database_url):
                # One shared connection, otherwise every session sees an empty database
                self.engine = create_async_engine(
                    self.database_url,
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool,
                    echo=echo
                )
            elif self.database_url.startswith("sqlite"):
                self.engine = create_async_engine(
                    self.database_url,
                    connect_args={"check_same_thread": False},
                    poolclass=NullPool,
                    echo=echo
                )
            else:
                self.engine = create_async_engine(
                    self.database_url,
                    pool_size=int(os.getenv("POOL_SIZE", "5")),
                    max_overflow=int(os.getenv("MAX_OVERFLOW", "10")),
                    pool_pre_ping=True,
                    echo=echo
                )

            self.session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False
            )

            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

            logger.info(f"Initialized keyed store on {self.engine.dialect.name}")
        except Exception as e:
            logger.error(f"Error initializing keyed store: {str(e)}")
            raise

    async def close(self) -> None:
        """Dispose of the engine."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None
            logger.info("Closed keyed store")

    def _session(self) -> AsyncSession:
        if not self.session_factory:
            raise RuntimeError("Keyed store not initialized. Call init() first.")
        return self.session_factory()

    def _upsert(self, key: str, value: str):
        dialect = self.engine.dialect.name
        if dialect == "sqlite":
            stmt = sqlite.insert(KVEntry).values(key=key, value=value)
        elif dialect == "postgresql":
            stmt = postgresql.insert(KVEntry).values(key=key, value=value)
        else:
            return None
        return stmt.on_conflict_do_update(
            index_elements=[KVEntry.key],
            set_={"value": stmt.excluded.value, "updated_at": func.now()}
        )

    async def get(self, key: str) -> Optional[str]:
        async with self._session() as session:
            result = await session.execute(select(KVEntry.value).where(KVEntry.key == key))
            return result.scalar_one_or_none()

    async def put(self, key: str, value: str) -> None:
        async with self._session() as session:
            stmt = self._upsert(key, value)
            if stmt is not None:
                await session.execute(stmt)
            else:
                await session.merge(KVEntry(key=key, value=value))
            await session.commit()

    async def delete(self, key: str) -> None:
        async with self._session() as session:
            await session.execute(delete(KVEntry).where(KVEntry.key == key))
            await session.commit()

    async def list_keys(self, prefix: str, cursor: Optional[str] = None, limit: Optional[int] = None) -> KeyPage:
        limit = limit or self.page_size
        query = select(KVEntry.key).where(KVEntry.key.startswith(prefix, autoescape=True))
        if cursor is not None:
            query = query.where(KVEntry.key > cursor)
        # One extra row tells us whether another page follows
        query = query.order_by(KVEntry.key).limit(limit + 1)

        async with self._session() as session:
            result = await session.execute(query)
            keys = list(result.scalars().all())

        if len(keys) > limit:
            keys = keys[:limit]
            return KeyPage(keys=keys, cursor=keys[-1], list_complete=False)
        return KeyPage(keys=keys)
