from typing import Any, AsyncGenerator, Dict, Optional, Sequence
import logging

from sqlalchemy import text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# One declarative base per datastore; each is created on its own engine
UsersBase = declarative_base()
ProductsBase = declarative_base()


class Database:
    """Engine and session factory for one independently addressable datastore"""

    def __init__(self, name: str, base):
        self.name = name
        self.base = base
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[sessionmaker] = None

    async def connect(
        self,
        database_url: str,
        pool_size: int = 5,
        max_overflow: int = 10,
        echo: bool = False,
        create_schema: bool = True
    ) -> None:
        """Create the engine and, optionally, the tables of this store"""
        if "sqlite" in database_url.lower():
            engine_kwargs = {}
            if ":memory:" in database_url:
                # A single shared connection keeps an in-memory database alive
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs = {
                "pool_size": pool_size,
                "max_overflow": max_overflow,
                "pool_recycle": 3600,
            }

        self._engine = create_async_engine(
            database_url,
            pool_pre_ping=True,
            echo=echo,
            **engine_kwargs
        )
        self._session_factory = sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False
        )

        if create_schema:
            async with self._engine.begin() as conn:
                await conn.run_sync(self.base.metadata.create_all)

        logger.info(f"{self.name} datastore connected")

    async def disconnect(self) -> None:
        """Dispose of the engine and its pooled connections"""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info(f"{self.name} datastore disconnected")

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError(f"{self.name} datastore is not connected")
        return self._engine

    def session(self) -> AsyncSession:
        if self._session_factory is None:
            raise RuntimeError(f"{self.name} datastore is not connected")
        return self._session_factory()

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Dependency yielding a session scoped to one request"""
        async with self.session() as session:
            yield session

    async def is_healthy(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"{self.name} datastore health check failed: {e}")
            return False


users_db = Database("users", UsersBase)
products_db = Database("products", ProductsBase)


def upsert_statement(session: AsyncSession, model, values: Dict[str, Any], conflict_columns: Sequence[str]):
    """INSERT ... ON CONFLICT DO UPDATE for the session's dialect.

    The write is a single statement, so concurrent upserts of the same key
    never race between a read and an insert; the last one to commit wins.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(model).values(**values)
    elif dialect == "sqlite":
        stmt = sqlite.insert(model).values(**values)
    else:
        raise NotImplementedError(f"Upsert is not supported on {dialect}")

    return stmt.on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_={column: stmt.excluded[column] for column in values if column not in conflict_columns},
    )
