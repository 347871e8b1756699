from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from vocaaid.core.config import StorageSettings

from contextlib import asynccontextmanager
from typing import AsyncIterator
import logging


Base = declarative_base()


logger = logging.getLogger(__name__)


def build_engine(storage: StorageSettings) -> AsyncEngine:
    return create_async_engine(
        storage.url,
        echo=storage.echo,
        pool_pre_ping=True,
    )


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    # Importing registers the tables on Base.metadata
    from vocaaid.core.db.schemas import storage  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def session_scope(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    async with session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(f"Session rolled back due to error: {e}")
            raise
