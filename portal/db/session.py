"""Async engine, session factory and the get_db dependency."""
import logging
from collections.abc import AsyncIterator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from portal.core.config import get_settings

logger = logging.getLogger(__name__)

engine = create_async_engine(get_settings().sqlalchemy_url, future=True)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)

Base = declarative_base()


async def get_db() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as db:
        yield db


async def check_connection() -> bool:
    """Probe the database once at startup; log the outcome."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.error("Database connection failed: %s", exc)
        return False
    logger.info("Database connection successful")
    return True
