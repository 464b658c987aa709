import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from dotenv import load_dotenv
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import declarative_base

from netanya_local.common.errors import DirectoryError, PersistenceError
from netanya_local.core.config import get_settings

load_dotenv()

logger = logging.getLogger(__name__)

settings = get_settings()

engine = create_async_engine(settings.async_database_url, echo=settings.SQL_ECHO)

# фабрика асинхронных сессий
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
)

# базовый класс для моделей
Base = declarative_base()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# зависимость для FastAPI
async def get_async_session() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def atomic(session: AsyncSession, action: str) -> AsyncIterator[AsyncSession]:
    """
    One unit of work: commit on success, rollback on any error.

    Domain errors and IntegrityError propagate unchanged; other database errors
    are logged and turned into PersistenceError so the caller sees a generic 500.
    """
    try:
        yield session
        await session.commit()
    except (DirectoryError, IntegrityError):
        # конфликт уникальности решает вызывающий код
        await session.rollback()
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("Database failure during %s", action)
        raise PersistenceError(f"Failed to {action}") from e


# Function to create tables (for initial setup, not for production use)
async def init_models():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
