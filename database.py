import logging
import os
from sqlmodel import SQLModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from dotenv import load_dotenv

from errors import BackendError

logger = logging.getLogger("society_app")

load_dotenv()

# No usable default: refuse to start without a database
DATABASE_URL = os.environ.get("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL is not set. Please check your .env file.")

# Hosted Postgres providers hand out postgres:// URLs
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql+asyncpg://", 1)

SQL_ECHO = os.environ.get("SQL_ECHO", "").lower() in ("1", "true", "yes")

engine = create_async_engine(DATABASE_URL, echo=SQL_ECHO, future=True)
async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncSession:
    async with async_session() as session:
        yield session


async def commit_or_rollback(session: AsyncSession, action: str):
    """Commit, rolling back on failure.

    IntegrityError is re-raised as is so callers can map constraint
    violations; any other database error becomes a BackendError.
    """
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error("Database error while %s: %s", action, e)
        raise BackendError(f"Error {action}") from e
