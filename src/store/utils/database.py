import logging

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from src.store.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL
IS_SQLITE = DATABASE_URL.startswith("sqlite")

# SQLite (tests / local dev) runs on a single shared connection; everything
# else gets a real pool with timeout handling.
if IS_SQLITE:
    _engine_kwargs = {
        "echo": settings.DB_ECHO,
        "poolclass": StaticPool,
        "connect_args": {"check_same_thread": False},
    }
else:
    _engine_kwargs = {
        "echo": settings.DB_ECHO,  # Logs all SQL queries if True
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "connect_args": {"timeout": settings.DB_TIMEOUT},
        "pool_pre_ping": True,  # Ensures the connections are valid before using them
    }

try:
    engine = create_async_engine(DATABASE_URL, **_engine_kwargs)
    logger.info("Database engine created for %s", engine.url.render_as_string(hide_password=True))
except SQLAlchemyError as e:
    logger.error(f"Error creating database engine: {e}")
    raise Exception(f"Database connection failed: {e}")

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,  # Don't expire objects after commit
)

Base = declarative_base()


async def init_models() -> None:
    """Create every table known to the metadata (idempotent)."""
    # make sure every model module registered itself on Base.metadata
    import src.store.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_models() -> None:
    import src.store.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# Dependency to retrieve a database session in FastAPI
async def get_db():
    try:
        async with AsyncSessionLocal() as session:
            yield session
    except SQLAlchemyError as e:
        logger.error(f"Error: while interacting with the database: {e}")
        raise HTTPException(status_code=500, detail="Database operation failed")
