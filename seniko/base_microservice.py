import logging
from typing import Any, AsyncIterator, Dict, Optional, Tuple

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

Base = declarative_base()


def configure_logging(level: str = "INFO") -> None:
    """Configure process logging. Call once from the application factory."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def create_session_factory(database_url: str) -> Tuple[AsyncEngine, async_sessionmaker]:
    """
    Create the async engine and a session factory bound to it.

    Args:
        database_url: SQLAlchemy async database URL

    Returns:
        Tuple of engine and session factory
    """
    engine = create_async_engine(database_url, echo=False)
    session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    return engine, session_factory


async def init_models(engine: AsyncEngine) -> None:
    """Create any missing tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db_session(request: Request) -> AsyncIterator[AsyncSession]:
    """Dependency for getting a database session scoped to one request."""
    async with request.app.state.session_factory() as session:
        yield session


class BaseMicroservice:
    """
    Base class for SeNiko services. Provides:
    - An injected logger
    - Event and error logging helpers
    """
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("seniko")

    def log_event(self, event: str, details: Optional[Dict[str, Any]] = None):
        self.logger.info(f"EVENT: {event} | Details: {details}")

    def log_error(self, error: Exception, context: str = ""):
        self.logger.error(f"ERROR: {error!r} | Context: {context}")
