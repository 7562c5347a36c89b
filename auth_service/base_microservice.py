import logging
from typing import Any, AsyncIterator, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from auth_service.config import Config
from auth_service.logger import SERVICE_NAME, setup_logging

# Configuration and logging are set up once per process
config = Config.from_env()
logger = setup_logging(config)

# SQLAlchemy async setup
engine = create_async_engine(config.database_url, echo=False)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
Base = declarative_base()


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Dependency for getting a database session."""
    async with AsyncSessionLocal() as session:
        yield session


class BaseMicroservice:
    """
    Base class for services. Provides:
    - The shared configuration object
    - Structured event and error logging
    """
    def __init__(self, cfg: Optional[Config] = None, log: Optional[logging.Logger] = None):
        self.config = cfg or config
        self.logger = log or logger

    def log_event(self, event: str, details: Optional[Dict[str, Any]] = None):
        self.logger.info(f"EVENT: {event}", extra={"data": details or {}})

    def log_error(self, error: Exception, context: str = ""):
        self.logger.error(
            f"ERROR: {error}",
            extra={"data": {"error_type": error.__class__.__name__, "context": context}},
        )

    async def create_tables(self):
        """Create any missing tables for the registered models."""
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self.log_event("database.tables_ready", {"service": SERVICE_NAME})
