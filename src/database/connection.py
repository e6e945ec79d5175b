"""
Database connection, session management and store availability monitoring
"""

import asyncio
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
import structlog

from src.core.config import settings
from src.core.exceptions import StoreUnavailable

logger = structlog.get_logger(__name__)


def _engine_options(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        # In-memory SQLite must share one connection across threads
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {"pool_pre_ping": True, "pool_recycle": 300}


# Create database engine
engine = create_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_options(settings.database_url)
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create base class for models
Base = declarative_base()


class StoreMonitor:
    """Tracks store reachability and reconnects on a fixed backoff"""

    def __init__(self, retry_interval: int = settings.store_retry_interval):
        self.retry_interval = retry_interval
        self.connected = False
        self._task: Optional[asyncio.Task] = None

    def connect(self) -> bool:
        """Try once to reach the store and create missing tables"""
        try:
            init_database()
        except OperationalError as e:
            self.connected = False
            logger.error("Store connection failed", error=str(e))
            return False
        if not self.connected:
            logger.info("Connected to store")
        self.connected = True
        return True

    async def start(self):
        """Connect now, or keep retrying in the background"""
        if not await asyncio.to_thread(self.connect):
            self._task = asyncio.create_task(self._retry_loop())

    async def stop(self):
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    def mark_unavailable(self):
        """Called from request error handlers; restarts the retry loop"""
        if self.connected:
            logger.warning("Store marked unavailable")
        self.connected = False
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._retry_loop())

    async def _retry_loop(self):
        while not self.connected:
            logger.info("Retrying store connection", retry_in=self.retry_interval)
            await asyncio.sleep(self.retry_interval)
            await asyncio.to_thread(self.connect)


store_monitor = StoreMonitor()


def get_database() -> Session:
    """Get database session"""
    if not store_monitor.connected:
        raise StoreUnavailable()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_database():
    """Initialize database tables"""
    # Import all models to ensure they are registered
    from src.models import device, reading  # noqa

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")
