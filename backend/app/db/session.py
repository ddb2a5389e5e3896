"""
Async database session management for the destination and travel plan store
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Dict, Any
from urllib.parse import urlparse

from sqlmodel import SQLModel, text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import event
from sqlalchemy.pool import StaticPool

from app.core.settings import Settings

logger = logging.getLogger(__name__)

def to_async_url(database_url: str) -> str:
    """Map a plain driver URL onto its asyncio driver"""
    if database_url.startswith("postgres://"):
        database_url = "postgresql://" + database_url[len("postgres://"):]
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url

class DatabaseManager:
    """Owns the async engine, the session factory and connection statistics"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.engine: Optional[AsyncEngine] = None
        self.async_session: Optional[async_sessionmaker] = None
        self._connection_stats = {
            "total_connections": 0,
            "active_connections": 0,
            "failed_connections": 0,
            "last_health_check": None,
            "health_status": "unknown"
        }

    def _prepare_database_url(self) -> str:
        database_url = self.settings.DB_URL
        if not database_url:
            raise ValueError("DB_URL environment variable is required")

        parsed = urlparse(database_url)
        if not parsed.scheme:
            raise ValueError("Invalid database URL format")

        async_database_url = to_async_url(database_url)
        logger.info(f"Database URL prepared: {parsed.scheme}://{parsed.hostname or ''}/{parsed.path.lstrip('/')}")
        return async_database_url

    def _create_engine(self) -> AsyncEngine:
        database_url = self._prepare_database_url()

        engine_config = {
            "url": database_url,
            "echo": self.settings.DB_ECHO,
            "pool_pre_ping": True,
        }

        if "postgresql" in database_url:
            engine_config.update({
                "pool_size": self.settings.DB_POOL_SIZE,
                "max_overflow": self.settings.DB_MAX_OVERFLOW,
                "pool_timeout": self.settings.DB_POOL_TIMEOUT,
                "pool_recycle": self.settings.DB_POOL_RECYCLE,
            })
        elif ":memory:" in database_url:
            # a single shared connection keeps the in-memory database alive
            engine_config.update({
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            })

        engine = create_async_engine(**engine_config)
        self._setup_event_listeners(engine)
        return engine

    def _setup_event_listeners(self, engine: AsyncEngine) -> None:

        @event.listens_for(engine.sync_engine, "connect")
        def on_connect(dbapi_connection, connection_record):
            self._connection_stats["total_connections"] += 1
            self._connection_stats["active_connections"] += 1
            logger.debug("New database connection established")

        @event.listens_for(engine.sync_engine, "close")
        def on_close(dbapi_connection, connection_record):
            self._connection_stats["active_connections"] = max(0, self._connection_stats["active_connections"] - 1)
            logger.debug("Database connection closed")

        @event.listens_for(engine.sync_engine, "handle_error")
        def on_error(exception_context):
            self._connection_stats["failed_connections"] += 1
            logger.error(f"Database connection error: {exception_context.original_exception}")

    async def initialize(self) -> None:
        """Create the engine and session factory, then verify connectivity"""
        try:
            self.engine = self._create_engine()
            self.async_session = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=True,
            )
            health = await self.health_check()
            if health["status"] != "healthy":
                raise RuntimeError(health.get("error", "database unreachable"))
            logger.info("Database manager initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database manager: {e}")
            raise

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        if not self.async_session:
            raise RuntimeError("Database manager not initialized")

        session = self.async_session()
        try:
            yield session
        except SQLAlchemyError as e:
            logger.error(f"Database session error: {e}")
            self._connection_stats["failed_connections"] += 1
            await session.rollback()
            raise
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> Dict[str, Any]:
        """Run SELECT 1 and report pool state"""
        health_info = {
            "status": "healthy",
            "timestamp": time.time(),
            "connection_stats": self._connection_stats.copy(),
            "checks": {}
        }

        try:
            start_time = time.time()
            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1"))
                result.scalar()

            health_info["checks"]["connectivity"] = {
                "status": "pass",
                "response_time": f"{time.time() - start_time:.3f}s"
            }

            if self.engine and "postgresql" in str(self.engine.url):
                pool = self.engine.pool
                health_info["checks"]["connection_pool"] = {
                    "status": "pass",
                    "size": pool.size(),
                    "checked_in": pool.checkedin(),
                    "checked_out": pool.checkedout(),
                    "overflow": pool.overflow(),
                }

            self._connection_stats["last_health_check"] = time.time()
            self._connection_stats["health_status"] = "healthy"

        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            health_info["status"] = "unhealthy"
            health_info["error"] = str(e)
            health_info["checks"]["connectivity"] = {"status": "fail", "error": str(e)}
            self._connection_stats["health_status"] = "unhealthy"

        return health_info

    async def init_db(self) -> None:
        """Create the destinations and travel_plans tables if missing"""
        if not self.engine:
            raise RuntimeError("Database engine not initialized")

        import app.db.base  # noqa: F401  registers tables on SQLModel.metadata

        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("Database tables created successfully")

    async def close(self) -> None:
        if self.engine:
            logger.info("Closing database connections...")
            await self.engine.dispose()
            self.engine = None
            self.async_session = None

    def get_connection_stats(self) -> Dict[str, Any]:
        return self._connection_stats.copy()

# Global database manager instance
db_manager = DatabaseManager()

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a session from the global manager"""
    async with db_manager.get_session() as session:
        yield session

async def database_health_check() -> Dict[str, Any]:
    return await db_manager.health_check()

def get_database_stats() -> Dict[str, Any]:
    return db_manager.get_connection_stats()
