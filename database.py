"""
Database Configuration and Connection Management
Engine, session factory and request-scoped sessions for the campaign service
"""

import logging
from typing import Generator
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool

from config import ConfigManager, get_settings
from models import Base

logger = logging.getLogger(__name__)

settings = get_settings()

DATABASE_URL = ConfigManager().get_database_url()

DEFAULT_POOL_CONFIG = {
    "pool_size": 5,
    "max_overflow": 10,
    "pool_timeout": 30,
    "pool_recycle": 3600
}


def _create_engine(url: str):
    """Create the engine; SQLite gets a single shared connection for in-memory URLs"""
    if url.startswith("sqlite"):
        engine_kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            engine_kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=settings.database_echo, **engine_kwargs)

    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=DEFAULT_POOL_CONFIG["pool_size"],
        max_overflow=DEFAULT_POOL_CONFIG["max_overflow"],
        pool_timeout=DEFAULT_POOL_CONFIG["pool_timeout"],
        pool_recycle=DEFAULT_POOL_CONFIG["pool_recycle"],
        echo=settings.database_echo,
    )


engine = _create_engine(DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


class DatabaseManager:
    """Database connection management"""

    def __init__(self):
        self.engine = engine
        self.session_factory = SessionLocal

    def get_session(self) -> Session:
        """Get database session"""
        return self.session_factory()

    def init_database(self):
        """Create all tables"""
        try:
            logger.info("Initializing database...")
            Base.metadata.create_all(bind=self.engine)
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise

    def drop_database(self):
        """Drop all tables"""
        Base.metadata.drop_all(bind=self.engine)

    def check_connection(self) -> bool:
        """Check database connection"""
        try:
            with self.get_session() as session:
                session.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error(f"Database connection check failed: {e}")
            return False

    def close_connections(self):
        """Close all database connections"""
        try:
            self.engine.dispose()
            logger.info("Database connections closed")
        except Exception as e:
            logger.error(f"Error closing database connections: {e}")


# Global database manager
db_manager = DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """Dependency for getting database session"""
    session = db_manager.get_session()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database session error: {e}")
        raise
    finally:
        session.close()


def init_db():
    """Initialize database"""
    db_manager.init_database()


def check_db_health() -> dict:
    """Check database health"""
    if db_manager.check_connection():
        return {"status": "healthy", "connected": True}
    return {"status": "unhealthy", "connected": False, "error": "Connection failed"}
