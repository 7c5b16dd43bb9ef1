"""
Database configuration and connection setup
"""
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from .config import Config
from .models import Base

logger = logging.getLogger(__name__)


def build_engine(database_url: str = Config.DATABASE_URL):
    """Create an engine with pooling suited to the backing database"""
    if database_url.startswith("sqlite"):
        # SQLite connections are handed across the FastAPI thread pool
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=Config.ENABLE_SQL_LOGGING
        )

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before use
        pool_size=Config.DB_POOL_SIZE,
        max_overflow=Config.DB_MAX_OVERFLOW,
        pool_timeout=Config.DB_POOL_TIMEOUT,
        pool_recycle=Config.DB_POOL_RECYCLE,
        echo=Config.ENABLE_SQL_LOGGING
    )


engine = build_engine()

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables(bind=None):
    """Create all tables"""
    Base.metadata.create_all(bind=bind or engine)
    logger.info("All database tables created successfully")


# Dependency to get database session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
