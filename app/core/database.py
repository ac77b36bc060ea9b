"""
Database Configuration for the arrival card service
SQLAlchemy engine, session factory and FastAPI session dependency
"""

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
import logging

from app.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def build_engine(database_url: str, debug: bool = False):
    """Create an engine; SQLite URLs share one connection across threads"""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=debug,
        )
    return create_engine(
        database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_pre_ping=True,  # Verify connections before use
        echo=debug,  # Log SQL queries in debug mode
    )


engine = build_engine(settings.DATABASE_URL, settings.DEBUG)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    Database dependency for FastAPI
    Provides a database session that automatically closes after request
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def test_database_connection():
    """Test database connection and return status (useful for health checks)"""
    try:
        db = SessionLocal()
        db.execute(text("SELECT 1"))
        db.close()
        return True, "Database connection successful"
    except Exception as e:
        return False, f"Database connection failed: {str(e)}"


def create_tables(bind=None):
    """Create the profiles, travel_information and entry_form tables"""
    from app.models.base import Base

    # Import all models to ensure they're registered with Base.metadata
    from app.models import arrival_card  # noqa: F401

    logger.info(f"Creating {len(Base.metadata.tables)} database tables if missing")
    Base.metadata.create_all(bind=bind or engine)
