"""
Database configuration and connection management.

This module provides:
- SQLAlchemy engine and session management
- Connection pooling with sane defaults (PostgreSQL) or a shared
  connection for SQLite
- Table definitions for activity records and streak state
"""
from typing import Optional
from contextlib import contextmanager
from sqlalchemy import create_engine, MetaData, Table, Column, Integer, String, DateTime, Float, Text, Index, UniqueConstraint
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.orm import sessionmaker
from sqlalchemy.sql import func
import logging

from fittrack.core.config import settings


logger = logging.getLogger("fittrack")

# SQLAlchemy metadata for table definitions
metadata = MetaData()

# Connection pooling configuration
POOL_SIZE = 10
MAX_OVERFLOW = 20
POOL_TIMEOUT = 30
POOL_RECYCLE = 3600  # Recycle connections after 1 hour

# Global engine and session factory
_engine = None
_SessionLocal = None


def get_database_url() -> Optional[str]:
    """
    Get the database URL from settings.

    Outside production a missing DATABASE_URL falls back to a local SQLite file.
    """
    if settings.DATABASE_URL:
        return settings.DATABASE_URL
    if settings.ENV.lower() == "production":
        return None
    return f"sqlite:///{settings.SQLITE_FALLBACK_PATH}"


def init_engine(database_url: Optional[str] = None):
    """
    Initialize the SQLAlchemy engine.

    Args:
        database_url: Optional override for DATABASE_URL
    """
    global _engine, _SessionLocal

    url = database_url or get_database_url()

    if not url:
        raise ValueError(
            "DATABASE_URL is not configured. "
            "Set DATABASE_URL in environment or .env file."
        )

    if url.startswith("sqlite"):
        # One shared connection so in-memory databases survive across sessions
        _engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    else:
        _engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=POOL_SIZE,
            max_overflow=MAX_OVERFLOW,
            pool_timeout=POOL_TIMEOUT,
            pool_recycle=POOL_RECYCLE,
            echo=False,  # Set to True for SQL query logging
        )

    # Create session factory
    _SessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=_engine
    )

    logger.info(f"Database engine initialized ({_engine.dialect.name})")
    return _engine


def get_engine():
    """Get the current SQLAlchemy engine."""
    global _engine
    if _engine is None:
        init_engine()
    return _engine


def get_session_factory():
    """Get the session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        init_engine()
    return _SessionLocal


@contextmanager
def get_db_session():
    """
    Context manager for database sessions.

    Usage:
        with get_db_session() as session:
            session.execute(...)
    """
    SessionLocal = get_session_factory()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_all_tables():
    """
    Create all tables defined in metadata.

    This is idempotent - tables that already exist will not be recreated.
    """
    engine = get_engine()
    metadata.create_all(bind=engine)


def drop_all_tables():
    """
    Drop all tables defined in metadata.

    WARNING: This is destructive! Only use in tests or development.
    """
    engine = get_engine()
    metadata.drop_all(bind=engine)


def reset_database():
    """
    Reset the database by dropping and recreating all tables.

    WARNING: This is destructive! Only use in tests.
    """
    drop_all_tables()
    create_all_tables()


# Workouts
workouts = Table(
    'workouts',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('user_id', String(100), nullable=False, index=True),
    Column('type', String(20), nullable=False),
    Column('duration', Float, nullable=False),  # minutes
    Column('calories', Float, nullable=False),
    Column('date', DateTime(timezone=True), nullable=False),
    Column('image', Text, nullable=False, server_default=''),
    Column('notes', Text, nullable=False, server_default=''),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    # Day-range lookups for the streak predicate and range listings
    Index('idx_workouts_user_date', 'user_id', 'date'),
)

# Meals
meals = Table(
    'meals',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('user_id', String(100), nullable=False, index=True),
    Column('food_name', Text, nullable=False),
    Column('calories', Float, nullable=False),
    Column('meal_type', String(20), nullable=False, server_default='breakfast'),
    Column('date', DateTime(timezone=True), nullable=False),
    Column('image', Text, nullable=False, server_default=''),
    Column('quantity', String(100), nullable=False, server_default='1 serving'),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Index('idx_meals_user_date', 'user_id', 'date'),
)

# Water intake (one row per user per calendar day, maintained by the water service)
water_intake = Table(
    'water_intake',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('user_id', String(100), nullable=False, index=True),
    Column('glasses', Integer, nullable=False),
    Column('date', DateTime(timezone=True), nullable=False),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Index('idx_water_intake_user_date', 'user_id', 'date'),
)

# Streak counters (one row per user)
streaks = Table(
    'streaks',
    metadata,
    Column('user_id', String(100), primary_key=True),
    Column('workout_streak', Integer, nullable=False, server_default='0'),
    Column('water_streak', Integer, nullable=False, server_default='0'),
    Column('diet_streak', Integer, nullable=False, server_default='0'),
    Column('last_workout_date', DateTime(timezone=True), nullable=True),
    Column('last_water_date', DateTime(timezone=True), nullable=True),
    Column('last_diet_date', DateTime(timezone=True), nullable=True),
    # Bumped on every save; saves are compare-and-swap on this column
    Column('version', Integer, nullable=False, server_default='0'),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
)

# Earned badges
streak_badges = Table(
    'streak_badges',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('user_id', String(100), nullable=False, index=True),
    Column('name', String(100), nullable=False),
    Column('description', Text, nullable=False),
    Column('image', Text, nullable=False),
    Column('earned_date', DateTime(timezone=True), nullable=False),
    Column('position', Integer, nullable=False),
    # At most one badge per name per user
    UniqueConstraint('user_id', 'name', name='uq_streak_badges_user_name'),
    Index('idx_streak_badges_user_position', 'user_id', 'position'),
)
