import logging
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

# Base class for all database models
# All models inherit from this to get SQLAlchemy ORM functionality
Base = declarative_base()


def create_session_factory(engine: Engine) -> sessionmaker:
    """
    Build the session factory used by the durable store.

    autocommit=False: changes require explicit commit
    autoflush=False: don't auto-flush before queries
    expire_on_commit=False: rows stay readable after the store closes the session
    """
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def connect_database(database_url: Optional[str]) -> Optional[Engine]:
    """
    Open the durable store once at process start.

    Returns a live engine with tables created, or None when no URL is
    configured or the database cannot be reached. The caller treats None as
    "run in fallback mode" - there is no retry until the next start.
    """
    if not database_url:
        logger.warning("No DATABASE_URL provided - running in fallback mode")
        logger.warning("Data will not persist between server restarts")
        return None

    try:
        # pool_pre_ping: drop dead pooled connections instead of failing a request with them
        engine = create_engine(database_url, pool_pre_ping=True)
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        # Import models so their tables are registered on Base.metadata
        from launchlog.models import user, user_data  # noqa: F401
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        logger.error(f"Database connection error: {e}")
        logger.warning("Running in fallback mode - data will not persist")
        return None

    logger.info("Connected to durable store")
    return engine
