"""
PostgreSQL database access

This module centralizes every way the application talks to the database:
- SQLAlchemy (table metadata used by the schema migration, ORM sessions)
- psycopg2 directly (raw SQL used by the repositories)

Author: TM3
Updated: 2025-10-17
"""
import time
import logging

import psycopg2
from psycopg2.extras import RealDictCursor
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings

logger = logging.getLogger(__name__)

CONNECTION_TIMEOUT = settings.CONNECTION_TIMEOUT


# ============================================================================
# SQLAlchemy Configuration (for ORM models)
# ============================================================================

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,  # Verify the connection before using it
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    FastAPI dependency that yields a SQLAlchemy session

    Usage:
        @app.get("/items")
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ============================================================================
# psycopg2 Direct Connections (for raw SQL queries)
# ============================================================================

def _database_url() -> str:
    database_url = settings.DATABASE_URL
    if not database_url:
        raise Exception("DATABASE_URL not configured")
    return database_url


def get_db_connection():
    """
    Get a direct psycopg2 database connection (returns tuples)

    Example:
        conn = get_db_connection()
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM orders")
        results = cursor.fetchall()
        cursor.close()
        conn.close()
    """
    return psycopg2.connect(_database_url(), connect_timeout=CONNECTION_TIMEOUT)


def get_db_connection_dict():
    """
    Get a database connection with RealDictCursor (returns dictionaries)

    Repositories use this one so rows map straight onto domain models.
    """
    return psycopg2.connect(
        _database_url(),
        cursor_factory=RealDictCursor,
        connect_timeout=CONNECTION_TIMEOUT,
    )


# ============================================================================
# Database Connection with Retry Logic
# ============================================================================

def _connect_with_retry(max_retries: int, retry_delay: float, cursor_factory=None):
    """
    Open a connection, retrying OperationalError with exponential backoff.

    Any other error fails immediately.
    """
    database_url = _database_url()
    last_error = None

    for attempt in range(1, max_retries + 1):
        try:
            logger.debug(f"Database connection attempt {attempt}/{max_retries}")
            kwargs = {"connect_timeout": CONNECTION_TIMEOUT}
            if cursor_factory is not None:
                kwargs["cursor_factory"] = cursor_factory
            conn = psycopg2.connect(database_url, **kwargs)

            # Test connection with a simple query
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            cursor.close()

            logger.debug(f"Database connection successful on attempt {attempt}")
            return conn

        except psycopg2.OperationalError as e:
            last_error = e
            error_msg = str(e)

            if "SSL connection has been closed unexpectedly" in error_msg:
                logger.warning(f"SSL connection error on attempt {attempt}/{max_retries}: {error_msg}")
            else:
                logger.warning(f"Connection error on attempt {attempt}/{max_retries}: {error_msg}")

            if attempt < max_retries:
                delay = retry_delay * (2 ** (attempt - 1))
                logger.info(f"Retrying in {delay:.2f} seconds...")
                time.sleep(delay)
            else:
                logger.error(f"All {max_retries} connection attempts failed")
                raise last_error

        except Exception as e:
            logger.error(f"Unexpected error during connection: {e}")
            raise

    raise last_error if last_error else Exception("Connection failed after all retries")


def get_db_connection_with_retry(max_retries=3, retry_delay=1.0):
    """
    Get a psycopg2 connection with automatic retry on connection failures

    Args:
        max_retries: Maximum number of connection attempts (default: 3)
        retry_delay: Initial delay between retries in seconds (default: 1.0)

    Returns:
        psycopg2 connection object

    Raises:
        psycopg2.OperationalError: If all retry attempts fail
    """
    return _connect_with_retry(max_retries, retry_delay)


def get_db_connection_dict_with_retry(max_retries=3, retry_delay=1.0):
    """
    Same as get_db_connection_with_retry but rows come back as dicts.
    """
    return _connect_with_retry(max_retries, retry_delay, cursor_factory=RealDictCursor)
