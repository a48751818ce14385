"""
Database connection setup.
"""
import logging
import threading
import time

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker

from app.config import settings
from app.errors import ConnectivityError

logger = logging.getLogger(__name__)

# SQLite needs check_same_thread=False when sessions cross threads
connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=connect_args,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Request-scoped database session."""
    ensure_schema()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ping(bind: Engine = engine) -> bool:
    """Return True when a trivial query succeeds against ``bind``."""
    try:
        with bind.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.warning("Database ping failed: %s", e)
        return False


def wait_for_database(
    bind: Engine = engine,
    retries: int = settings.DB_CONNECT_RETRIES,
    delay: float = settings.DB_RETRY_DELAY_SECONDS,
) -> None:
    """Probe the database until it answers, sleeping ``delay`` between tries.

    Raises ``ConnectivityError`` once all ``retries`` attempts have failed.
    """
    for attempt in range(1, retries + 1):
        logger.info("Attempting database connection (%d/%d)", attempt, retries)
        if ping(bind):
            logger.info("Database ping successful")
            return
        if attempt < retries:
            logger.info("Retrying database connection in %.1f seconds...", delay)
            time.sleep(delay)
    raise ConnectivityError(f"Database unreachable after {retries} attempts")


_schema_lock = threading.Lock()
_schema_ready: set = set()


def ensure_schema(bind: Engine = engine) -> bool:
    """Create missing tables on ``bind`` once per engine.

    Returns False (and logs) while the database cannot be reached, so a
    later call can try again.
    """
    if bind in _schema_ready:
        return True
    with _schema_lock:
        if bind in _schema_ready:
            return True
        # Import models so Base.metadata knows about them
        from app import models  # noqa: F401
        try:
            Base.metadata.create_all(bind=bind)
        except SQLAlchemyError as e:
            logger.warning("Could not create tables: %s", e)
            return False
        _schema_ready.add(bind)
    logger.info("Database tables ready (%s)", bind.url)
    return True
