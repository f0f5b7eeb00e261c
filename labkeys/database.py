import logging
from contextlib import contextmanager
from functools import wraps

from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from labkeys.config import settings
from labkeys.errors import StoreUnavailable

logger = logging.getLogger(__name__)


def make_engine(database_url: str):
    """Create an engine for the given URL.

    SQLite connections are switched to ``BEGIN IMMEDIATE`` so every unit of
    work takes the write lock up front; pysqlite's own deferred BEGIN would let
    two borrowers both read a key as Available before either writes.
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            echo=settings.db_echo,
            connect_args={"check_same_thread": False, "timeout": settings.sqlite_busy_timeout},
        )

        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            # Hand transaction control to SQLAlchemy
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

        return engine

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=10,
        max_overflow=20,
        echo=settings.db_echo,
    )


engine = make_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session):
    """Commit everything done inside the block, or roll all of it back."""
    try:
        yield db
        db.commit()
    except OperationalError as e:
        db.rollback()
        logger.error(f"Unit of work aborted, store unavailable: {e}")
        raise StoreUnavailable() from e
    except Exception:
        db.rollback()
        raise


def retry_read(func):
    """Retry an idempotent read on ``OperationalError``.

    Never wrap a write with this: a failed commit may already have landed.
    """
    @wraps(func)
    def wrapper(db: Session, *args, **kwargs):
        attempts = settings.db_read_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return func(db, *args, **kwargs)
            except OperationalError as e:
                db.rollback()
                logger.warning(f"{func.__name__} failed (attempt {attempt}/{attempts}): {e}")
                if attempt == attempts:
                    raise StoreUnavailable() from e
    return wrapper
