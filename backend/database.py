# backend/database.py
import logging
import time
from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from config import settings

logger = logging.getLogger(__name__)

# Deadline classes for a single store call
QUERY_TIMEOUT = settings.DB_QUERY_TIMEOUT
LOOKUP_TIMEOUT = settings.DB_LOOKUP_TIMEOUT

# SQLite checks the progress handler every N virtual machine instructions
_SQLITE_PROGRESS_STEPS = 1000


def create_db_engine(url: str) -> Engine:
    """Build a pooled engine: bounded size, no overflow, recycled connections."""
    # Azure hands out postgres:// URLs, SQLAlchemy expects postgresql://
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)

    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        connect_args = {"check_same_thread": False}  # Tylko dla SQLite
        if parsed.database in (None, "", ":memory:"):
            # One shared connection, otherwise every checkout sees an empty database
            return create_engine(url, connect_args=connect_args, poolclass=StaticPool)
    else:
        connect_args = {}

    return create_engine(
        url,
        connect_args=connect_args,
        pool_size=settings.DB_MAX_OPEN_CONNS,
        max_overflow=0,
        pool_timeout=settings.DB_LOOKUP_TIMEOUT,
        pool_recycle=settings.DB_CONN_MAX_LIFETIME,
        pool_pre_ping=True,
    )


engine = create_db_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind: Engine = engine):
    Base.metadata.create_all(bind=bind)


def _arm_deadline(db: Session, timeout: float) -> Callable[[], None]:
    """Bound every statement issued through ``db`` by ``timeout`` seconds.

    Returns a callable that disarms the deadline again.
    """
    conn = db.connection()
    dialect = conn.dialect.name

    if dialect == "postgresql":
        # Transaction-local, reset by the commit/rollback that ends the call
        conn.execute(
            text("SELECT set_config('statement_timeout', :ms, true)"),
            {"ms": str(int(timeout * 1000))},
        )
        return lambda: None

    if dialect == "sqlite":
        raw = conn.connection.driver_connection
        expires_at = time.monotonic() + timeout
        raw.set_progress_handler(lambda: time.monotonic() > expires_at, _SQLITE_PROGRESS_STEPS)
        return lambda: raw.set_progress_handler(None, 0)

    logger.debug("No statement deadline support for dialect %s", dialect)
    return lambda: None


class Gateway:
    """Hands out sessions whose statements run under a per-call deadline."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def session(self, timeout: float = QUERY_TIMEOUT) -> Iterator[Session]:
        db = self._session_factory()
        disarm = lambda: None
        try:
            disarm = _arm_deadline(db, timeout)
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            disarm()
            db.close()
