from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base

from .core.config import Settings, settings
from .errors import StorageError

Base = declarative_base()


def _ensure_sqlite_path(url: str) -> None:
    if not url.startswith("sqlite"):
        return

    parsed = make_url(url)
    database = parsed.database
    if not database or database == ":memory:":
        return

    path = Path(database)
    path.parent.mkdir(parents=True, exist_ok=True)


def create_db_engine(url: str, *, config: Settings | None = None, **overrides: object) -> Engine:
    """Build the bounded, pooled engine shared by every batch of every request."""

    config = config or settings
    connect_args: dict[str, object] = {}
    engine_kwargs: dict[str, object] = {
        "echo": config.debug,
        "pool_pre_ping": True,
    }

    parsed = make_url(url)
    backend = parsed.get_backend_name()
    driver = parsed.get_driver_name()

    if backend == "sqlite":
        # Batches run on worker threads; each one checks out its own connection.
        connect_args["check_same_thread"] = False
        _ensure_sqlite_path(url)
        if parsed.database and parsed.database != ":memory:":
            engine_kwargs["pool_size"] = config.pool_size
            engine_kwargs["max_overflow"] = config.max_overflow
            engine_kwargs["pool_timeout"] = config.pool_timeout_seconds
    else:
        engine_kwargs["pool_size"] = config.pool_size
        engine_kwargs["max_overflow"] = config.max_overflow
        engine_kwargs["pool_timeout"] = config.pool_timeout_seconds
        # Recycle long-lived connections so pooler idle timeouts
        # do not kill them mid-request, and rely on pre-ping to revive stale ones.
        engine_kwargs["pool_recycle"] = config.pool_recycle_seconds

        if backend.startswith("postgresql"):
            connect_args.setdefault("keepalives", 1)
            connect_args.setdefault("keepalives_idle", 120)
            connect_args.setdefault("keepalives_interval", 30)
            connect_args.setdefault("keepalives_count", 5)
            # Transaction poolers reject PREPARE, so disable psycopg's
            # automatic server-side statements.
            if driver == "psycopg":
                connect_args.setdefault("prepare_threshold", None)

    if connect_args:
        engine_kwargs["connect_args"] = connect_args
    engine_kwargs.update(overrides)

    logger.info("Creating {} engine (pool_size={})", backend, engine_kwargs.get("pool_size"))
    return create_engine(url, **engine_kwargs)


@lru_cache
def get_engine() -> Engine:
    return create_db_engine(settings.resolved_database_url)


@contextmanager
def checkout(engine: Engine, *, context: str) -> Iterator[Connection]:
    """Check out one pooled connection for one read.

    The connection is returned to the pool on every path, and driver errors
    are re-raised as :class:`StorageError` carrying ``context``.
    """

    try:
        with engine.connect() as connection:
            yield connection
    except SQLAlchemyError as exc:
        raise StorageError(context) from exc


def init_db(engine: Engine) -> None:
    """Create the read-model tables; only used by local tooling and tests."""

    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
