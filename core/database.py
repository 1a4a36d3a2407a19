"""
core/database.py -- Engine factory and error translation shared by the stores.

One engine per process. lifespan in api/main.py creates it and hands it to
UserStore and ApplianceStore; the stores never create engines themselves.

Usage:
    engine = create_db_engine("sqlite:///banco-de-dados.db")
    users = UserStore(engine)
    appliances = ApplianceStore(engine)
    ...
    engine.dispose()

Layer rule: core/ is the kernel. No imports from api/, auth/, or inventory/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import Pool

from core.errors import DuplicateKeyError, StoreError

logger = logging.getLogger("appliance_tracker.store")


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def create_db_engine(db_url: str, poolclass: Optional[type[Pool]] = None) -> Engine:
    """Create the process-wide engine.

    check_same_thread=False because FastAPI runs sync handlers in a threadpool,
    so a pooled SQLite connection may be used from a thread other than the one
    that opened it. SQLite serializes the writes itself.

    poolclass is left to SQLAlchemy unless given. In-memory URIs should pass
    one, since picking the pool from mode=memory is deprecated.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    kwargs: dict = {"connect_args": connect_args}
    if poolclass is not None:
        kwargs["poolclass"] = poolclass
    engine = create_engine(db_url, **kwargs)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Translate SQLAlchemy failures raised inside the block into StoreError.

    The driver message goes to the log only; the StoreError message is the
    generic `action` text, which is what the client ends up seeing.
    """
    try:
        yield
    except IntegrityError as exc:
        logger.warning("Constraint violation while trying to %s: %s", action, exc.orig)
        raise DuplicateKeyError(f"Could not {action}.") from exc
    except SQLAlchemyError as exc:
        logger.exception("Database error while trying to %s", action)
        raise StoreError(f"Could not {action}.") from exc
