"""SQLAlchemy engine, connection pool and startup connectivity check.

Used only by the relational backend. Sessions are short-lived: the SQL
repository opens one transaction per operation from the session factory
created here.
"""

from __future__ import annotations

import logging
import time

from flask import Flask
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from inventory.models.base import Base

# Import models so they register with Base.metadata
from inventory import models  # noqa: F401

logger = logging.getLogger(__name__)


def create_app_engine(database_url: str, pool_size: int = 10) -> Engine:
    url = make_url(database_url)

    # SQLite keeps its dialect default pool; servers get a bounded QueuePool.
    if url.get_backend_name() == "sqlite":
        return create_engine(database_url, pool_pre_ping=True, future=True)

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=pool_size,
        max_overflow=0,
        future=True,
    )


def wait_for_database(engine: Engine, retries: int = 5, delay: float = 5.0) -> bool:
    """Probe the database until it answers or ``retries`` attempts fail.

    Returns:
        True once a connection succeeded, False after the last failed attempt.
    """

    attempts = max(1, int(retries))
    for attempt in range(1, attempts + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Connected to database %s", engine.url.render_as_string(hide_password=True))
            return True
        except SQLAlchemyError as exc:
            logger.warning("Database error (%d/%d): %s", attempt, attempts, exc.__class__.__name__)
            if attempt < attempts:
                time.sleep(delay)

    logger.error("Database unreachable after %d attempts", attempts)
    return False


def init_db(app: Flask) -> sessionmaker[Session]:
    """Create the engine, check it, create tables when reachable and register the session factory."""

    engine = create_app_engine(
        str(app.config["DATABASE_URL"]),
        pool_size=int(app.config.get("DB_POOL_SIZE", 10)),
    )
    session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    reachable = wait_for_database(
        engine,
        retries=int(app.config.get("DB_CONNECT_RETRIES", 5)),
        delay=float(app.config.get("DB_CONNECT_RETRY_DELAY", 5.0)),
    )
    if reachable:
        # Create tables for convenience (production would use migrations).
        Base.metadata.create_all(bind=engine)

    app.extensions["engine"] = engine
    app.extensions["session_factory"] = session_factory
    # Otherwise the SQL repository creates them on first use.
    app.extensions["schema_ready"] = reachable
    return session_factory
