"""Database engine, session factory and base model setup."""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from workout_log.config import get_settings


logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for SQLAlchemy models."""


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine, making sure the parent directory of a SQLite file exists."""

    url = make_url(database_url)
    connect_args = {}
    if url.get_backend_name() == "sqlite":
        # Storage reads and writes run in worker threads.
        connect_args["check_same_thread"] = False
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(database_url, echo=echo, future=True, connect_args=connect_args)


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a session factory bound to ``engine``."""

    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@lru_cache()
def get_engine() -> Engine:
    """Engine for the configured database URL, created on first use."""

    settings = get_settings()
    return create_db_engine(settings.database_url, echo=settings.debug)


def init_db(engine: Engine | None = None) -> None:
    """Create the key-value table if it does not exist yet."""

    # Registers the table on Base.metadata.
    from workout_log.models import database_models  # noqa: F401

    engine = engine or get_engine()
    Base.metadata.create_all(engine)
    logger.info("Database schema ready at %s", engine.url.render_as_string(hide_password=True))
