"""SQLAlchemy engine utilities."""

import os
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


def resolve_db_path() -> Path:
    """Return ``HEALTH_DB_PATH`` if set, else ``health.db`` in the working directory."""

    env_path = os.environ.get("HEALTH_DB_PATH")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return (Path.cwd() / "health.db").resolve()


def get_engine(db_path: Path | None = None) -> Engine:
    """Return an engine bound to ``db_path`` (defaults to :func:`resolve_db_path`)."""

    db_path = db_path or resolve_db_path()
    url = f"sqlite:///{db_path}"
    return create_engine(
        url,
        connect_args={"check_same_thread": False},
        echo=False,
    )


def init_db(engine: Engine) -> Engine:
    """Create any missing tables on ``engine``."""

    from db import models  # noqa: F401 – side-effect import

    Base.metadata.create_all(engine)
    return engine
