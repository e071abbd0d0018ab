"""Engine and sessions for the survey store and score cache.

Surveys live in a SQLite file unless ``DATABASE_URL`` points elsewhere. The
file is resolved from an explicit path, then ``ROOMMATE_MATCH_DB_PATH``, then
``data/roommate_match.db`` at the project root.
"""

import os
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from roommate_match.models.db_models import Base

DATABASE_URL_ENV = "DATABASE_URL"
DB_PATH_ENV = "ROOMMATE_MATCH_DB_PATH"
DEFAULT_DB_PATH = Path(__file__).resolve().parents[3] / "data" / "roommate_match.db"

# Seconds a writer waits on a locked SQLite file
SQLITE_BUSY_TIMEOUT = 30

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def sqlite_path(db_path: Path | str | None = None) -> Path:
    """Resolve the SQLite file holding surveys and cached scores."""
    if db_path:
        return Path(db_path)
    return Path(os.environ.get(DB_PATH_ENV) or DEFAULT_DB_PATH)


def get_database_url(db_path: Path | str | None = None) -> str:
    """Get the database URL. ``DATABASE_URL`` wins over any SQLite path."""
    return os.environ.get(DATABASE_URL_ENV) or f"sqlite:///{sqlite_path(db_path)}"


def _open_sqlite(url: str, db_file: Path | None, echo: bool) -> Engine:
    if db_file is not None:
        db_file.parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        url,
        echo=echo,
        connect_args={"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT},
    )
    # Readers keep scoring while a survey import holds the write lock
    with engine.connect() as conn:
        conn.execute(text("PRAGMA journal_mode=WAL"))
        conn.commit()
    return engine


def get_engine(db_path: Path | str | None = None, echo: bool = False) -> Engine:
    """Get the shared engine, creating it and its tables on first use.

    Args:
        db_path: SQLite file. Ignored when DATABASE_URL is set.
        echo: Whether to echo SQL statements.

    Returns:
        SQLAlchemy Engine instance.
    """
    global _engine

    if _engine is None:
        url = get_database_url(db_path)
        if url.startswith("sqlite"):
            from_env = bool(os.environ.get(DATABASE_URL_ENV))
            _engine = _open_sqlite(url, None if from_env else sqlite_path(db_path), echo)
        else:
            _engine = create_engine(url, echo=echo)
        Base.metadata.create_all(_engine)

    return _engine


def init_db(db_path: Path | str | None = None, echo: bool = False) -> Engine:
    """Create the survey and score tables."""
    return get_engine(db_path, echo)


@contextmanager
def get_session(engine: Engine | None = None) -> Generator[Session, None, None]:
    """Open a session on the shared engine, closing it on exit.

    Args:
        engine: Engine to bind the first session factory to. Defaults to get_engine().

    Yields:
        Database session.
    """
    global _session_factory

    if _session_factory is None:
        _session_factory = sessionmaker(autoflush=False, bind=engine or get_engine())

    session = _session_factory()
    try:
        yield session
    finally:
        session.close()


def reset_engine() -> None:
    """Dispose of the shared engine so the next call resolves the database again."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
