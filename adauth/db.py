import os
from pathlib import Path

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool

from .env_settings import get_env


class Base(DeclarativeBase):
    pass


def _db_url() -> str:
    sqlite_path = (get_env().sqlite_path or "").strip() or "data/app.db"
    p = Path(sqlite_path)
    if not p.is_absolute():
        # Relative to the project root, not the process CWD.
        p = (Path(__file__).resolve().parents[1] / p).resolve()
    os.makedirs(p.parent, exist_ok=True)
    return f"sqlite:///{p.as_posix()}"


def _set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    try:
        cursor.execute("PRAGMA busy_timeout=5000")
    finally:
        cursor.close()


def make_engine(url: str) -> Engine:
    """SQLite engine; ``sqlite://`` gives a single shared in-memory database."""
    kwargs: dict = {"echo": False, "future": True, "connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    eng = create_engine(url, **kwargs)
    event.listen(eng, "connect", _set_sqlite_pragma)
    return eng


engine = make_engine(_db_url())

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
