"""DB schema bootstrap (SQLite).

No Alembic: tables are created when missing, and columns added after the
first release are patched in with ALTER TABLE.
"""

from __future__ import annotations

from sqlalchemy import Engine

from .db import engine as default_engine
from .models import Base


def ensure_schema(engine: Engine | None = None) -> None:
    eng = engine or default_engine
    Base.metadata.create_all(bind=eng)

    with eng.begin() as conn:
        cols = [r[1] for r in conn.exec_driver_sql("PRAGMA table_info(local_accounts)").fetchall()]
        if "is_enabled" not in cols:
            conn.exec_driver_sql("ALTER TABLE local_accounts ADD COLUMN is_enabled BOOLEAN NOT NULL DEFAULT 1")
