"""Test fixtures."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator

# Settings are read on first import of adauth.db; point them somewhere disposable.
_TMP = tempfile.mkdtemp(prefix="adauth-test-")
os.environ.setdefault("APP_SECRET_KEY", "test-secret-key")
os.environ.setdefault("SQLITE_PATH", os.path.join(_TMP, "app.db"))
os.environ.setdefault("LOG_DIR", os.path.join(_TMP, "logs"))

import pytest
from sqlalchemy.orm import Session, sessionmaker

from adauth.db import Base, make_engine
from adauth.directory import DirectoryConfig

from .support.ldap import MockLDAP, patch_ldap


@pytest.fixture
def db() -> Iterator[Session]:
    """Session on a fresh in-memory database."""
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, future=True)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def mock_ldap(monkeypatch: pytest.MonkeyPatch) -> MockLDAP:
    return patch_ldap(monkeypatch)


@pytest.fixture
def directory_config() -> DirectoryConfig:
    return DirectoryConfig()
