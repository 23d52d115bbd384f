from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .db import SessionLocal
from .models import LocalAccount
from .security import hash_password


log = logging.getLogger(__name__)

# Fields accepted by insert_account besides "login" and "password".
_ACCOUNT_FIELDS = (
    "nicename",
    "nickname",
    "display_name",
    "email",
    "first_name",
    "last_name",
    "description",
    "role",
)


@contextmanager
def db_session() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_account_by_login(db: Session, login: str) -> LocalAccount | None:
    # Logins are case-insensitive, like directory binds.
    login = (login or "").strip().lower()
    return db.scalar(select(LocalAccount).where(func.lower(LocalAccount.login) == login))


def insert_account(db: Session, userinfo: Mapping[str, Any]) -> LocalAccount:
    """Create an account from ``userinfo`` and return it.

    ``userinfo["password"]`` is plaintext and is stored hashed. An existing
    account with the same login is returned untouched.
    """
    login = str(userinfo.get("login") or "").strip()
    password = str(userinfo.get("password") or "")
    if not login:
        raise ValueError("login is required")
    if not password:
        raise ValueError("password is required")

    existing = get_account_by_login(db, login)
    if existing is not None:
        return existing

    acc = LocalAccount(login=login, password_hash=hash_password(password))
    for name in _ACCOUNT_FIELDS:
        value = userinfo.get(name)
        if value is not None:
            setattr(acc, name, str(value))
    db.add(acc)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent first login for the same user.
        db.rollback()
        existing = get_account_by_login(db, login)
        if existing is None:
            raise
        return existing
    db.refresh(acc)
    log.info("Local account created: login=%s role=%s", acc.login, acc.role)
    return acc


def ensure_bootstrap_admin(db: Session, login: str, password_hash: str) -> None:
    exists = db.scalar(select(LocalAccount.id).limit(1))
    if exists:
        return
    acc = LocalAccount(
        login=login,
        password_hash=password_hash,
        nicename=login,
        nickname=login,
        display_name=login,
        description="Bootstrap administrator",
        role="administrator",
    )
    db.add(acc)
    db.commit()
