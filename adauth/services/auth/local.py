from __future__ import annotations

from sqlalchemy.orm import Session

from ...repo import get_account_by_login
from ...security import verify_password
from .backend import AuthResult


def authenticate(db: Session, result: AuthResult, username: str, password: str) -> AuthResult:
    """Password check against the local account store.

    Runs after the directory filter; an earlier success is kept as is, and a
    failed local check keeps the earlier result (and its error message).
    """
    if result.success:
        return result
    if not username or not password:
        return result

    acc = get_account_by_login(db, username)
    if acc is None or not acc.is_enabled:
        return result
    if not verify_password(password, acc.password_hash):
        return result
    return AuthResult.accepted(acc, auth="local")
