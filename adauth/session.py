from __future__ import annotations

from typing import Any, Dict, TYPE_CHECKING

from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from .env_settings import get_env

if TYPE_CHECKING:
    from .models import LocalAccount


SESSION_COOKIE = "adauth_session"
SESSION_MAX_AGE = 8 * 60 * 60


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(get_env().secret_key, salt="adauth-session")


def session_payload(account: "LocalAccount", auth: str) -> Dict[str, Any]:
    return {
        "login": account.login,
        "display_name": account.display_name or account.login,
        "role": account.role,
        "auth": auth,
    }


def create_session(data: Dict[str, Any]) -> str:
    return _serializer().dumps(data)


def read_session(token: str, max_age_seconds: int = SESSION_MAX_AGE) -> Dict[str, Any] | None:
    try:
        data = _serializer().loads(token, max_age=max_age_seconds)
    except (BadSignature, SignatureExpired):
        return None
    if not isinstance(data, dict) or "login" not in data:
        return None
    return data
