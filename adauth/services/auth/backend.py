from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from sqlalchemy.orm import Session

if TYPE_CHECKING:
    from ...env_settings import EnvSettings
    from ...models import LocalAccount


log = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """Outcome of one login attempt as it travels through the pipeline.

    success=True with account=None means the credentials were accepted but
    there is no local account to log in with.
    """
    success: bool
    account: "LocalAccount | None" = None
    auth: str = ""  # directory|local
    error_code: str = ""  # denied|empty|""
    error_message: str = ""
    # Error codes that should make the login form shake.
    shake_codes: set[str] = field(default_factory=set)

    @classmethod
    def not_authenticated(cls) -> "AuthResult":
        return cls(success=False)

    @classmethod
    def denied(cls, message: str, auth: str = "") -> "AuthResult":
        return cls(success=False, auth=auth, error_code="denied", error_message=message)

    @classmethod
    def accepted(cls, account: "LocalAccount | None", auth: str) -> "AuthResult":
        return cls(success=True, account=account, auth=auth)

    @property
    def provisioned(self) -> bool:
        return self.success and self.account is not None

    @property
    def shake(self) -> bool:
        return bool(self.error_code) and self.error_code in self.shake_codes


LoginFilter = Callable[[Session, AuthResult, str, str], AuthResult]


class LoginPipeline:
    """Ordered chain of login filters (lower priority runs first).

    Each filter gets the previous filter's result and returns a new one.
    """

    def __init__(self) -> None:
        self._filters: list[tuple[int, int, LoginFilter]] = []

    def add_filter(self, fn: LoginFilter, priority: int = 10) -> None:
        # Insertion order breaks priority ties.
        self._filters.append((priority, len(self._filters), fn))
        self._filters.sort(key=lambda x: (x[0], x[1]))

    @property
    def filters(self) -> list[LoginFilter]:
        return [fn for _, _, fn in self._filters]

    def run(self, db: Session, username: str, password: str) -> AuthResult:
        result = AuthResult.not_authenticated()
        for fn in self.filters:
            result = fn(db, result, username, password)
        return result


def build_pipeline(env: "EnvSettings") -> LoginPipeline:
    from .directory import DirectoryAuthenticator
    from .local import authenticate as local_auth
    from ..directory import directory_cfg_from_env

    pipeline = LoginPipeline()
    if env.directory_enabled:
        authenticator = DirectoryAuthenticator(directory_cfg_from_env(env), endpoint=env.directory_endpoint)
        pipeline.add_filter(authenticator, priority=10)
    pipeline.add_filter(local_auth, priority=20)
    log.debug("Login pipeline: directory=%s", env.directory_enabled)
    return pipeline
