from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.orm import Session

from ...directory import AD_CONTROLLER, DirectoryClient, DirectoryConfig, DirectoryEntry
from ...models import LocalAccount
from ...repo import get_account_by_login, insert_account
from ...roles import DEFAULT_ROLE_TABLE, RoleTable, role_for_tier
from ...security import generate_random_password
from .backend import AuthResult


log = logging.getLogger(__name__)

DENIED_MESSAGE = "ERROR: We could not authenticate you with the Active Directory."
AUTO_ADDED_DESCRIPTION = "Auto added by AD Auth"

ClientFactory = Callable[[DirectoryConfig, str], DirectoryClient]


class DirectoryAuthenticator:
    """Login filter: bind against the directory, provision on first login.

    Accounts are created only for users in at least one recognized group, with
    the role of the highest tier among them. Existing accounts are returned as
    they are (no role refresh). A user who binds fine but is in no recognized
    group is accepted without an account; that is how it has always behaved.

    NOTE: every bind attempt counts against the user's directory lockout
    (5 bad passwords lock the campus account for 10 minutes).
    """

    def __init__(
        self,
        cfg: DirectoryConfig,
        role_table: RoleTable = DEFAULT_ROLE_TABLE,
        *,
        endpoint: str = AD_CONTROLLER,
        client_factory: ClientFactory = DirectoryClient,
    ) -> None:
        self.cfg = cfg
        self.role_table = role_table
        self.endpoint = endpoint
        self.client_factory = client_factory

    def __call__(self, db: Session, result: AuthResult, username: str, password: str) -> AuthResult:
        return self.authenticate(db, username, password)

    def authenticate(self, db: Session, username: str, password: str) -> AuthResult:
        if not username or not password:
            return AuthResult.not_authenticated()

        client = self.client_factory(self.cfg, self.endpoint)
        try:
            if not client.authenticate(username, password):
                log.info("Directory login denied: user=%s", username)
                denied = AuthResult.denied(DENIED_MESSAGE, auth="directory")
                denied.shake_codes.add("denied")
                return denied

            account = get_account_by_login(db, username)
            if account is not None:
                if not account.is_enabled:
                    log.info("Directory login refused, local account disabled: user=%s", username)
                    return AuthResult.not_authenticated()
                return AuthResult.accepted(account, auth="directory")

            return AuthResult.accepted(self._provision(db, client, username), auth="directory")
        finally:
            client.close()

    def _provision(self, db: Session, client: DirectoryClient, username: str) -> LocalAccount | None:
        found = client.lookup_user(username)
        entry = found[0] if found else None

        groups = [g.cn for g in client.get_memberships(entry)] if entry else []
        tier = self.role_table.highest_tier(groups)
        if not tier:
            log.info("Directory login accepted without local account (no recognized group): user=%s", username)
            return None

        role = role_for_tier(tier)
        acc = insert_account(db, self.account_fields(username, entry, role))
        log.info("Provisioned %s as %s (tier %d)", username, role, tier)
        return get_account_by_login(db, acc.login)

    def account_fields(self, username: str, entry: DirectoryEntry | None, role: str) -> dict:
        entry = entry or DirectoryEntry(dn="")
        return {
            "password": generate_random_password(),
            "login": username,
            "nicename": username,
            "nickname": username,
            "display_name": entry.display_name or username,
            "email": entry.mail or self.cfg.default_mail(username),
            "first_name": entry.given_name or "",
            "last_name": entry.surname or "",
            "description": AUTO_ADDED_DESCRIPTION,
            "role": role,
        }
