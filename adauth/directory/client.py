from __future__ import annotations

import logging
import re
import ssl
from typing import Any

from ldap3 import ANONYMOUS, NONE, SIMPLE, SUBTREE, Connection, Server, Tls
from ldap3.core.exceptions import LDAPException

from .errors import DirectoryConfigurationError
from .models import DIRECTORY, DirectoryConfig, DirectoryEndpoint, DirectoryEntry, GroupMembership
from .utils import USER_ATTRIBUTES, escape_ldap_filter_value, parse_memberships, parse_search_response


log = logging.getLogger(__name__)


class DirectoryClient:
    """Connection to one of the configured directory endpoints.

    State: disconnected -> connected (connect) -> authenticated (successful bind)
    -> disconnected (close). Failures never raise; they are recorded in
    ``error`` / ``errno`` and surface as False or an empty result.

    One instance is meant to live for a single authentication request: the
    user entry fetched by ``get_memberships`` is cached on the instance and
    dropped by ``close``.
    """

    def __init__(self, cfg: DirectoryConfig, endpoint: str = DIRECTORY, *, auto_connect: bool = True) -> None:
        self.cfg = cfg
        self.endpoint_name = endpoint
        self.conn: Connection | None = None
        self.connected = False
        self.authenticated = False
        self.error = ""
        self.errno = 0
        self.username = ""
        self._entry: DirectoryEntry | None = None
        self._entry_loaded = False
        if auto_connect:
            self.connect()

    @property
    def endpoint(self) -> DirectoryEndpoint | None:
        return self.cfg.endpoint(self.endpoint_name)

    def _tls(self) -> Tls:
        kwargs: dict[str, Any] = {
            "validate": ssl.CERT_REQUIRED if self.cfg.tls_validate else ssl.CERT_NONE,
        }
        if self.cfg.tls_validate and self.cfg.ca_certs_file:
            kwargs["ca_certs_file"] = self.cfg.ca_certs_file
        return Tls(**kwargs)

    def _record(self, message: str, exc: Exception | None = None) -> None:
        detail = str(exc) if exc is not None else ""
        if self.conn is not None:
            res = dict(self.conn.result or {})
            self.errno = int(res.get("result") or 0)
            if not detail:
                detail = str(res.get("description") or res.get("message") or "")
        self.error = f"{message}:\n{detail}" if detail else message
        log.warning("Directory %s: %s", self.endpoint_name, self.error.replace("\n", " "))

    # Connection lifecycle

    def connect(self) -> bool:
        ep = self.endpoint
        if ep is None:
            self._record(f"Unknown directory endpoint {self.endpoint_name!r}")
            return False

        try:
            server = Server(
                host=ep.host,
                port=self.cfg.port,
                use_ssl=self.cfg.use_ssl,
                get_info=NONE,
                tls=self._tls(),
                connect_timeout=self.cfg.connect_timeout,
            )
            conn = Connection(server, version=3, auto_bind=False, auto_referrals=False)
            conn.open()
        except LDAPException as e:
            self._record("Could not connect to active directory controller", e)
            return False

        self.conn = conn
        self.connected = True
        log.debug("Connected to %s (%s:%s)", ep.name, ep.host, self.cfg.port)
        return True

    def close(self) -> None:
        if self.connected and self.conn is not None:
            try:
                self.conn.unbind()
            except LDAPException:
                log.debug("Unbind from %s failed", self.endpoint_name, exc_info=True)
        self.conn = None
        self.connected = False
        self.authenticated = False
        self._entry = None
        self._entry_loaded = False

    def change_endpoint(self, name: str) -> bool:
        """Switch to another endpoint. Leaves the client connected but unauthenticated."""
        self.close()
        self.endpoint_name = name
        return self.connect()

    # Binding

    def bind_with_credentials(self, username: str, password: str) -> bool:
        if username != self.username:
            self._entry = None
            self._entry_loaded = False
        self.username = username
        if not self.connected or self.conn is None:
            self._record("Error binding user with active directory connection", DirectoryConfigurationError("not connected"))
            return False
        if not password:
            # A simple bind with an empty password is an unauthenticated bind and succeeds.
            self._record("Error binding user with active directory connection", DirectoryConfigurationError("empty password"))
            return False

        self.conn.user = self.cfg.bind_principal(username)
        self.conn.password = password
        self.conn.authentication = SIMPLE
        try:
            ok = bool(self.conn.bind())
        except LDAPException as e:
            self._record("Error binding user with active directory connection", e)
            ok = False
        else:
            if not ok:
                self._record("Error binding user with active directory connection")
        self.authenticated = ok
        return ok

    def bind_anonymous(self) -> bool:
        """Anonymous bind. Only the "directory" endpoint allows anonymous lookups."""
        if not self.connected or self.conn is None:
            self._record("Error binding anonymously with active directory connection", DirectoryConfigurationError("not connected"))
            return False

        self.conn.user = ""
        self.conn.password = ""
        self.conn.authentication = ANONYMOUS
        try:
            ok = bool(self.conn.bind())
        except LDAPException as e:
            self._record("Error binding anonymously with active directory connection", e)
            ok = False
        self.authenticated = ok
        return ok

    def authenticate(self, username: str, password: str) -> bool:
        self.authenticated = False
        self.bind_with_credentials(username, password)
        return self.authenticated

    # Lookups

    def _search(self, base: str, search_filter: str) -> list[DirectoryEntry]:
        if not self.connected or self.conn is None:
            return []
        try:
            ok = self.conn.search(
                search_base=base,
                search_filter=search_filter,
                search_scope=SUBTREE,
                attributes=USER_ATTRIBUTES,
            )
        except LDAPException as e:
            self._record("Error searching the directory", e)
            return []
        if not ok:
            return []
        return parse_search_response(self.conn.response)

    def lookup_user(self, username: str | None = None) -> list[DirectoryEntry]:
        """Look the user up on the current endpoint (uid on "directory", CN on the AD controller)."""
        username = username or self.username
        ep = self.endpoint
        if not username or ep is None:
            return []
        return self._search(ep.search_base, ep.filter_for(escape_ldap_filter_value(username)))

    def _require_free_lookup(self, param: str, value: str) -> DirectoryEndpoint:
        ep = self.endpoint
        if ep is None or not ep.allows_anonymous_lookup:
            raise DirectoryConfigurationError('LDAP connection must be the "Directory"')
        if not value:
            raise DirectoryConfigurationError(f"{param} parameter cannot be empty.")
        if not self.connected:
            raise DirectoryConfigurationError("The ldap connection is not active.")
        return ep

    def _free_lookup(self, what: str, param: str, value: str, search_filter: str) -> list[DirectoryEntry]:
        try:
            ep = self._require_free_lookup(param, value)
        except DirectoryConfigurationError as e:
            self._record(f"Error looking up user by {what}", e)
            return []
        return self._search(ep.search_base, search_filter)

    def lookup_user_by_name(self, name: str) -> list[DirectoryEntry]:
        flt = f"(cn={escape_ldap_filter_value(name)})"
        return self._free_lookup("name", "Name", name, flt)

    def lookup_user_by_id(self, uuid: str) -> list[DirectoryEntry]:
        flt = f"(cuedupersonuuid={escape_ldap_filter_value(uuid)})"
        return self._free_lookup("id", "UUID", uuid, flt)

    def lookup_user_by_relative_name(self, name: str) -> list[DirectoryEntry]:
        """Prefix match on displayName ("Jane" finds "Jane Doe")."""
        flt = f"(displayname={escape_ldap_filter_value(name)} *)"
        return self._free_lookup("relative name", "Name", name, flt)

    # Group membership

    def current_entry(self) -> DirectoryEntry | None:
        if not self._entry_loaded:
            found = self.lookup_user()
            self._entry = found[0] if found else None
            self._entry_loaded = True
        return self._entry

    def get_memberships(self, entry: DirectoryEntry | None = None) -> list[GroupMembership]:
        if entry is None:
            entry = self.current_entry()
        if entry is None:
            return []
        return parse_memberships(entry.member_of)

    def is_member(self, group: str, entry: DirectoryEntry | None = None) -> bool:
        return any(g.cn == group for g in self.get_memberships(entry))

    def is_member_matching(self, pattern: str, entry: DirectoryEntry | None = None) -> bool:
        """Like is_member, but with a regular expression ("ASSETT-.*" etc.)."""
        try:
            rx = re.compile(pattern)
        except re.error as e:
            self._record(f"Invalid group pattern {pattern!r}", e)
            return False
        return any(rx.search(g.cn) for g in self.get_memberships(entry))
