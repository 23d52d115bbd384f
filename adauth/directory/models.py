from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


DIRECTORY = "directory"
AD_CONTROLLER = "adcontroller"


@dataclass(frozen=True)
class DirectoryEndpoint:
    name: str
    host: str
    search_base: str
    user_filter: str  # format string, "{username}" is substituted (escaped)
    allows_anonymous_lookup: bool = False

    def filter_for(self, username: str) -> str:
        return self.user_filter.format(username=username)


DEFAULT_ENDPOINTS: Tuple[DirectoryEndpoint, ...] = (
    DirectoryEndpoint(
        name=DIRECTORY,
        host="directory.colorado.edu",
        search_base="OU=people,DC=colorado,DC=edu",
        user_filter="(uid={username})",
        allows_anonymous_lookup=True,
    ),
    DirectoryEndpoint(
        name=AD_CONTROLLER,
        host="dc11.ad.colorado.edu",
        search_base="DC=ad,DC=colorado,DC=edu",
        user_filter="(CN={username})",
    ),
)


@dataclass(frozen=True)
class DirectoryConfig:
    endpoints: Tuple[DirectoryEndpoint, ...] = DEFAULT_ENDPOINTS
    port: int = 636
    use_ssl: bool = True
    user_prefix: str = "AD\\"
    mail_domain: str = "colorado.edu"
    tls_validate: bool = False
    ca_certs_file: str = ""
    connect_timeout: Optional[int] = None

    def endpoint(self, name: str) -> DirectoryEndpoint | None:
        for ep in self.endpoints:
            if ep.name == name:
                return ep
        return None

    def bind_principal(self, username: str) -> str:
        return f"{self.user_prefix}{username}"

    def default_mail(self, username: str) -> str:
        return f"{username}@{self.mail_domain}"


@dataclass(frozen=True)
class GroupMembership:
    cn: str
    ou: str


@dataclass(frozen=True)
class DirectoryEntry:
    dn: str
    given_name: Optional[str] = None
    surname: Optional[str] = None
    display_name: Optional[str] = None
    mail: Optional[str] = None
    uuid: Optional[str] = None
    member_of: Tuple[str, ...] = field(default_factory=tuple)
