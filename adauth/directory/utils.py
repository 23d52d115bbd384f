from __future__ import annotations

from typing import Any, Iterable

from ldap3.utils.conv import escape_filter_chars

from .models import DirectoryEntry, GroupMembership


# Attributes requested on every user search.
USER_ATTRIBUTES = ["memberof", "mail", "givenname", "sn", "displayname", "cuedupersonuuid"]


def escape_ldap_filter_value(value: str) -> str:
    """RFC 4515 escaping for LDAP filter values."""
    return escape_filter_chars(value or "")


def _strip_prefix(part: str, prefix: str) -> str:
    s = part.strip()
    if s[: len(prefix)].upper() == prefix.upper():
        return s[len(prefix):]
    return s


def parse_membership(value: str) -> GroupMembership:
    """Split a memberOf DN on its first comma.

    "CN=ASSETT-Staff,OU=Groups,DC=colorado,DC=edu"
        -> GroupMembership(cn="ASSETT-Staff", ou="Groups,DC=colorado,DC=edu")
    """
    head, _, tail = (value or "").partition(",")
    return GroupMembership(cn=_strip_prefix(head, "CN="), ou=_strip_prefix(tail, "OU="))


def parse_memberships(values: Iterable[str]) -> list[GroupMembership]:
    return [parse_membership(v) for v in values if v]


def _to_str(v: Any) -> str:
    if isinstance(v, bytes):
        return v.decode("utf-8", errors="replace")
    return str(v)


def _first(v: Any) -> str | None:
    if v is None:
        return None
    if isinstance(v, (list, tuple)):
        if not v:
            return None
        v = v[0]
    s = _to_str(v).strip()
    return s or None


def _many(v: Any) -> tuple[str, ...]:
    if v is None:
        return ()
    if isinstance(v, (list, tuple)):
        return tuple(_to_str(x) for x in v if x)
    s = _to_str(v)
    return (s,) if s else ()


def parse_entry(dn: str, attributes: dict) -> DirectoryEntry:
    # ldap3 hands back a CaseInsensitiveDict; plain dicts (and tests) may not be.
    attrs = {str(k).lower(): v for k, v in (attributes or {}).items()}
    return DirectoryEntry(
        dn=dn or "",
        given_name=_first(attrs.get("givenname")),
        surname=_first(attrs.get("sn")),
        display_name=_first(attrs.get("displayname")),
        mail=_first(attrs.get("mail")),
        uuid=_first(attrs.get("cuedupersonuuid")),
        member_of=_many(attrs.get("memberof")),
    )


def parse_search_response(response: Iterable[dict] | None) -> list[DirectoryEntry]:
    """Turn an ldap3 ``Connection.response`` list into DirectoryEntry records.

    Referrals (``searchResRef``) and anything else that is not an entry are skipped.
    """
    entries: list[DirectoryEntry] = []
    for item in response or []:
        if item.get("type") != "searchResEntry":
            continue
        entries.append(parse_entry(str(item.get("dn") or ""), item.get("attributes") or {}))
    return entries
