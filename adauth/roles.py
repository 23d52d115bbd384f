from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping


# Local permission tiers (higher wins):
#   10 => administrator
#   7  => editor
#   3  => author
#   2  => contributor
#   1  => subscriber
ROLE_BY_TIER: Mapping[int, str] = MappingProxyType({
    10: "administrator",
    7: "editor",
    3: "author",
    2: "contributor",
})
DEFAULT_ROLE = "subscriber"


def role_for_tier(tier: int) -> str:
    return ROLE_BY_TIER.get(tier, DEFAULT_ROLE)


class DuplicateGroupError(ValueError):
    """The same group was given more than one tier."""


class RoleTable:
    """Recognized directory groups and the tier each one grants."""

    def __init__(self, pairs: Iterable[tuple[str, int]]) -> None:
        tiers: dict[str, int] = {}
        for group, tier in pairs:
            if group in tiers:
                raise DuplicateGroupError(
                    f"Group {group!r} is mapped twice (tiers {tiers[group]} and {tier})"
                )
            tiers[group] = int(tier)
        self._tiers = MappingProxyType(tiers)

    @property
    def tiers(self) -> Mapping[str, int]:
        return self._tiers

    def __iter__(self):
        return iter(self._tiers.items())

    def __len__(self) -> int:
        return len(self._tiers)

    def highest_tier(self, groups: Iterable[str]) -> int:
        """Highest tier among the recognized groups; 0 when none is recognized."""
        return max((self._tiers[g] for g in groups if g in self._tiers), default=0)


DEFAULT_ROLE_TABLE = RoleTable([
    ("ASSETT-Programming", 10),
    ("ASSETT-Admins", 7),
    ("ASSETT-TTAs", 7),
    ("ASSETT-Design", 7),
    ("ASSETT-Core", 3),
    ("ASSETT-Staff", 3),
    ("ASSETT-TLCs", 3),
])
