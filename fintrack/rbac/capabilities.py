"""
Role -> capability projection.

The table below is the whole policy. UI guards and the capability checks of
route rules read from it; nothing else decides what a role may do.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass, fields
from typing import Any

from .roles import Role, is_recognized


@dataclass(frozen=True)
class CapabilitySet:
    """Five independent permission flags. No flag implies another."""

    can_manage_users: bool = False
    can_create_movements: bool = False
    can_view_reports: bool = False
    can_view_movements: bool = False
    can_manage_own_profile: bool = False

    @classmethod
    def names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def granted(self) -> frozenset[str]:
        """Names of the flags that are set."""
        return frozenset(name for name, value in asdict(self).items() if value)

    def satisfies(self, required: Iterable[str]) -> bool:
        """
        True if every named capability in ``required`` is granted.

        Unknown names are never satisfied.
        """
        granted = self.granted()
        return all(name in granted for name in required)

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)


NO_CAPABILITIES = CapabilitySet()

_ROLE_CAPABILITIES: dict[str, CapabilitySet] = {
    Role.ADMIN.value: CapabilitySet(
        can_manage_users=True,
        can_create_movements=True,
        can_view_reports=True,
        can_view_movements=True,
        can_manage_own_profile=True,
    ),
    Role.USER.value: CapabilitySet(
        can_manage_users=False,
        can_create_movements=False,
        can_view_reports=False,
        can_view_movements=True,
        can_manage_own_profile=True,
    ),
}


def project(role: Any) -> CapabilitySet:
    """
    Return the capability set of ``role``.

    Total over any input: values that are not exactly ADMIN or USER
    (wrong case, padded, None, non-strings) get ``NO_CAPABILITIES``.
    """

    if not is_recognized(role):
        return NO_CAPABILITIES
    return _ROLE_CAPABILITIES[Role(role).value]
