"""Closed role enum and the decode step for untrusted role values."""

from __future__ import annotations

from enum import Enum
from typing import Any


class Role(str, Enum):
    """
    Coarse-grained role of an authenticated principal.

    ``UNKNOWN`` is never stored or configured; it is what ``parse_role``
    produces for anything that is not exactly ``"ADMIN"`` or ``"USER"``.
    """

    ADMIN = "ADMIN"
    USER = "USER"
    UNKNOWN = "UNKNOWN"


RECOGNIZED_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.USER})


def is_recognized(role: Any) -> bool:
    """True only for values exactly equal to ADMIN or USER."""
    if not isinstance(role, str):
        return False
    return role == Role.ADMIN.value or role == Role.USER.value


def parse_role(raw: Any) -> Role:
    """
    Map an untrusted role value (session claim, DB column) into ``Role``.

    Exact match only. Missing or malformed values fall back to the least
    privileged variant, ``Role.UNKNOWN``; never to ``ADMIN``.
    """

    if is_recognized(raw):
        return Role(raw)
    return Role.UNKNOWN
