"""
Access decisions.

``decide`` is the single predicate every route and UI guard goes through.
``authorize`` wraps it with the authentication step so callers get a
three-way answer and never have to conflate "no session" with "not allowed".
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .roles import Role, is_recognized


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    return True


def has_required_role(caller_role: Any, required_roles: Iterable[Any] | None) -> bool:
    """
    Exact-match membership. Unrecognized caller roles never match.

    A bare string is not a collection of roles, and anything that cannot be
    iterated names no roles at all.
    """
    if not is_recognized(caller_role):
        return False
    if required_roles is None or isinstance(required_roles, (str, bytes)):
        return False
    if not isinstance(required_roles, Iterable):
        return False
    try:
        return any(caller_role == required for required in required_roles)
    except TypeError:
        return False


def is_self_access(caller_id: Any, resource_owner_id: Any) -> bool:
    """Both ids present and equal. Presence is checked before equality."""
    if not _present(caller_id) or not _present(resource_owner_id):
        return False
    return caller_id == resource_owner_id


def decide(
    caller_role: Any,
    required_roles: Iterable[Any] | None,
    allow_self_access: bool = False,
    caller_id: Any = None,
    resource_owner_id: Any = None,
) -> bool:
    """
    Return True if the caller may perform the operation.

    Clauses, first match wins:

    1. ``caller_role`` is one of ``required_roles`` -> allow.
    2. ``allow_self_access`` and both ids present and equal -> allow.
    3. deny.

    An empty ``required_roles`` gets no special meaning here; the result
    then depends on the self-access clause alone.
    """

    if has_required_role(caller_role, required_roles):
        return True
    if allow_self_access and is_self_access(caller_id, resource_owner_id):
        return True
    return False


@dataclass(frozen=True)
class AccessRequest:
    """Parameters of one authorization check."""

    caller_role: Any
    required_roles: frozenset[Any] = field(default_factory=frozenset)
    allow_self_access: bool = False
    caller_id: Any = None
    resource_owner_id: Any = None

    def decide(self) -> bool:
        return decide(
            self.caller_role,
            self.required_roles,
            self.allow_self_access,
            self.caller_id,
            self.resource_owner_id,
        )


# ---- Authorization protocol ----------------------------------------------------------


class AccessDecision(str, Enum):
    ALLOWED = "allowed"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class Principal:
    """Resolved, authenticated caller."""

    id: str
    role: Role


def authorize(
    principal: Principal | None,
    required_roles: Iterable[Any] | None,
    *,
    any_authenticated: bool = False,
    allow_self_access: bool = False,
    resource_owner_id: Any = None,
) -> AccessDecision:
    """
    Run the authorization protocol for one operation.

    - No principal -> ``UNAUTHENTICATED`` (checked before ``decide``).
    - ``any_authenticated`` -> ``ALLOWED`` for every authenticated caller;
      this is the only way to express "no particular role required".
    - Otherwise ``decide`` answers; False -> ``FORBIDDEN``.
    """

    if principal is None:
        return AccessDecision.UNAUTHENTICATED
    if any_authenticated:
        return AccessDecision.ALLOWED
    allowed = decide(
        principal.role,
        required_roles,
        allow_self_access,
        principal.id,
        resource_owner_id,
    )
    return AccessDecision.ALLOWED if allowed else AccessDecision.FORBIDDEN
