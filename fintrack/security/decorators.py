from __future__ import annotations

from collections.abc import Callable, Iterable


def require_roles(roles: Iterable[str]) -> Callable:
    """
    Decorator-style API (alternative to YAML route rules).

    Implementation detail:
    - This decorator does NOT perform auth itself.
    - It attaches metadata that the global security dependency reads
      *after* routing (during dependency resolution).
    """

    def decorator(fn: Callable) -> Callable:
        existing = set(getattr(fn, "__security_required_roles__", set()))
        setattr(fn, "__security_required_roles__", existing | {getattr(r, "value", r) for r in roles})
        return fn

    return decorator


def allow_self_access(owner_param: str = "id") -> Callable:
    """
    Let a caller without the required role through when the path parameter
    `owner_param` equals their own user id.
    """

    def decorator(fn: Callable) -> Callable:
        setattr(fn, "__security_owner_param__", owner_param)
        return fn

    return decorator

