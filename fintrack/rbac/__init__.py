"""
Role-based access control core.

Pure Python with no FastAPI or SQLAlchemy dependency:

- ``project(role)`` -> ``CapabilitySet`` (what the UI may show)
- ``decide(...)`` -> bool (whether an operation may proceed)
- ``authorize(...)`` -> ``AccessDecision`` (decide plus the 401/403 split)
"""

from .access import AccessDecision, AccessRequest, Principal, authorize, decide
from .capabilities import NO_CAPABILITIES, CapabilitySet, project
from .roles import RECOGNIZED_ROLES, Role, is_recognized, parse_role

__all__ = [
    "AccessDecision",
    "AccessRequest",
    "CapabilitySet",
    "NO_CAPABILITIES",
    "Principal",
    "RECOGNIZED_ROLES",
    "Role",
    "authorize",
    "decide",
    "is_recognized",
    "parse_role",
    "project",
]
