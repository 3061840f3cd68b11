from __future__ import annotations

from dataclasses import dataclass

from fintrack.rbac import CapabilitySet, Role


@dataclass(frozen=True)
class AuthzContext:
    """
    Per-request authorization context, attached to `request.state.authz`.

    Built once the global security dependency has allowed the request.
    """

    user_id: str
    role: Role
    capabilities: CapabilitySet
