from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from fintrack.db.session import get_db
from fintrack.models.security import User
from fintrack.rbac import AccessDecision, authorize, project
from fintrack.security.auth import extract_session_token, load_session_user, to_principal
from fintrack.security.config import SecurityConfig
from fintrack.security.context import AuthzContext

logger = logging.getLogger(__name__)


def get_security_config(request: Request) -> SecurityConfig:
    config = getattr(request.app.state, "security_config", None)
    if config is None:
        raise RuntimeError("Security config not loaded. Did app startup run?")
    return config


def get_current_user(request: Request) -> User:
    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user


def get_authz(request: Request) -> AuthzContext:
    authz = getattr(request.state, "authz", None)
    if authz is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return authz


def enforce_security(
    request: Request,
    config: SecurityConfig = Depends(get_security_config),
    db: Session = Depends(get_db),
) -> None:
    """
    Global security dependency (PRIMARY, configuration-driven).

    Order matters and keeps 401 and 403 apart:
    1. no/unknown/expired session  -> 401 (before any role check)
    2. role / self-access decision -> 403 when denied
    3. capability check            -> 403 when a required flag is missing

    Runs after routing, so decorator metadata and path params are available.
    """

    path = request.url.path
    method = request.method.upper()

    rule = config.match(path, method)

    # Optional decorator metadata (alternative to YAML rules).
    endpoint = request.scope.get("endpoint")
    decorator_roles = set(getattr(endpoint, "__security_required_roles__", set())) if endpoint else set()
    decorator_owner_param = getattr(endpoint, "__security_owner_param__", None) if endpoint else None

    auth_required = rule.auth_required or bool(decorator_roles) or bool(decorator_owner_param)
    if not auth_required:
        return

    token = extract_session_token(request, config)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

    user = load_session_user(db, token)
    request.state.user = user
    principal = to_principal(user)

    required_roles = {r.value for r in rule.required_roles} | decorator_roles
    owner_param = decorator_owner_param or rule.owner_param
    allow_self_access = rule.allow_self_access or bool(decorator_owner_param)
    resource_owner_id = request.path_params.get(owner_param) if allow_self_access and owner_param else None
    # Decorator roles or self-access name who gets in; a default any_authenticated must not widen that.
    any_authenticated = rule.any_authenticated and not (decorator_roles or decorator_owner_param)

    decision = authorize(
        principal,
        required_roles,
        any_authenticated=any_authenticated,
        allow_self_access=allow_self_access,
        resource_owner_id=resource_owner_id,
    )
    if decision is not AccessDecision.ALLOWED:
        logger.warning(
            "Access denied user_id=%s role=%s path=%s method=%s required=%s",
            principal.id,
            principal.role.value,
            path,
            method,
            sorted(required_roles),
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Insufficient role. Required one of: {sorted(required_roles)}",
        )

    capabilities = project(principal.role)
    required_caps = set(rule.required_capabilities)
    if not capabilities.satisfies(required_caps):
        missing = sorted(required_caps.difference(capabilities.granted()))
        logger.warning(
            "Missing capability user_id=%s role=%s path=%s method=%s missing=%s",
            principal.id,
            principal.role.value,
            path,
            method,
            missing,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Missing capability: {missing}",
        )

    request.state.authz = AuthzContext(
        user_id=principal.id,
        role=principal.role,
        capabilities=capabilities,
    )
    logger.debug("Access granted user_id=%s role=%s path=%s method=%s", principal.id, principal.role.value, path, method)
