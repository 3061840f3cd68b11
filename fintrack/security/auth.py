from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from fintrack.models.security import AuthSession, User, utcnow
from fintrack.rbac import Principal, Role, parse_role
from fintrack.security.config import SecurityConfig

logger = logging.getLogger(__name__)


def extract_session_token(request: Request, config: SecurityConfig) -> str | None:
    """
    Extract the session token issued by the auth provider.

    - Input: `Authorization: Bearer <token>`
    - Missing header -> None (caller answers 401)
    - Malformed header -> 400
    """

    header_name = config.auth.authorization_header
    bearer_prefix = config.auth.bearer_prefix

    raw = request.headers.get(header_name)
    if not raw:
        logger.info("Missing %s header (auth required) path=%s method=%s", header_name, request.url.path, request.method)
        return None

    prefix = f"{bearer_prefix} "
    if not raw.startswith(prefix):
        logger.warning("Invalid %s header format path=%s method=%s", header_name, request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header_name}. Expected '{bearer_prefix} <token>'.",
        )

    token = raw[len(prefix) :].strip()
    if not token:
        logger.warning("Empty bearer token path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header_name}. Missing token after '{bearer_prefix}'.",
        )

    return token


def load_session_user(db: Session, token: str) -> User:
    """Resolve a provider session token to its user, or answer 401."""

    session = db.execute(
        select(AuthSession).where(AuthSession.token == token).options(selectinload(AuthSession.user))
    ).scalar_one_or_none()

    if session is None:
        # Never log the token itself.
        logger.info("Unknown session token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired session")

    if session.is_expired(utcnow()):
        logger.info("Expired session user_id=%s", session.user_id)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired session")

    return session.user


def to_principal(user: User) -> Principal:
    """
    Decode the user's stored role into the closed Role enum.

    Missing or unrecognized values become Role.UNKNOWN (no capabilities).
    """

    role = parse_role(user.role)
    if role is Role.UNKNOWN:
        logger.warning("User has unrecognized role user_id=%s role=%r", user.id, user.role)
    return Principal(id=user.id, role=role)
