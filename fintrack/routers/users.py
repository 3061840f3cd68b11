from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from fintrack.db.session import get_db
from fintrack.models.security import User
from fintrack.rbac import RECOGNIZED_ROLES, Role, is_recognized
from fintrack.schemas.common import ApiResponse
from fintrack.schemas.security import UserOut, UserUpdate
from fintrack.security.decorators import allow_self_access, require_roles

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=ApiResponse[list[UserOut]])
def list_users(db: Session = Depends(get_db)) -> dict:
    users = db.scalars(select(User).order_by(User.created_at.desc(), User.id)).all()
    return {"message": "Users retrieved", "data": list(users)}


@router.put("", response_model=ApiResponse[UserOut])
def update_user(payload: UserUpdate, db: Session = Depends(get_db)) -> dict:
    if payload.role is not None and not is_recognized(payload.role):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid role. Expected one of: {sorted(r.value for r in RECOGNIZED_ROLES)}",
        )

    user = db.get(User, payload.id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if payload.name:
        user.name = payload.name
    if payload.role:
        logger.info("Changing role user_id=%s %s -> %s", user.id, user.role, payload.role)
        user.role = payload.role

    db.commit()
    db.refresh(user)
    return {"message": "User updated", "data": user}


# No YAML rule: the decorators are the whole policy for this endpoint.
@router.get("/{id}", response_model=ApiResponse[UserOut])
@require_roles([Role.ADMIN])
@allow_self_access("id")
def get_user(id: str, db: Session = Depends(get_db)) -> dict:
    user = db.get(User, id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"message": "User retrieved", "data": user}
