from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fintrack.db.session import get_db
from fintrack.models.security import User
from fintrack.schemas.common import ApiResponse
from fintrack.schemas.security import PermissionsOut, ProfileUpdate, UserOut
from fintrack.security.context import AuthzContext
from fintrack.security.dependencies import get_authz, get_current_user

router = APIRouter(prefix="/api", tags=["account"])


@router.get("/account", response_model=ApiResponse[UserOut])
def get_account(user: User = Depends(get_current_user)) -> dict:
    return {"message": "Profile retrieved", "data": user}


@router.put("/account", response_model=ApiResponse[UserOut])
def update_account(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> dict:
    # Only name and phone are self-editable; role changes go through /api/users.
    user.name = payload.name
    user.phone = payload.phone
    db.commit()
    db.refresh(user)
    return {"message": "Profile updated", "data": user}


@router.get("/me/permissions", response_model=ApiResponse[PermissionsOut])
def my_permissions(authz: AuthzContext = Depends(get_authz)) -> dict:
    data = PermissionsOut(
        user_id=authz.user_id,
        role=authz.role,
        capabilities=authz.capabilities.to_dict(),
    )
    return {"message": "Permissions retrieved", "data": data}
