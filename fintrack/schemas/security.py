from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fintrack.rbac import Role


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    phone: str | None
    role: str | None
    email_verified: bool
    image: str | None
    created_at: datetime
    updated_at: datetime


class UserUpdate(BaseModel):
    """
    Admin update of another user. Only non-empty fields are applied.

    ``role`` is taken as-is here; the router answers 400 for names outside
    the Role enum.
    """

    id: str = Field(min_length=1)
    name: str | None = Field(default=None, max_length=100)
    role: str | None = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("role")
    @classmethod
    def check_role(cls, v: str | None) -> str | None:
        return v or None


class ProfileUpdate(BaseModel):
    name: str = Field(max_length=100)
    phone: str | None = Field(default=None, max_length=30)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("name is required")
        return stripped

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class CapabilitiesOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    can_manage_users: bool
    can_create_movements: bool
    can_view_reports: bool
    can_view_movements: bool
    can_manage_own_profile: bool


class PermissionsOut(BaseModel):
    user_id: str
    role: Role
    capabilities: CapabilitiesOut
