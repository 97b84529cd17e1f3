"""
Admin Schemas

Request/response models for admin auth and the dashboard.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from eduhub.modules.admins.models import AdminRole


class AdminRegisterRequest(BaseModel):
    system_key: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    role: AdminRole = AdminRole.SUPER_ADMIN

    @field_validator("email", mode="before")
    @classmethod
    def normalise_email(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


class AdminLoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalise_email(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


class AdminResponse(BaseModel):
    """Admin without credentials."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    email: str
    role: AdminRole
    created_at: datetime | None = None


class AdminLoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    admin: AdminResponse


class JobTriggerResponse(BaseModel):
    job_id: str
    status: str
    executed_at: str
    result: Any | None = None
    error: str | None = None
