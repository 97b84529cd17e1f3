"""
User Schemas

Public view of a student account. Never includes the password hash or
the one-time code.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    first_name: str
    last_name: str
    id_number: str
    phone: str | None
    province: str | None
    high_school: str | None
    gender: str | None
    ethnicity: str | None
    is_verified: bool
    created_at: datetime
