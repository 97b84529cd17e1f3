"""Authentication schemas."""

from pydantic import BaseModel, EmailStr, Field, field_validator

from eduhub.core.notifications import DeliveryOutcome
from eduhub.modules.users.schemas import UserResponse


class _EmailNormalised(BaseModel):
    """Lower-cases and trims the email field before validation."""

    @field_validator("email", mode="before", check_fields=False)
    @classmethod
    def normalise_email(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class RegisterRequest(_EmailNormalised):
    """Registration request schema."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    id_number: str = Field(..., pattern=r"^\d{13}$")
    email: EmailStr
    phone: str | None = Field(None, max_length=20)
    province: str | None = Field(None, max_length=50)
    high_school: str | None = Field(None, max_length=200)
    gender: str | None = Field(None, max_length=50)
    ethnicity: str | None = Field(None, max_length=50)
    password: str = Field(..., min_length=6, max_length=128)


class RegisterResponse(BaseModel):
    user: UserResponse
    message: str
    delivery: dict[str, DeliveryOutcome]


class LoginRequest(_EmailNormalised):
    """Login request schema."""

    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    """Login response schema."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class VerifyOtpRequest(_EmailNormalised):
    email: EmailStr
    code: str = Field(..., min_length=1, max_length=10)


class ResendOtpRequest(_EmailNormalised):
    email: EmailStr


class ResendOtpResponse(BaseModel):
    message: str
    delivery: dict[str, DeliveryOutcome]
