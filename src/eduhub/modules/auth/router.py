"""
Authentication Router

Endpoints:
- POST /auth/register - Create an unverified account and send a code
- POST /auth/login - Log in a verified student
- POST /auth/verify-otp - Verify the account (logs the student in)
- POST /auth/resend-otp - Send a new code
- GET /auth/me - Current student profile
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from eduhub.core.auth import CurrentUser, get_current_user
from eduhub.core.database import get_db
from eduhub.core.rate_limit import client_ip, rate_limit
from eduhub.modules.auth import service
from eduhub.modules.auth.schemas import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    ResendOtpRequest,
    ResendOtpResponse,
    VerifyOtpRequest,
)
from eduhub.modules.auth.service import (
    AccountNotVerifiedError,
    AuthServiceError,
    OtpResendThrottledError,
)
from eduhub.modules.users.repository import UserRepository
from eduhub.modules.users.schemas import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_http(e: AuthServiceError) -> HTTPException:
    detail: dict = {"error": e.error_code, "message": e.message}
    headers = None
    if isinstance(e, AccountNotVerifiedError):
        detail["needs_verification"] = True
        detail["email"] = e.email
    if isinstance(e, OtpResendThrottledError):
        detail["retry_after_seconds"] = e.retry_after_seconds
        headers = {"Retry-After": str(e.retry_after_seconds)}
    return HTTPException(status_code=e.status_code, detail=detail, headers=headers)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
@rate_limit(limit=5, window_seconds=60)
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> RegisterResponse:
    """
    Register a student account.

    The account is created unverified; a code is sent by email and SMS.

    Raises:
        HTTPException 409: Email already registered
    """
    try:
        return await service.register(db, body, ip_address=client_ip(request))
    except AuthServiceError as e:
        raise _to_http(e) from e


@router.post("/login", response_model=LoginResponse)
@rate_limit(limit=10, window_seconds=60)
async def login(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """
    Authenticate a student and return a JWT.

    Raises:
        HTTPException 401: Invalid credentials
        HTTPException 403: Account not verified (detail carries
            needs_verification and email)
    """
    try:
        return await service.login(
            db, credentials.email, credentials.password, ip_address=client_ip(request)
        )
    except AuthServiceError as e:
        raise _to_http(e) from e


@router.post("/verify-otp", response_model=LoginResponse)
@rate_limit(limit=10, window_seconds=60)
async def verify_otp(
    request: Request,
    body: VerifyOtpRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """
    Verify an account with its code. Success logs the student in.

    Raises:
        HTTPException 400: Invalid or expired code
    """
    try:
        return await service.verify_otp(db, body.email, body.code, ip_address=client_ip(request))
    except AuthServiceError as e:
        raise _to_http(e) from e


@router.post("/resend-otp", response_model=ResendOtpResponse)
async def resend_otp(
    body: ResendOtpRequest,
    db: AsyncSession = Depends(get_db),
) -> ResendOtpResponse:
    """
    Send a new code. The previous code stops working.

    Raises:
        HTTPException 404: Unknown email
        HTTPException 409: Already verified
        HTTPException 429: Too many resends
    """
    try:
        return await service.resend_otp(db, body.email)
    except AuthServiceError as e:
        raise _to_http(e) from e


@router.get("/me", response_model=UserResponse)
async def me(
    current: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    user = await UserRepository.get_by_id(db, current.id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "USER_NOT_FOUND", "message": "User not found"},
        )
    return UserResponse.model_validate(user)
