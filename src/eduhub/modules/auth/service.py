"""
Authentication Service Layer

OTP-gated student registration, verification and login.

Account lifecycle:
    unverified --(correct code within the expiry window)--> verified

1. Registration creates the account unverified with a fresh code and
   delivers it over email and SMS. Delivery is best effort: the account
   exists whatever the delivery outcome.
2. Login is refused while unverified, before the password is checked, so
   the client can route the student to the code screen.
3. Verification needs an exact code match inside the window. The code is
   cleared on success and cannot be replayed.
4. Resending replaces the code and restarts the window. Resends are
   throttled per email address.

Test-domain addresses always receive the fixed test code and skip real
delivery.

Security considerations:
- Codes are SHA-256 hashed before storage and compared in constant time
- Passwords are bcrypt hashed
- Codes and passwords are never logged
"""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eduhub.core.auth import TOKEN_KIND_USER
from eduhub.core.config import settings
from eduhub.core.notifications import dispatch_otp, is_test_email, notify_welcome
from eduhub.core.rate_limit import check_rate_limit
from eduhub.core.security import (
    code_matches,
    create_access_token,
    generate_numeric_code,
    hash_code,
    hash_password,
    verify_password,
)
from eduhub.modules.audit import service as audit
from eduhub.modules.audit.models import AuditEvent
from eduhub.modules.auth.schemas import (
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    ResendOtpResponse,
)
from eduhub.modules.users.models import User
from eduhub.modules.users.repository import UserRepository
from eduhub.modules.users.schemas import UserResponse

logger = logging.getLogger(__name__)


class AuthServiceError(Exception):
    """Base exception for authentication service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class EmailAlreadyRegisteredError(AuthServiceError):
    def __init__(self):
        super().__init__(
            message="Email already registered",
            error_code="EMAIL_ALREADY_REGISTERED",
            status_code=409,
        )


class InvalidCredentialsError(AuthServiceError):
    def __init__(self):
        super().__init__(
            message="Invalid credentials",
            error_code="INVALID_CREDENTIALS",
            status_code=401,
        )


class AccountNotVerifiedError(AuthServiceError):
    """Login attempted before verification. Carries the email for the client."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(
            message="Account not verified. Please verify your email or phone.",
            error_code="ACCOUNT_NOT_VERIFIED",
            status_code=403,
        )


class InvalidOrExpiredCodeError(AuthServiceError):
    def __init__(self):
        super().__init__(
            message="Invalid or Expired Code.",
            error_code="INVALID_OR_EXPIRED_CODE",
            status_code=400,
        )


class UserNotFoundError(AuthServiceError):
    def __init__(self):
        super().__init__(
            message="User not found",
            error_code="USER_NOT_FOUND",
            status_code=404,
        )


class AlreadyVerifiedError(AuthServiceError):
    def __init__(self):
        super().__init__(
            message="This account is already verified. Please log in.",
            error_code="ALREADY_VERIFIED",
            status_code=409,
        )


class OtpResendThrottledError(AuthServiceError):
    def __init__(self, window_seconds: int):
        self.retry_after_seconds = window_seconds
        super().__init__(
            message="Too many code requests. Please wait before requesting another code.",
            error_code="OTP_RESEND_THROTTLED",
            status_code=429,
        )


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _issue_code(email: str) -> str:
    """Fixed code for test-domain addresses, random otherwise."""
    if is_test_email(email):
        return settings.otp_test_code
    return generate_numeric_code(settings.otp_length)


def _code_expiry(now: datetime | None = None) -> datetime:
    return (now or datetime.now(UTC)) + timedelta(minutes=settings.otp_expiry_minutes)


def _issue_user_token(user: User) -> str:
    return create_access_token(
        subject=str(user.id),
        additional_claims={"email": user.email, "kind": TOKEN_KIND_USER},
    )


async def register(
    db: AsyncSession,
    data: RegisterRequest,
    ip_address: str | None = None,
) -> RegisterResponse:
    """
    Create an unverified account and send its verification code.

    Raises:
        EmailAlreadyRegisteredError: If the email is taken
    """
    email = normalize_email(data.email)
    if await UserRepository.email_exists(db, email):
        raise EmailAlreadyRegisteredError()

    code = _issue_code(email)
    try:
        user = await UserRepository.create(
            db,
            email=email,
            password_hash=hash_password(data.password),
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            id_number=data.id_number,
            phone=data.phone,
            province=data.province,
            high_school=data.high_school,
            gender=data.gender,
            ethnicity=data.ethnicity,
            otp_code_hash=hash_code(code),
            otp_expires_at=_code_expiry(),
        )
        await db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent registration for the same email
        await db.rollback()
        raise EmailAlreadyRegisteredError() from e

    logger.info(f"Registered user {user.id} ({email}), awaiting verification")
    await audit.record(
        db, AuditEvent.USER_REGISTER, user_id=str(user.id), ip_address=ip_address,
        details={"email": email},
    )

    delivery = await dispatch_otp(email, user.phone, user.first_name, code)

    return RegisterResponse(
        user=UserResponse.model_validate(user),
        message="Registration successful. Please verify your account with the code we sent you.",
        delivery=delivery,
    )


async def login(
    db: AsyncSession,
    email: str,
    password: str,
    ip_address: str | None = None,
) -> LoginResponse:
    """
    Authenticate a verified student.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password
        AccountNotVerifiedError: Account exists but is not verified
    """
    email = normalize_email(email)
    user = await UserRepository.get_by_email(db, email)
    if user is None:
        logger.warning(f"Login attempt for non-existent email: {email}")
        raise InvalidCredentialsError()

    if not user.is_verified:
        logger.info(f"Login attempt for unverified account: {email}")
        raise AccountNotVerifiedError(email)

    if not verify_password(password, user.password_hash):
        logger.warning(f"Invalid password for user: {email}")
        raise InvalidCredentialsError()

    await audit.record(db, AuditEvent.USER_LOGIN, user_id=str(user.id), ip_address=ip_address)
    logger.info(f"User logged in: {email}")

    return LoginResponse(access_token=_issue_user_token(user), user=UserResponse.model_validate(user))


async def verify_otp(
    db: AsyncSession,
    email: str,
    code: str,
    ip_address: str | None = None,
) -> LoginResponse:
    """
    Verify an account and log the student in.

    Raises:
        InvalidOrExpiredCodeError: Unknown email, wrong code, expired code,
            or a code that was already used
    """
    email = normalize_email(email)
    user = await UserRepository.get_by_email(db, email)
    now = datetime.now(UTC)

    if (
        user is None
        or user.otp_expires_at is None
        or user.otp_expires_at <= now
        or not code_matches(code.strip(), user.otp_code_hash)
    ):
        logger.warning(f"Rejected verification code for {email}")
        raise InvalidOrExpiredCodeError()

    await UserRepository.mark_verified(db, user)
    await db.commit()
    logger.info(f"User verified: {user.id} ({email})")

    await audit.record(db, AuditEvent.USER_VERIFY, user_id=str(user.id), ip_address=ip_address)
    await notify_welcome(email, user.first_name)

    return LoginResponse(access_token=_issue_user_token(user), user=UserResponse.model_validate(user))


async def resend_otp(db: AsyncSession, email: str) -> ResendOtpResponse:
    """
    Replace the account's code and send the new one.

    Raises:
        OtpResendThrottledError: Too many resends for this email
        UserNotFoundError: No account for this email
        AlreadyVerifiedError: Nothing to verify
    """
    email = normalize_email(email)
    window = settings.otp_resend_window_seconds
    if not await check_rate_limit(f"otp_resend:{email}", settings.otp_resend_limit, window):
        logger.warning(f"OTP resend throttled for {email}")
        raise OtpResendThrottledError(window)

    user = await UserRepository.get_by_email(db, email)
    if user is None:
        raise UserNotFoundError()
    if user.is_verified:
        raise AlreadyVerifiedError()

    code = _issue_code(email)
    await UserRepository.set_otp(db, user, code_hash=hash_code(code), expires_at=_code_expiry())
    await db.commit()
    logger.info(f"Issued new verification code for {email}")

    delivery = await dispatch_otp(email, user.phone, user.first_name, code)
    return ResendOtpResponse(message="A new verification code has been sent.", delivery=delivery)
