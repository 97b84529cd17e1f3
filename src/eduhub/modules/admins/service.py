"""
Admins Service Layer

Registration (gated by the system key), login, and the dashboard reads.
"""

import hmac
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eduhub.core.auth import TOKEN_KIND_ADMIN
from eduhub.core.config import settings
from eduhub.core.security import create_access_token, hash_password, verify_password
from eduhub.modules.admins import repository
from eduhub.modules.admins.models import Admin, AdminRole
from eduhub.modules.admins.schemas import AdminLoginResponse, AdminRegisterRequest, AdminResponse
from eduhub.modules.audit import service as audit
from eduhub.modules.audit.models import AuditEvent, AuditLog
from eduhub.modules.users.models import User
from eduhub.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


class AdminServiceError(Exception):
    """Base exception for admin service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class InvalidSystemKeyError(AdminServiceError):
    def __init__(self):
        super().__init__(
            message="Invalid system key",
            error_code="INVALID_SYSTEM_KEY",
            status_code=403,
        )


class AdminEmailExistsError(AdminServiceError):
    def __init__(self):
        super().__init__(
            message="Admin email already exists",
            error_code="ADMIN_EMAIL_EXISTS",
            status_code=409,
        )


class InvalidAdminCredentialsError(AdminServiceError):
    def __init__(self):
        super().__init__(
            message="Invalid admin credentials",
            error_code="INVALID_ADMIN_CREDENTIALS",
            status_code=401,
        )


def _issue_admin_token(admin: Admin) -> str:
    return create_access_token(
        subject=str(admin.id),
        additional_claims={
            "email": admin.email,
            "kind": TOKEN_KIND_ADMIN,
            "role": admin.role.value,
            "name": admin.full_name,
        },
    )


def system_key_matches(system_key: str) -> bool:
    return hmac.compare_digest(system_key.encode(), settings.admin_system_key.encode())


async def register_admin(
    db: AsyncSession,
    data: AdminRegisterRequest,
    ip_address: str | None = None,
) -> AdminResponse:
    """
    Create a dashboard account.

    Raises:
        InvalidSystemKeyError: Wrong system key
        AdminEmailExistsError: Email already used by another admin
    """
    if not system_key_matches(data.system_key):
        logger.warning(f"Admin registration with invalid system key for {data.email}")
        raise InvalidSystemKeyError()

    if await repository.get_by_email(db, data.email) is not None:
        raise AdminEmailExistsError()

    try:
        admin = await repository.create(
            db,
            full_name=data.full_name.strip(),
            email=data.email,
            password_hash=hash_password(data.password),
            role=data.role,
        )
    except IntegrityError as e:
        await db.rollback()
        raise AdminEmailExistsError() from e

    logger.info(f"Admin registered: {admin.id} ({admin.email}, {admin.role.value})")
    await audit.record(
        db,
        AuditEvent.ADMIN_REGISTER,
        user_id=str(admin.id),
        ip_address=ip_address,
        details={"created_email": admin.email},
    )
    return AdminResponse.model_validate(admin)


async def login_admin(
    db: AsyncSession,
    email: str,
    password: str,
    ip_address: str | None = None,
) -> AdminLoginResponse:
    """
    Raises:
        InvalidAdminCredentialsError: Unknown email or wrong password
    """
    admin = await repository.get_by_email(db, email.strip().lower())
    if admin is None or not verify_password(password, admin.password_hash):
        logger.warning(f"Failed admin login for {email}")
        raise InvalidAdminCredentialsError()

    await audit.record(
        db,
        AuditEvent.ADMIN_LOGIN,
        user_id=str(admin.id),
        ip_address=ip_address,
        details={"role": admin.role.value},
    )
    logger.info(f"Admin logged in: {admin.email}")
    return AdminLoginResponse(access_token=_issue_admin_token(admin), admin=AdminResponse.model_validate(admin))


async def list_users(db: AsyncSession, limit: int | None = None) -> list[User]:
    return await UserRepository.list_recent(db, limit or settings.admin_list_limit)


async def list_audit_logs(db: AsyncSession, limit: int | None = None) -> list[AuditLog]:
    return await audit.list_recent(db, limit)


__all__ = [
    "AdminEmailExistsError",
    "AdminRole",
    "AdminServiceError",
    "InvalidAdminCredentialsError",
    "InvalidSystemKeyError",
    "list_audit_logs",
    "list_users",
    "login_admin",
    "register_admin",
]
