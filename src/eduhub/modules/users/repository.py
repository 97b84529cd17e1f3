"""
User Repository

Database operations for student accounts.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eduhub.modules.users.models import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user database operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        id_number: str,
        phone: str | None = None,
        province: str | None = None,
        high_school: str | None = None,
        gender: str | None = None,
        ethnicity: str | None = None,
        otp_code_hash: str | None = None,
        otp_expires_at: datetime | None = None,
    ) -> User:
        """
        Create a new, unverified user and flush it.

        Raises:
            IntegrityError: If the email is already registered
        """
        user = User(
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            id_number=id_number,
            phone=phone,
            province=province,
            high_school=high_school,
            gender=gender,
            ethnicity=ethnicity,
            is_verified=False,
            otp_code_hash=otp_code_hash,
            otp_expires_at=otp_expires_at,
        )

        db.add(user)
        await db.flush()
        await db.refresh(user)

        logger.info(f"Created user: {user.id} - {user.email}")
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: str | UUID) -> User | None:
        result = await db.execute(select(User).where(User.id == str(user_id)))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        """Look up by the normalised (lower-case) email."""
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    @staticmethod
    async def email_exists(db: AsyncSession, email: str) -> bool:
        user = await UserRepository.get_by_email(db, email)
        return user is not None

    @staticmethod
    async def set_otp(
        db: AsyncSession,
        user: User,
        *,
        code_hash: str,
        expires_at: datetime,
    ) -> User:
        """Replace the user's code; any earlier code stops working."""
        user.otp_code_hash = code_hash
        user.otp_expires_at = expires_at
        await db.flush()
        return user

    @staticmethod
    async def mark_verified(db: AsyncSession, user: User) -> User:
        user.is_verified = True
        user.otp_code_hash = None
        user.otp_expires_at = None
        await db.flush()
        return user

    @staticmethod
    async def list_recent(db: AsyncSession, limit: int) -> list[User]:
        result = await db.execute(select(User).order_by(User.created_at.desc()).limit(limit))
        return list(result.scalars().all())

    @staticmethod
    async def clear_expired_otps(db: AsyncSession, now: datetime) -> int:
        """Null out codes whose window has passed. Returns rows affected."""
        result = await db.execute(
            update(User)
            .where(User.otp_expires_at.is_not(None), User.otp_expires_at < now)
            .values(otp_code_hash=None, otp_expires_at=None)
        )
        await db.commit()
        return result.rowcount or 0
