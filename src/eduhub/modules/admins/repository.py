"""
Admins Repository

Database operations for dashboard accounts.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Admin, AdminRole


async def create(
    db: AsyncSession,
    *,
    full_name: str,
    email: str,
    password_hash: str,
    role: AdminRole,
) -> Admin:
    """
    Insert an admin and commit.

    Raises:
        IntegrityError: If the email is already taken
    """
    admin = Admin(full_name=full_name, email=email, password_hash=password_hash, role=role)

    db.add(admin)
    await db.commit()
    await db.refresh(admin)

    return admin


async def get_by_email(db: AsyncSession, email: str) -> Admin | None:
    result = await db.execute(select(Admin).where(Admin.email == email))
    return result.scalar_one_or_none()
