"""
Applications Repository

Database operations for submitted applications.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import ApplicationRecord, ApplicationStatus


async def create(
    db: AsyncSession,
    *,
    user_id: str | None,
    first_name: str,
    last_name: str,
    content: dict[str, Any],
    status: ApplicationStatus = ApplicationStatus.SUBMITTED,
) -> ApplicationRecord:
    """Insert an application record."""
    record = ApplicationRecord(
        user_id=user_id,
        first_name=first_name,
        last_name=last_name,
        status=status,
        content=content,
    )

    db.add(record)
    await db.commit()
    await db.refresh(record)

    return record


async def list_by_user(db: AsyncSession, user_id: str) -> list[ApplicationRecord]:
    """All applications owned by a user, newest first."""
    result = await db.execute(
        select(ApplicationRecord)
        .where(ApplicationRecord.user_id == user_id)
        .order_by(ApplicationRecord.submitted_at.desc())
    )
    return list(result.scalars().all())


async def list_recent(db: AsyncSession, limit: int) -> list[ApplicationRecord]:
    result = await db.execute(
        select(ApplicationRecord).order_by(ApplicationRecord.submitted_at.desc()).limit(limit)
    )
    return list(result.scalars().all())
