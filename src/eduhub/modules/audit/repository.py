"""
Audit Repository

Insert and list only; audit rows are never updated or deleted.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import AuditLog


async def create(
    db: AsyncSession,
    *,
    event_type: str,
    user_id: str | None,
    ip_address: str | None,
    details: dict[str, Any],
) -> AuditLog:
    entry = AuditLog(
        event_type=event_type,
        user_id=user_id,
        ip_address=ip_address,
        details=details,
    )
    db.add(entry)
    await db.flush()
    return entry


async def list_recent(db: AsyncSession, limit: int) -> list[AuditLog]:
    result = await db.execute(select(AuditLog).order_by(AuditLog.created_at.desc()).limit(limit))
    return list(result.scalars().all())
