"""
Audit Service

Recording is best effort: the row is written inside a savepoint, so a
failed audit write rolls back only itself and never fails the action
being audited or expires the caller's already-loaded objects.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from eduhub.core.config import settings
from eduhub.modules.audit import repository
from eduhub.modules.audit.models import AuditEvent, AuditLog

logger = logging.getLogger(__name__)


async def record(
    db: AsyncSession,
    event: AuditEvent,
    *,
    user_id: str | None = None,
    ip_address: str | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    try:
        async with db.begin_nested():
            await repository.create(
                db,
                event_type=event.value,
                user_id=user_id,
                ip_address=ip_address,
                details=details or {},
            )
        await db.commit()
    except Exception as e:
        logger.error(f"Failed to write audit event {event.value} for {user_id}: {e}")


async def list_recent(db: AsyncSession, limit: int | None = None) -> list[AuditLog]:
    """Newest first, capped at the admin listing limit."""
    return await repository.list_recent(db, limit or settings.admin_list_limit)
