"""
Auth Background Jobs

Clears verification codes whose window has passed so stale hashes do
not linger on unverified accounts. Verification already rejects expired
codes; this job only tidies storage.
"""

import logging
from datetime import UTC, datetime

from apscheduler.triggers.interval import IntervalTrigger

from eduhub.core.config import settings
from eduhub.core.database import async_session_maker
from eduhub.core.scheduler import register_job
from eduhub.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

JOB_ID_PURGE_EXPIRED_OTPS = "auth_purge_expired_otps"


async def purge_expired_otps() -> dict[str, int]:
    async with async_session_maker() as db:
        cleared = await UserRepository.clear_expired_otps(db, datetime.now(UTC))
    if cleared:
        logger.info(f"Cleared {cleared} expired verification code(s)")
    return {"cleared": cleared}


def register_auth_jobs() -> None:
    register_job(
        job_id=JOB_ID_PURGE_EXPIRED_OTPS,
        func=purge_expired_otps,
        trigger=IntervalTrigger(minutes=settings.otp_purge_interval_minutes),
    )
