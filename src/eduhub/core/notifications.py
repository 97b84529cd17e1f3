"""
Best-effort notification dispatch.

Email and SMS are independent side channels. Each call reports a
DeliveryOutcome per channel, logs it and never raises: a failed delivery
must not change the outcome of the request that triggered it.
"""

import asyncio
import enum
import logging
from collections.abc import Awaitable

from eduhub.core.config import settings
from eduhub.core.email import send_otp_email, send_welcome_email
from eduhub.core.sms import is_sms_configured, send_otp_sms

logger = logging.getLogger(__name__)


class DeliveryOutcome(str, enum.Enum):
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


def is_test_email(email: str) -> bool:
    """True for addresses on a designated test domain."""
    domain = email.strip().lower().rpartition("@")[2]
    return domain in {d.lower() for d in settings.otp_test_email_domains}


async def _attempt(channel: str, send: Awaitable[bool]) -> DeliveryOutcome:
    try:
        delivered = await send
    except Exception as e:
        logger.error(f"{channel} delivery raised: {e}")
        return DeliveryOutcome.FAILED
    return DeliveryOutcome.SENT if delivered else DeliveryOutcome.FAILED


async def dispatch_otp(
    email: str,
    phone: str | None,
    first_name: str,
    code: str,
) -> dict[str, DeliveryOutcome]:
    """
    Deliver a verification code over email and SMS in parallel.

    Test-domain addresses skip both channels.
    """
    if is_test_email(email):
        logger.info(f"Test-domain address {email}: OTP delivery skipped")
        return {"email": DeliveryOutcome.SKIPPED, "sms": DeliveryOutcome.SKIPPED}

    async def skipped() -> DeliveryOutcome:
        return DeliveryOutcome.SKIPPED

    sms_task = (
        _attempt("sms", send_otp_sms(phone, code))
        if phone and is_sms_configured()
        else skipped()
    )
    email_outcome, sms_outcome = await asyncio.gather(
        _attempt("email", send_otp_email(email, first_name, code)),
        sms_task,
    )

    outcomes = {"email": email_outcome, "sms": sms_outcome}
    if DeliveryOutcome.FAILED in outcomes.values():
        logger.warning(f"OTP delivery to {email} partially failed: {outcomes}")
    else:
        logger.info(f"OTP delivery to {email}: {outcomes}")
    return outcomes


async def notify_welcome(email: str, first_name: str) -> DeliveryOutcome:
    """Send the welcome email, best effort."""
    if is_test_email(email):
        return DeliveryOutcome.SKIPPED
    outcome = await _attempt("email", send_welcome_email(email, first_name))
    if outcome is DeliveryOutcome.FAILED:
        logger.warning(f"Welcome email to {email} failed")
    return outcome
