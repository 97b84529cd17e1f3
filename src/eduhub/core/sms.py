"""
SMS Service using the Twilio Messages REST API.
"""

import logging

import httpx

from eduhub.core.config import settings

logger = logging.getLogger(__name__)

SMS_TIMEOUT_SECONDS = 10.0


def is_sms_configured() -> bool:
    return bool(
        settings.twilio_account_sid and settings.twilio_auth_token and settings.twilio_from_number
    )


async def send_sms(to_number: str, body: str) -> bool:
    """
    Send a text message.

    Returns:
        True if Twilio accepted the message, False otherwise
    """
    url = f"{settings.twilio_api_base}/Accounts/{settings.twilio_account_sid}/Messages.json"
    try:
        async with httpx.AsyncClient(timeout=SMS_TIMEOUT_SECONDS) as client:
            response = await client.post(
                url,
                data={"To": to_number, "From": settings.twilio_from_number, "Body": body},
                auth=(settings.twilio_account_sid, settings.twilio_auth_token),
            )
            response.raise_for_status()
        logger.info(f"SMS sent to {to_number}, sid: {response.json().get('sid')}")
        return True
    except httpx.HTTPError as e:
        logger.error(f"Failed to send SMS to {to_number}: {e}")
        return False


async def send_otp_sms(to_number: str, code: str) -> bool:
    return await send_sms(to_number, f"EduHub Code: {code}")
