"""
Email Service using Resend

Sends verification codes and welcome messages to students.
"""

import asyncio
import logging
from html import escape

import resend

from eduhub.core.config import settings

logger = logging.getLogger(__name__)

resend.api_key = settings.resend_api_key

_STYLE = """
    body { font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }
    .container { max-width: 600px; margin: 0 auto; padding: 40px 20px; }
    .header { color: #1e3a8a; margin-bottom: 24px; }
    .code { font-size: 32px; letter-spacing: 8px; font-weight: bold; color: #1e3a8a; margin: 24px 0; }
    .button { display: inline-block; background-color: #1e3a8a; color: white; padding: 14px 28px; text-decoration: none; border-radius: 8px; margin: 24px 0; }
    .footer { margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }
"""


def _wrap(body: str) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
    <head><style>{_STYLE}</style></head>
    <body>
        <div class="container">
            {body}
            <div class="footer">
                <p>EduHub - Apply to South African universities and colleges in one place</p>
            </div>
        </div>
    </body>
    </html>
    """


async def send_email(
    to_email: str,
    subject: str,
    html_content: str,
) -> bool:
    """
    Send an email using Resend.

    Returns:
        True if the email was handed to the provider (or logged when no
        API key is configured), False if the provider call failed
    """
    if not resend.api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
        return True

    try:
        params: resend.Emails.SendParams = {
            "from": settings.email_from,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }
        # Sync SDK call, keep it off the event loop
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


async def send_otp_email(to_email: str, first_name: str, code: str) -> bool:
    """Send a verification code email."""
    safe_name = escape(first_name)
    body = f"""
            <h1 class="header">Verify your EduHub account</h1>
            <p>Hello {safe_name},</p>
            <p>Use this code to verify your account:</p>
            <p class="code">{escape(code)}</p>
            <p><strong>This code expires in {settings.otp_expiry_minutes} minutes.</strong></p>
            <p>If you didn't create an EduHub account, you can safely ignore this email.</p>
    """
    return await send_email(
        to_email=to_email,
        subject="Your EduHub verification code",
        html_content=_wrap(body),
    )


async def send_welcome_email(to_email: str, first_name: str) -> bool:
    """Send the post-verification welcome email."""
    safe_name = escape(first_name)
    body = f"""
            <h1 class="header">Welcome to EduHub!</h1>
            <p>Hello {safe_name},</p>
            <p>Your account is verified. You can now browse institutions, build your
            application basket and apply to several institutions with one form.</p>
            <a href="{settings.frontend_url}" class="button">Start your application</a>
    """
    return await send_email(
        to_email=to_email,
        subject="Welcome to EduHub",
        html_content=_wrap(body),
    )
