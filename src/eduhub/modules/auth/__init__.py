"""
Auth Module

OTP-gated student registration, verification and login.

API Endpoints:
- POST /auth/register
- POST /auth/login
- POST /auth/verify-otp
- POST /auth/resend-otp
- GET /auth/me

Background Jobs (via APScheduler):
- auth_purge_expired_otps: clears expired verification codes
"""

from .jobs import register_auth_jobs
from .router import router

__all__ = ["router", "register_auth_jobs"]
