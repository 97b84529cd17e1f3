"""
Authentication and Authorization Module

FastAPI dependencies that turn a bearer JWT into the acting principal.

Two identity spaces share the token format and are told apart by the
``kind`` claim:
- ``user``: a verified student account
- ``admin``: a dashboard account with a role (``super_admin`` or ``editor``)
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from eduhub.core.security import decode_token

logger = logging.getLogger(__name__)

security = HTTPBearer(
    auto_error=True,
    description="JWT Bearer token for authentication",
)

TOKEN_KIND_USER = "user"
TOKEN_KIND_ADMIN = "admin"

ROLE_SUPER_ADMIN = "super_admin"
ROLE_EDITOR = "editor"
ADMIN_ROLES = (ROLE_SUPER_ADMIN, ROLE_EDITOR)


@dataclass
class CurrentUser:
    """An authenticated student, populated from JWT claims."""

    id: UUID
    email: str

    def __str__(self) -> str:
        return f"CurrentUser(id={self.id}, email={self.email})"


@dataclass
class CurrentAdmin:
    """An authenticated dashboard admin, populated from JWT claims."""

    id: UUID
    email: str
    role: str
    name: str | None = None

    def __str__(self) -> str:
        return f"CurrentAdmin(id={self.id}, email={self.email}, role={self.role})"


def _unauthorized(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def _decode_claims(token: str, expected_kind: str) -> dict:
    """Decode a token and check it is an access token of the expected kind."""
    payload = decode_token(token)
    if payload is None:
        logger.warning("Invalid or expired JWT token")
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired authentication token.")

    if payload.get("type", "access") != "access":
        raise _unauthorized("INVALID_TOKEN_TYPE", "This endpoint requires an access token.")

    if payload.get("kind") != expected_kind:
        logger.warning(f"Token kind mismatch: expected {expected_kind}, got {payload.get('kind')}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "WRONG_ACCOUNT_TYPE",
                "message": "This token cannot be used for this endpoint.",
            },
        )
    return payload


def _subject_id(payload: dict) -> UUID:
    try:
        subject = payload.get("sub")
        if not subject:
            raise ValueError("Missing 'sub' claim in token")
        return UUID(subject)
    except ValueError as e:
        logger.warning(f"Invalid token claims: {e}")
        raise _unauthorized(
            "INVALID_TOKEN_CLAIMS", "Token contains invalid or missing claims."
        ) from e


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentUser:
    """FastAPI dependency returning the authenticated student."""
    payload = _decode_claims(credentials.credentials, TOKEN_KIND_USER)
    return CurrentUser(id=_subject_id(payload), email=payload.get("email", ""))


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(HTTPBearer(auto_error=False)),
) -> CurrentUser | None:
    """Return the student if a valid user token is present, otherwise None."""
    if not credentials:
        return None
    try:
        return await get_current_user(credentials)
    except HTTPException:
        return None


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentAdmin:
    """
    FastAPI dependency returning the authenticated admin (any role).

    Raises:
        HTTPException 401: If token is missing, invalid, or expired
        HTTPException 403: If the token is not an admin token
    """
    payload = _decode_claims(credentials.credentials, TOKEN_KIND_ADMIN)
    role = payload.get("role", "")
    if role not in ADMIN_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "ADMIN_ACCESS_REQUIRED", "message": "Admin access is required."},
        )
    admin = CurrentAdmin(
        id=_subject_id(payload),
        email=payload.get("email", ""),
        role=role,
        name=payload.get("name"),
    )
    logger.debug(f"Authenticated admin: {admin.id} ({admin.email})")
    return admin


async def require_super_admin(admin: CurrentAdmin = Depends(get_current_admin)) -> CurrentAdmin:
    """Restrict an endpoint to super admins."""
    if admin.role != ROLE_SUPER_ADMIN:
        logger.warning(f"Access denied: admin {admin.id} has role '{admin.role}'")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "SUPER_ADMIN_REQUIRED",
                "message": "Super admin access is required for this endpoint.",
            },
        )
    return admin


__all__ = [
    "ADMIN_ROLES",
    "ROLE_EDITOR",
    "ROLE_SUPER_ADMIN",
    "TOKEN_KIND_ADMIN",
    "TOKEN_KIND_USER",
    "CurrentAdmin",
    "CurrentUser",
    "get_current_admin",
    "get_current_user",
    "get_optional_user",
    "require_super_admin",
]
