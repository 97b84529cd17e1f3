"""
Security Utilities

Password hashing (bcrypt), one-time code hashing and JWT handling.

Every stored credential is a salted bcrypt hash. There is no cleartext
comparison path: a stored value that is not a valid bcrypt hash simply
never matches.
"""

import hashlib
import hmac
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt

from eduhub.core.config import settings


def _prepare_password(password: str) -> bytes:
    """
    Prepare a password for bcrypt.

    Bcrypt only reads the first 72 bytes, so longer inputs are reduced
    to a SHA-256 digest first.
    """
    password_bytes = password.encode("utf-8")
    if len(password_bytes) <= 72:
        return password_bytes
    return hashlib.sha256(password_bytes).hexdigest().encode("ascii")


def hash_password(password: str) -> str:
    """Hash a password with a fresh bcrypt salt."""
    hashed = bcrypt.hashpw(_prepare_password(password), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(_prepare_password(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash
        return False


def generate_numeric_code(length: int) -> str:
    """Generate a random numeric code with no leading zero."""
    lower = 10 ** (length - 1)
    return str(lower + secrets.randbelow(9 * lower))


def hash_code(code: str) -> str:
    """SHA-256 hash of a one-time code, hex encoded."""
    return hashlib.sha256(code.encode()).hexdigest()


def code_matches(code: str, code_hash: str | None) -> bool:
    """Constant-time comparison of a submitted code against a stored hash."""
    if not code_hash:
        return False
    return hmac.compare_digest(hash_code(code), code_hash)


def create_access_token(
    subject: str,
    additional_claims: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT access token."""
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode: dict[str, Any] = {
        "sub": subject,
        "type": "access",
        "exp": int(expire.timestamp()),
    }
    if additional_claims:
        to_encode.update(additional_claims)
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any] | None:
    """Decode and verify a JWT. Returns None when invalid or expired."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
