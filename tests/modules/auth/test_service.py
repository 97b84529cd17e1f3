"""
Unit tests for the OTP-gated authentication flow.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest

from eduhub.core.notifications import DeliveryOutcome
from eduhub.core.security import decode_token, hash_code, hash_password
from eduhub.modules.audit.models import AuditEvent
from eduhub.modules.auth import service
from eduhub.modules.auth.schemas import RegisterRequest
from eduhub.modules.auth.service import (
    AccountNotVerifiedError,
    AlreadyVerifiedError,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    InvalidOrExpiredCodeError,
    OtpResendThrottledError,
    UserNotFoundError,
)
from eduhub.modules.users.models import User
from eduhub.modules.users.repository import UserRepository

SKIPPED = {"email": DeliveryOutcome.SKIPPED, "sms": DeliveryOutcome.SKIPPED}


def make_user(
    email: str = "thabo@test.com",
    *,
    verified: bool = False,
    code: str | None = "12345",
    expires_in: timedelta = timedelta(minutes=15),
) -> User:
    return User(
        id="5f0c3a52-9f1e-4c4b-9a53-4b1f0f7d2a11",
        email=email,
        password_hash=hash_password("secret123"),
        first_name="Thabo",
        last_name="Nkosi",
        id_number="0502125678089",
        phone="0721234567",
        is_verified=verified,
        otp_code_hash=hash_code(code) if code else None,
        otp_expires_at=datetime.now(UTC) + expires_in if code else None,
        created_at=datetime.now(UTC),
    )


@pytest.fixture
def mock_audit():
    with patch("eduhub.modules.auth.service.audit") as audit:
        audit.record = AsyncMock()
        yield audit


@pytest.fixture
def mock_dispatch():
    with patch("eduhub.modules.auth.service.dispatch_otp", new=AsyncMock(return_value=SKIPPED)) as dispatch:
        yield dispatch


class TestRegister:
    """Tests for register."""

    def _request(self, email: str = "Thabo@Test.com") -> RegisterRequest:
        return RegisterRequest(
            first_name="Thabo",
            last_name="Nkosi",
            id_number="0502125678089",
            email=email,
            phone="0721234567",
            password="secret123",
        )

    @pytest.mark.asyncio
    async def test_creates_unverified_user_and_sends_code(self, mock_db, mock_audit, mock_dispatch):
        created = make_user()
        with (
            patch.object(UserRepository, "email_exists", new=AsyncMock(return_value=False)),
            patch.object(UserRepository, "create", new=AsyncMock(return_value=created)) as mock_create,
        ):
            result = await service.register(mock_db, self._request())

        kwargs = mock_create.call_args.kwargs
        assert kwargs["email"] == "thabo@test.com"
        assert kwargs["password_hash"] != "secret123"
        assert kwargs["otp_code_hash"] == hash_code("12345")
        assert result.user.is_verified is False
        assert result.delivery == SKIPPED
        mock_db.commit.assert_awaited_once()
        mock_dispatch.assert_awaited_once_with("thabo@test.com", "0721234567", "Thabo", "12345")
        assert mock_audit.record.call_args.args[1] is AuditEvent.USER_REGISTER

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, mock_db, mock_audit, mock_dispatch):
        with patch.object(UserRepository, "email_exists", new=AsyncMock(return_value=True)):
            with pytest.raises(EmailAlreadyRegisteredError) as exc_info:
                await service.register(mock_db, self._request())

        assert exc_info.value.status_code == 409
        mock_dispatch.assert_not_called()

    @pytest.mark.asyncio
    async def test_random_code_for_real_domain(self, mock_db, mock_audit, mock_dispatch):
        created = make_user("thabo@gmail.com")
        with (
            patch.object(UserRepository, "email_exists", new=AsyncMock(return_value=False)),
            patch.object(UserRepository, "create", new=AsyncMock(return_value=created)),
            patch("eduhub.modules.auth.service.generate_numeric_code", return_value="48213"),
        ):
            await service.register(mock_db, self._request("thabo@gmail.com"))

        assert mock_dispatch.call_args.args[3] == "48213"


class TestLogin:
    """Tests for login."""

    @pytest.mark.asyncio
    async def test_unverified_account_is_refused(self, mock_db, mock_audit):
        user = make_user()
        with patch.object(UserRepository, "get_by_email", new=AsyncMock(return_value=user)):
            with pytest.raises(AccountNotVerifiedError) as exc_info:
                await service.login(mock_db, "thabo@test.com", "secret123")

        assert exc_info.value.email == "thabo@test.com"
        mock_audit.record.assert_not_called()

    @pytest.mark.asyncio
    async def test_unverified_is_checked_before_password(self, mock_db, mock_audit):
        user = make_user()
        with patch.object(UserRepository, "get_by_email", new=AsyncMock(return_value=user)):
            with pytest.raises(AccountNotVerifiedError):
                await service.login(mock_db, "thabo@test.com", "wrong-password")

    @pytest.mark.asyncio
    async def test_wrong_password(self, mock_db, mock_audit):
        user = make_user(verified=True, code=None)
        with patch.object(UserRepository, "get_by_email", new=AsyncMock(return_value=user)):
            with pytest.raises(InvalidCredentialsError):
                await service.login(mock_db, "thabo@test.com", "wrong-password")

    @pytest.mark.asyncio
    async def test_unknown_email(self, mock_db, mock_audit):
        with patch.object(UserRepository, "get_by_email", new=AsyncMock(return_value=None)):
            with pytest.raises(InvalidCredentialsError):
                await service.login(mock_db, "nobody@test.com", "secret123")

    @pytest.mark.asyncio
    async def test_verified_login_issues_token(self, mock_db, mock_audit):
        user = make_user(verified=True, code=None)
        with patch.object(UserRepository, "get_by_email", new=AsyncMock(return_value=user)) as lookup:
            result = await service.login(mock_db, "  THABO@test.com ", "secret123")

        lookup.assert_awaited_once_with(mock_db, "thabo@test.com")
        payload = decode_token(result.access_token)
        assert payload["sub"] == user.id
        assert payload["kind"] == "user"
        assert mock_audit.record.call_args.args[1] is AuditEvent.USER_LOGIN


class TestVerifyOtp:
    """Tests for verify_otp."""

    @pytest.mark.asyncio
    async def test_correct_code_verifies_and_clears(self, mock_db, mock_audit):
        user = make_user()
        with (
            patch.object(UserRepository, "get_by_email", new=AsyncMock(return_value=user)),
            patch("eduhub.modules.auth.service.notify_welcome", new=AsyncMock()) as welcome,
        ):
            result = await service.verify_otp(mock_db, "thabo@test.com", "12345")

        assert user.is_verified is True
        assert user.otp_code_hash is None
        assert user.otp_expires_at is None
        assert result.user.is_verified is True
        welcome.assert_awaited_once_with("thabo@test.com", "Thabo")

    @pytest.mark.asyncio
    async def test_code_cannot_be_replayed(self, mock_db, mock_audit):
        user = make_user()
        with (
            patch.object(UserRepository, "get_by_email", new=AsyncMock(return_value=user)),
            patch("eduhub.modules.auth.service.notify_welcome", new=AsyncMock()),
        ):
            await service.verify_otp(mock_db, "thabo@test.com", "12345")
            with pytest.raises(InvalidOrExpiredCodeError):
                await service.verify_otp(mock_db, "thabo@test.com", "12345")

    @pytest.mark.asyncio
    async def test_wrong_code(self, mock_db, mock_audit):
        user = make_user()
        with patch.object(UserRepository, "get_by_email", new=AsyncMock(return_value=user)):
            with pytest.raises(InvalidOrExpiredCodeError):
                await service.verify_otp(mock_db, "thabo@test.com", "54321")

        assert user.is_verified is False

    @pytest.mark.asyncio
    async def test_expired_code(self, mock_db, mock_audit):
        user = make_user(expires_in=timedelta(seconds=-1))
        with patch.object(UserRepository, "get_by_email", new=AsyncMock(return_value=user)):
            with pytest.raises(InvalidOrExpiredCodeError):
                await service.verify_otp(mock_db, "thabo@test.com", "12345")

    @pytest.mark.asyncio
    async def test_unknown_email_looks_like_bad_code(self, mock_db, mock_audit):
        with patch.object(UserRepository, "get_by_email", new=AsyncMock(return_value=None)):
            with pytest.raises(InvalidOrExpiredCodeError):
                await service.verify_otp(mock_db, "nobody@test.com", "12345")


class TestResendOtp:
    """Tests for resend_otp."""

    @pytest.mark.asyncio
    async def test_replaces_code_and_restarts_window(self, mock_db, mock_dispatch):
        user = make_user("thabo@gmail.com", code="11111", expires_in=timedelta(seconds=-5))
        with (
            patch.object(UserRepository, "get_by_email", new=AsyncMock(return_value=user)),
            patch("eduhub.modules.auth.service.generate_numeric_code", return_value="22222"),
        ):
            await service.resend_otp(mock_db, "thabo@gmail.com")

        assert user.otp_code_hash == hash_code("22222")
        assert user.otp_expires_at > datetime.now(UTC)
        mock_dispatch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_throttled_after_limit(self, mock_db, mock_dispatch):
        user = make_user()
        with patch.object(UserRepository, "get_by_email", new=AsyncMock(return_value=user)):
            for _ in range(3):
                await service.resend_otp(mock_db, "thabo@test.com")
            with pytest.raises(OtpResendThrottledError) as exc_info:
                await service.resend_otp(mock_db, "thabo@test.com")

        assert exc_info.value.status_code == 429
        assert mock_dispatch.await_count == 3

    @pytest.mark.asyncio
    async def test_unknown_email(self, mock_db, mock_dispatch):
        with patch.object(UserRepository, "get_by_email", new=AsyncMock(return_value=None)):
            with pytest.raises(UserNotFoundError):
                await service.resend_otp(mock_db, "nobody@test.com")

    @pytest.mark.asyncio
    async def test_already_verified(self, mock_db, mock_dispatch):
        user = make_user(verified=True, code=None)
        with patch.object(UserRepository, "get_by_email", new=AsyncMock(return_value=user)):
            with pytest.raises(AlreadyVerifiedError):
                await service.resend_otp(mock_db, "thabo@test.com")
