"""
Register, verify, log in, apply to two institutions and confirm the
emails were sent, all against in-memory stand-ins for the database.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from eduhub.core.security import decode_token
from eduhub.modules.applications import service as applications
from eduhub.modules.applications.drafts import InMemoryDraftStore, draft_key
from eduhub.modules.applications.models import ApplicationStatus
from eduhub.modules.applications.schemas import DocumentSlot
from eduhub.modules.applications.wizard import ApplicantIdentity, ApplicationWizard
from eduhub.modules.auth import service as auth
from eduhub.modules.auth.schemas import RegisterRequest
from eduhub.modules.auth.service import AccountNotVerifiedError, InvalidOrExpiredCodeError
from eduhub.modules.eligibility.funding import NsfasEstimate
from eduhub.modules.institutions.catalog import INSTITUTIONS
from eduhub.modules.users.models import User
from eduhub.modules.users.repository import UserRepository


class FakeUsers:
    """Dict-backed replacements for the UserRepository lookups."""

    def __init__(self):
        self.by_email: dict[str, User] = {}

    async def create(self, db, **fields) -> User:
        user = User(
            id="5f0c3a52-9f1e-4c4b-9a53-4b1f0f7d2a11",
            is_verified=False,
            created_at=datetime.now(UTC),
            **fields,
        )
        self.by_email[user.email] = user
        return user

    async def get_by_email(self, db, email: str) -> User | None:
        return self.by_email.get(email)

    async def email_exists(self, db, email: str) -> bool:
        return email in self.by_email


@pytest.mark.asyncio
async def test_student_applies_to_two_institutions(mock_db):
    users = FakeUsers()
    saved = []

    async def create_record(db, **fields):
        record = MagicMock(**fields)
        saved.append(record)
        return record

    with (
        patch.object(UserRepository, "create", new=users.create),
        patch.object(UserRepository, "get_by_email", new=users.get_by_email),
        patch.object(UserRepository, "email_exists", new=users.email_exists),
        patch("eduhub.modules.auth.service.audit") as auth_audit,
        patch("eduhub.modules.auth.service.notify_welcome", new=AsyncMock()),
        patch("eduhub.modules.applications.service.audit") as app_audit,
        patch("eduhub.modules.applications.service.repository") as app_repo,
    ):
        auth_audit.record = AsyncMock()
        app_audit.record = AsyncMock()
        app_repo.create = AsyncMock(side_effect=create_record)

        # Register with a test-domain email: fixed code, nothing delivered
        registered = await auth.register(
            mock_db,
            RegisterRequest(
                first_name="Thabo",
                last_name="Nkosi",
                id_number="0502125678089",
                email="thabo@test.com",
                phone="072 123 4567",
                gender="Male",
                ethnicity="Black African",
                password="secret123",
            ),
        )
        assert registered.user.is_verified is False

        with pytest.raises(AccountNotVerifiedError):
            await auth.login(mock_db, "thabo@test.com", "secret123")
        with pytest.raises(InvalidOrExpiredCodeError):
            await auth.verify_otp(mock_db, "thabo@test.com", "00000")

        verified = await auth.verify_otp(mock_db, "thabo@test.com", "12345")
        assert verified.user.is_verified is True

        session = await auth.login(mock_db, "thabo@test.com", "secret123")
        user_id = decode_token(session.access_token)["sub"]

        # Application wizard
        store = InMemoryDraftStore()
        user = users.by_email["thabo@test.com"]
        wizard = await ApplicationWizard(
            store,
            user_id,
            identity=ApplicantIdentity.from_user(user),
            institutions={i.id: i for i in INSTITUTIONS},
        ).restore()

        await wizard.update({"province": "Gauteng", "pronouns": "He/Him"})
        assert await wizard.next()

        for name, mark in [
            ("Mathematics", 78),
            ("English Home Language", 82),
            ("Physical Sciences", 75),
            ("Life Orientation", 88),
        ]:
            assert await wizard.add_subject(name, mark)
        assert await wizard.next()

        await wizard.toggle_institution("uct")
        await wizard.toggle_institution("wits")
        await wizard.select_course("uct", "BSc Computer Science")
        await wizard.select_course("wits", "BSc Engineering")
        assert await wizard.next()

        await wizard.update({"nsfas_required": True, "household_income": 120000})
        assert wizard.nsfas_estimate() is NsfasEstimate.LIKELY_ELIGIBLE
        assert await wizard.next()

        await wizard.upload_document(DocumentSlot.ID_DOCUMENT, "id.pdf", "application/pdf", b"%PDF-id")
        await wizard.upload_document(
            DocumentSlot.ACADEMIC_RECORD, "results.pdf", "application/pdf", b"%PDF-results"
        )
        await wizard.upload_document(
            DocumentSlot.PROOF_OF_INCOME, "payslip.pdf", "application/pdf", b"%PDF-payslip"
        )
        assert await wizard.next()
        assert wizard.step == 6

        links = await wizard.submit(delay=0)
        assert len(links) == 2
        assert all(link.url.startswith("mailto:") for link in links)

        await wizard.confirm_sent(
            lambda form: applications.save_application(mock_db, form, user_id=user_id)
        )

    assert len(saved) == 1
    assert saved[0].status is ApplicationStatus.SUBMITTED
    assert saved[0].user_id == user_id
    assert saved[0].content["selected_institutions"] == ["uct", "wits"]
    assert wizard.form.selected_institutions == []
    assert await store.get(draft_key(user_id)) is None
