"""
Applications Service Layer

Persistence of submitted applications and assembly of the per-student
wizard.

This module implements:
1. Submission:
   - Strip inline previews when the serialised form is too large
   - Store the record as ``submitted`` and write an APP_SUBMIT audit event
2. Listing:
   - A student's own applications, or the latest across all students
3. Wizard loading:
   - Restore a student's draft (or packaged snapshot) with catalogue
     institutions and their synced courses
"""

import json
import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from eduhub.core.config import settings
from eduhub.modules.applications import repository
from eduhub.modules.applications.drafts import DraftStore
from eduhub.modules.applications.errors import ApplicationServiceError
from eduhub.modules.applications.models import ApplicationRecord, ApplicationStatus
from eduhub.modules.applications.schemas import FormData
from eduhub.modules.applications.wizard import ApplicantIdentity, ApplicationWizard
from eduhub.modules.audit import service as audit
from eduhub.modules.audit.models import AuditEvent
from eduhub.modules.institutions import service as institutions
from eduhub.modules.institutions.catalog import INSTITUTIONS
from eduhub.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

__all__ = [
    "ApplicationServiceError",
    "list_applications",
    "load_wizard",
    "save_application",
    "strip_previews",
]


def strip_previews(content: dict[str, Any], max_chars: int | None = None) -> dict[str, Any]:
    """
    Drop inline previews when the serialised form exceeds ``max_chars``.

    Document metadata is kept; only ``data_url`` values are cleared.
    """
    limit = max_chars or settings.max_payload_chars
    if len(json.dumps(content)) <= limit:
        return content

    stripped = json.loads(json.dumps(content))
    if stripped.get("profile_picture"):
        stripped["profile_picture"]["data_url"] = None
    for document in (stripped.get("documents") or {}).values():
        if document:
            document["data_url"] = None

    logger.info("Stripped inline previews from oversized application payload")
    return stripped


async def save_application(
    db: AsyncSession,
    form_data: FormData,
    user_id: str | None = None,
    ip_address: str | None = None,
) -> ApplicationRecord:
    """Persist a submitted application."""
    content = strip_previews(form_data.model_dump(mode="json"))

    record = await repository.create(
        db,
        user_id=user_id,
        first_name=form_data.first_name,
        last_name=form_data.last_name,
        content=content,
        status=ApplicationStatus.SUBMITTED,
    )
    logger.info(
        f"Application {record.id} submitted by {user_id or 'guest'} "
        f"to {len(form_data.selected_institutions)} institution(s)"
    )

    await audit.record(
        db,
        AuditEvent.APP_SUBMIT,
        user_id=user_id,
        ip_address=ip_address,
        details={
            "institutions": len(form_data.selected_institutions),
            "has_nsfas": form_data.nsfas_required,
        },
    )
    return record


async def list_applications(
    db: AsyncSession, user_id: str | None = None, limit: int | None = None
) -> list[ApplicationRecord]:
    """A user's applications, or the latest across everyone when no user is given."""
    if user_id is not None:
        return await repository.list_by_user(db, user_id)
    return await repository.list_recent(db, limit or settings.recent_applications_limit)


async def load_wizard(db: AsyncSession, store: DraftStore, user_id: str) -> ApplicationWizard:
    """Build and restore the wizard for a student."""
    user = await UserRepository.get_by_id(db, user_id)
    identity = ApplicantIdentity.from_user(user) if user is not None else None
    catalogue = await institutions.get_institutions(db, [i.id for i in INSTITUTIONS])

    wizard = ApplicationWizard(store, str(user_id), identity=identity, institutions=catalogue)
    return await wizard.restore()
