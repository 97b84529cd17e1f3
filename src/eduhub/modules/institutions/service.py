"""
Institutions Service Layer

Browsing the catalogue and merging in courses brought in by sync.

The catalogue itself is immutable. Synced courses are stored per
institution; when a synced course has the same name as a catalogue
course it replaces it in place, otherwise it is appended.
"""

import dataclasses
import logging
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from eduhub.modules.audit import service as audit
from eduhub.modules.audit.models import AuditEvent
from eduhub.modules.institutions import repository
from eduhub.modules.institutions.catalog import (
    INSTITUTIONS,
    Course,
    Institution,
    filter_institutions,
    get_static_institution,
)
from eduhub.modules.institutions.models import SyncedCourse
from eduhub.modules.institutions.sync import CourseSource, get_course_source

logger = logging.getLogger(__name__)


class InstitutionServiceError(Exception):
    """Base exception for institution service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class InstitutionNotFoundError(InstitutionServiceError):
    def __init__(self, institution_id: str):
        super().__init__(
            message=f"Institution {institution_id} not found",
            error_code="INSTITUTION_NOT_FOUND",
            status_code=404,
        )


def merge_courses(static: Iterable[Course], synced: Iterable[SyncedCourse | Course]) -> tuple[Course, ...]:
    """Catalogue courses with synced ones replacing same-named entries."""
    synced_by_name: dict[str, Course] = {}
    for course in synced:
        synced_by_name[course.name] = Course(course.name, tuple(course.prerequisites))

    merged = []
    for course in static:
        merged.append(synced_by_name.pop(course.name, course))
    merged.extend(synced_by_name.values())
    return tuple(merged)


def search_institutions(query: str = "", institution_type: str = "All") -> list[Institution]:
    return filter_institutions(query, institution_type)


async def get_institution(db: AsyncSession, institution_id: str) -> Institution:
    """
    Get one institution with synced courses merged in.

    Raises:
        InstitutionNotFoundError: If the id is not in the catalogue
    """
    institution = get_static_institution(institution_id)
    if institution is None:
        raise InstitutionNotFoundError(institution_id)
    synced = await repository.list_synced_courses(db, institution_id)
    if not synced:
        return institution
    return dataclasses.replace(institution, courses=merge_courses(institution.courses, synced))


async def get_institutions(db: AsyncSession, institution_ids: Iterable[str]) -> dict[str, Institution]:
    """Known institutions by id, with synced courses. Unknown ids are skipped."""
    known = [i for i in (get_static_institution(x) for x in institution_ids) if i is not None]
    synced = await repository.list_synced_courses_for(db, [i.id for i in known])
    return {
        institution.id: dataclasses.replace(
            institution, courses=merge_courses(institution.courses, synced.get(institution.id, []))
        )
        for institution in known
    }


async def sync_courses(
    db: AsyncSession,
    institution_id: str | None = None,
    *,
    source: CourseSource | None = None,
    actor_id: str | None = None,
    ip_address: str | None = None,
) -> dict[str, list[str]]:
    """
    Pull the latest courses for one institution (or all) and store them.

    Returns:
        Mapping of institution id to the course names written
    """
    source = source or get_course_source()
    if institution_id is not None:
        if get_static_institution(institution_id) is None:
            raise InstitutionNotFoundError(institution_id)
        targets = [institution_id]
    else:
        targets = [institution.id for institution in INSTITUTIONS]

    written: dict[str, list[str]] = {}
    for target in targets:
        courses = await source.fetch_latest_courses(target)
        await repository.upsert_courses(db, target, courses)
        written[target] = [course.name for course in courses]
        logger.info(f"Synced {len(courses)} course(s) for {target}")

    await audit.record(
        db,
        AuditEvent.COURSE_SYNC,
        user_id=actor_id,
        ip_address=ip_address,
        details={"institutions": written},
    )
    return written
