"""
Institutions Repository

Database operations for synced courses.
"""

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from .catalog import Course
from .models import SyncedCourse


async def list_synced_courses(db: AsyncSession, institution_id: str) -> list[SyncedCourse]:
    result = await db.execute(
        select(SyncedCourse)
        .where(SyncedCourse.institution_id == institution_id)
        .order_by(SyncedCourse.created_at)
    )
    return list(result.scalars().all())


async def list_synced_courses_for(
    db: AsyncSession, institution_ids: Iterable[str]
) -> dict[str, list[SyncedCourse]]:
    ids = list(institution_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(SyncedCourse)
        .where(SyncedCourse.institution_id.in_(ids))
        .order_by(SyncedCourse.created_at)
    )
    grouped: dict[str, list[SyncedCourse]] = {}
    for course in result.scalars().all():
        grouped.setdefault(course.institution_id, []).append(course)
    return grouped


def course_rows(institution_id: str, courses: Iterable[Course]) -> list[dict]:
    """One row per course name; a later entry with the same name wins."""
    latest = {course.name: course for course in courses}
    return [
        {
            "institution_id": institution_id,
            "name": course.name,
            "prerequisites": list(course.prerequisites),
        }
        for course in latest.values()
    ]


async def upsert_courses(db: AsyncSession, institution_id: str, courses: list[Course]) -> int:
    """
    Insert synced courses, overwriting prerequisites of same-named rows.

    Returns:
        Number of courses written
    """
    rows = course_rows(institution_id, courses)
    if not rows:
        return 0
    stmt = insert(SyncedCourse).values(rows)
    stmt = stmt.on_conflict_do_update(
        constraint="uq_synced_courses_institution_name",
        set_={"prerequisites": stmt.excluded.prerequisites, "updated_at": func.now()},
    )
    await db.execute(stmt)
    await db.commit()
    return len(rows)
