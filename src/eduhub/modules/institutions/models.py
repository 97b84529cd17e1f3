"""
Institution Models

Courses pulled in by the admin sync. Static catalogue data is not stored.
"""

from sqlalchemy import JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from eduhub.modules.shared import BaseModel


class SyncedCourse(BaseModel):
    """A course added by sync; one row per (institution, course name)."""

    __tablename__ = "synced_courses"
    __table_args__ = (
        UniqueConstraint("institution_id", "name", name="uq_synced_courses_institution_name"),
    )

    institution_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    prerequisites: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<SyncedCourse(institution={self.institution_id}, name={self.name})>"
