"""
Course sync sources.

A CourseSource supplies the latest course list for one institution. No
institution exposes a real feed yet, so the default source fabricates a
small deterministic set per institution.
"""

import zlib
from typing import Protocol

from eduhub.modules.institutions.catalog import Course

_ADVANCED_PROGRAMMES = ("Robotics", "Data Science", "AI", "Cybersecurity")
_DIPLOMA_PROGRAMMES = ("Digital Marketing", "Cloud Computing", "UX Design")


class CourseSource(Protocol):
    async def fetch_latest_courses(self, institution_id: str) -> list[Course]: ...


class MockCourseSource:
    """Fabricated courses, stable for a given institution id."""

    async def fetch_latest_courses(self, institution_id: str) -> list[Course]:
        seed = zlib.crc32(institution_id.encode())
        advanced = _ADVANCED_PROGRAMMES[seed % len(_ADVANCED_PROGRAMMES)]
        diploma = _DIPLOMA_PROGRAMMES[seed % len(_DIPLOMA_PROGRAMMES)]
        return [
            Course(f"BSc Advanced {advanced}", ("Mathematics > 75%",)),
            Course(f"Diploma in {diploma}", ("English > 60%",)),
        ]


_source: CourseSource = MockCourseSource()


def get_course_source() -> CourseSource:
    return _source


def set_course_source(source: CourseSource) -> None:
    global _source
    _source = source
