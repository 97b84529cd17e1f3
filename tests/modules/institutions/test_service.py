"""
Unit tests for catalogue browsing and course sync.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from eduhub.modules.audit.models import AuditEvent
from eduhub.modules.institutions import service
from eduhub.modules.institutions.catalog import INSTITUTIONS, Course, InstitutionType
from eduhub.modules.institutions.models import SyncedCourse
from eduhub.modules.institutions.service import InstitutionNotFoundError, merge_courses
from eduhub.modules.institutions.sync import MockCourseSource


def synced(name: str, prerequisites: list[str]) -> SyncedCourse:
    course = MagicMock(spec=SyncedCourse)
    course.name = name
    course.prerequisites = prerequisites
    return course


class TestSearchInstitutions:
    def test_empty_query_returns_everything(self):
        assert len(service.search_institutions()) == len(INSTITUTIONS)

    def test_query_matches_name_case_insensitive(self):
        results = service.search_institutions("cape town")
        assert [i.id for i in results] == ["uct"]

    def test_query_matches_location(self):
        results = service.search_institutions("gauteng")
        assert results and all(i.location == "Gauteng" for i in results)

    def test_type_filter(self):
        results = service.search_institutions("", InstitutionType.TVET.value)
        assert results and all(i.type is InstitutionType.TVET for i in results)

    def test_no_match(self):
        assert service.search_institutions("atlantis") == []


class TestMergeCourses:
    def test_same_name_replaces_in_place(self):
        static = [Course("BSc", ("Mathematics > 70%",)), Course("BA", ())]
        merged = merge_courses(static, [synced("BSc", ["Mathematics > 80%"])])

        assert merged[0] == Course("BSc", ("Mathematics > 80%",))
        assert merged[1] == Course("BA", ())

    def test_new_names_are_appended(self):
        merged = merge_courses([Course("BA", ())], [synced("BSc Robotics", ["Mathematics > 75%"])])
        assert [c.name for c in merged] == ["BA", "BSc Robotics"]


class TestMockCourseSource:
    @pytest.mark.asyncio
    async def test_is_deterministic_per_institution(self):
        source = MockCourseSource()
        first = await source.fetch_latest_courses("uct")
        second = await source.fetch_latest_courses("uct")

        assert first == second
        assert len(first) == 2
        assert first[0].prerequisites == ("Mathematics > 75%",)


class TestGetInstitution:
    @pytest.mark.asyncio
    async def test_unknown_id_raises(self, mock_db):
        with pytest.raises(InstitutionNotFoundError) as exc_info:
            await service.get_institution(mock_db, "hogwarts")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_synced_courses_are_merged(self, mock_db):
        with patch("eduhub.modules.institutions.service.repository") as mock_repo:
            mock_repo.list_synced_courses = AsyncMock(return_value=[synced("BSc Advanced AI", [])])

            institution = await service.get_institution(mock_db, "uct")

        assert institution.courses[-1].name == "BSc Advanced AI"
        assert institution.name == "University of Cape Town"

    @pytest.mark.asyncio
    async def test_get_institutions_skips_unknown(self, mock_db):
        with patch("eduhub.modules.institutions.service.repository") as mock_repo:
            mock_repo.list_synced_courses_for = AsyncMock(return_value={})

            result = await service.get_institutions(mock_db, ["uct", "nope", "wits"])

        assert list(result) == ["uct", "wits"]


class TestSyncCourses:
    """Tests for sync_courses."""

    @pytest.mark.asyncio
    async def test_single_institution(self, mock_db):
        source = MagicMock()
        source.fetch_latest_courses = AsyncMock(return_value=[Course("BSc Advanced AI", ("Mathematics > 75%",))])

        with (
            patch("eduhub.modules.institutions.service.repository") as mock_repo,
            patch("eduhub.modules.institutions.service.audit") as mock_audit,
        ):
            mock_repo.upsert_courses = AsyncMock(return_value=1)
            mock_audit.record = AsyncMock()

            written = await service.sync_courses(mock_db, "uct", source=source, actor_id="admin-1")

        assert written == {"uct": ["BSc Advanced AI"]}
        mock_repo.upsert_courses.assert_awaited_once()
        mock_audit.record.assert_awaited_once()
        assert mock_audit.record.call_args.args[1] is AuditEvent.COURSE_SYNC
        assert mock_audit.record.call_args.kwargs["user_id"] == "admin-1"

    @pytest.mark.asyncio
    async def test_all_institutions(self, mock_db):
        with (
            patch("eduhub.modules.institutions.service.repository") as mock_repo,
            patch("eduhub.modules.institutions.service.audit") as mock_audit,
        ):
            mock_repo.upsert_courses = AsyncMock(return_value=2)
            mock_audit.record = AsyncMock()

            written = await service.sync_courses(mock_db, source=MockCourseSource())

        assert set(written) == {i.id for i in INSTITUTIONS}
        assert mock_repo.upsert_courses.await_count == len(INSTITUTIONS)

    @pytest.mark.asyncio
    async def test_unknown_institution_raises(self, mock_db):
        with pytest.raises(InstitutionNotFoundError):
            await service.sync_courses(mock_db, "hogwarts", source=MockCourseSource())
