"""
Unit tests for the job registry and scheduler lifecycle.
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from apscheduler.triggers.interval import IntervalTrigger

from eduhub.core.scheduler import (
    _schedule,
    clear_registry,
    get_scheduler,
    list_registered_jobs,
    register_job,
    start_scheduler,
    stop_scheduler,
    trigger_job_manually,
)


@pytest_asyncio.fixture(autouse=True)
async def clean_scheduler():
    clear_registry()
    yield
    await stop_scheduler()
    clear_registry()


class TestTriggerJobManually:
    @pytest.mark.asyncio
    async def test_success_returns_result(self):
        register_job("purge", AsyncMock(return_value={"cleared": 2}), IntervalTrigger(minutes=30))

        result = await trigger_job_manually("purge")

        assert result["status"] == "success"
        assert result["result"] == {"cleared": 2}

    @pytest.mark.asyncio
    async def test_failure_is_reported(self):
        register_job("broken", AsyncMock(side_effect=RuntimeError("db down")), IntervalTrigger(minutes=30))

        result = await trigger_job_manually("broken")

        assert result["status"] == "error"
        assert "db down" in result["error"]

    @pytest.mark.asyncio
    async def test_unknown_job_raises(self):
        with pytest.raises(ValueError):
            await trigger_job_manually("missing")


class TestSchedulerLifecycle:
    @pytest.mark.asyncio
    async def test_jobs_registered_before_start_are_scheduled(self):
        register_job("purge", AsyncMock(), IntervalTrigger(minutes=30))

        await start_scheduler()
        jobs = list_registered_jobs()

        assert jobs[0]["job_id"] == "purge"
        assert jobs[0]["next_run_time"] is not None
        assert jobs[0]["is_paused"] is False

    @pytest.mark.asyncio
    async def test_jobs_registered_after_start_are_scheduled(self):
        await start_scheduler()
        register_job("late", AsyncMock(), IntervalTrigger(minutes=30))

        assert list_registered_jobs()[0]["next_run_time"] is not None

    @pytest.mark.asyncio
    async def test_registering_before_start_only_records_the_job(self):
        register_job("purge", AsyncMock(), IntervalTrigger(minutes=30))

        assert get_scheduler() is None
        assert list_registered_jobs()[0]["next_run_time"] is None

    def test_scheduling_without_a_scheduler_raises(self):
        with pytest.raises(RuntimeError, match="scheduler has not been started"):
            _schedule("purge", AsyncMock(), IntervalTrigger(minutes=30))
