from datetime import UTC, datetime, timedelta

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from post_publisher.application.services import PassResult
from post_publisher.infrastructure.adapters import ChannelGatewayRegistry
from post_publisher.scheduler import PublishScheduler


@pytest.fixture
def database():
    db = MagicMock()
    db.session.return_value.__aenter__.return_value = MagicMock()
    return db


class TestPublishScheduler:
    @pytest.mark.asyncio
    async def test_tick_runs_one_pass(self, database):
        orchestrator = MagicMock()
        orchestrator.run = AsyncMock(return_value=PassResult(processed=3))
        runner = PublishScheduler(database, ChannelGatewayRegistry())

        with patch("post_publisher.scheduler.build_orchestrator", return_value=orchestrator) as build:
            processed = await runner.tick()

        assert processed == 3
        build.assert_called_once()
        orchestrator.run.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_tick_failure_is_logged_not_raised(self, database):
        orchestrator = MagicMock()
        orchestrator.run = AsyncMock(side_effect=RuntimeError("db unavailable"))
        runner = PublishScheduler(database, ChannelGatewayRegistry())

        with patch("post_publisher.scheduler.build_orchestrator", return_value=orchestrator):
            processed = await runner.tick()

        assert processed == 0

    @pytest.mark.asyncio
    async def test_start_registers_single_instance_job(self, database):
        runner = PublishScheduler(database, ChannelGatewayRegistry(), interval_seconds=30)

        runner.start()
        try:
            job = runner._scheduler.get_job("publish_scheduled_posts")
            assert job is not None
            assert job.max_instances == 1
            assert job.trigger.interval.total_seconds() == 30
            # First pass goes through the job itself, not around it
            assert job.next_run_time <= datetime.now(UTC)
        finally:
            runner.stop()

        await runner.wait_stopped()

    @pytest.mark.asyncio
    async def test_start_without_immediate_run(self, database):
        runner = PublishScheduler(database, ChannelGatewayRegistry(), interval_seconds=30)

        runner.start(run_immediately=False)
        try:
            job = runner._scheduler.get_job("publish_scheduled_posts")
            assert job.next_run_time > datetime.now(UTC) + timedelta(seconds=20)
        finally:
            runner.stop()
