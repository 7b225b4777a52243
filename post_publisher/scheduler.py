"""
Periodic in-process trigger.

Runs one publishing pass every `scheduler_interval_seconds`, for
deployments without an external cron calling the HTTP trigger.

    python -m post_publisher.scheduler
"""

import asyncio
import signal
from datetime import UTC, datetime

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .config import settings
from .infrastructure.adapters import ChannelGatewayRegistry
from .infrastructure.logging import configure_logging, publishing_run, set_correlation_id
from .infrastructure.persistence.database import Database
from .presentation.dependencies import build_orchestrator

logger = structlog.get_logger()


class PublishScheduler:
    """Drives publishing passes from an APScheduler interval job."""

    def __init__(
        self,
        database: Database,
        registry: ChannelGatewayRegistry,
        interval_seconds: int = 60,
    ) -> None:
        self._database = database
        self._registry = registry
        self._interval = interval_seconds
        self._scheduler = AsyncIOScheduler()
        self._stopped = asyncio.Event()

    async def tick(self) -> int:
        """Run one pass; errors are logged and retried on the next tick."""
        with publishing_run("scheduler") as run_id:
            set_correlation_id(run_id)
            try:
                async with self._database.session() as session:
                    result = await build_orchestrator(session, self._registry).run()
            except Exception as e:
                logger.warning("Publishing pass failed, will retry next interval", error=str(e))
                return 0
        return result.processed

    def start(self, run_immediately: bool = True) -> None:
        """Schedule the interval job; the first pass runs at once unless told otherwise."""
        # next_run_time=None adds the job paused
        first_run = {"next_run_time": datetime.now(UTC)} if run_immediately else {}
        self._scheduler.add_job(
            self.tick,
            "interval",
            seconds=self._interval,
            id="publish_scheduled_posts",
            max_instances=1,  # Prevent overlapping passes, the first one included
            **first_run,
        )
        self._scheduler.start()
        logger.info("Scheduler started", interval_seconds=self._interval)

    def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._stopped.set()

    async def wait_stopped(self) -> None:
        await self._stopped.wait()


async def main() -> None:
    """Main entry point for the scheduler process."""
    configure_logging(settings.service_name, settings.log_level)
    logger.info("Starting scheduler", service=settings.service_name)

    database = Database(settings.database_url, application_name=settings.service_name)
    runner = PublishScheduler(
        database,
        ChannelGatewayRegistry.from_settings(settings),
        interval_seconds=settings.scheduler_interval_seconds,
    )

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, runner.stop)

    runner.start()

    try:
        await runner.wait_stopped()
    finally:
        await database.close()
        logger.info("Scheduler shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
