"""CLI entrypoint and programmatic interface for the reminder worker."""

import argparse
import asyncio
import logging
import os
import signal
import sys
from typing import Optional

import asyncpg

from cinehub.config import CinehubConfig
from cinehub.dispatcher import ReleaseReminderDispatcher
from cinehub.mail import MailService
from cinehub.notifications import RELEASE_QUEUE
from cinehub.queue import JobQueue
from cinehub.registry import JobRegistry
from cinehub.repositories import MovieRepository
from cinehub.worker import run_worker_loop


def setup_logging():
    """Setup logging configuration."""
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def create_db_pool(config: CinehubConfig):
    """Create database connection pool."""
    return await asyncpg.create_pool(config.db_dsn, min_size=2, max_size=10)


def build_registry(
    db_pool, config: CinehubConfig, logger: logging.Logger
) -> JobRegistry:
    """Registry with the release reminder dispatcher wired to its collaborators."""
    registry = JobRegistry()
    dispatcher = ReleaseReminderDispatcher(
        movies=MovieRepository(db_pool),
        mail=MailService(config, logger=logger),
        logger=logger,
    )
    dispatcher.register(registry)
    return registry


async def run_worker(
    queue_name: str = RELEASE_QUEUE,
    config: Optional[CinehubConfig] = None,
    db_pool=None,
    registry: Optional[JobRegistry] = None,
    logger: Optional[logging.Logger] = None,
    shutdown_event: Optional[asyncio.Event] = None,
):
    """
    Run the worker programmatically.

    Args:
        queue_name: Queue name to process (defaults to the release reminder queue)
        config: CinehubConfig instance. If None, will load from environment.
        db_pool: Database connection pool. If None, will create from config.
        registry: JobRegistry instance. If None, the release reminder dispatcher is registered.
        logger: Logger instance. If None, will create default logger.
        shutdown_event: Optional asyncio.Event for graceful shutdown.

    Example:
        ```python
        from cinehub.worker_main import run_worker
        import asyncio

        asyncio.run(run_worker())
        ```
    """
    if config is None:
        config = CinehubConfig.from_env()

    if logger is None:
        logger = logging.getLogger(__name__)

    if shutdown_event is None:
        shutdown_event = asyncio.Event()

    db_pool_provided = db_pool is not None
    if db_pool is None:
        db_pool = await create_db_pool(config)

    if registry is None:
        registry = build_registry(db_pool, config, logger)

    try:
        await run_worker_loop(
            job_queue=JobQueue(db_pool, logger),
            registry=registry,
            queue_name=queue_name,
            logger=logger,
            max_concurrent=config.worker_max_concurrent,
            poll_interval_seconds=config.worker_poll_interval_seconds,
            shutdown_event=shutdown_event,
        )
    finally:
        if not db_pool_provided and db_pool:
            await db_pool.close()


def main():
    """Main entrypoint for worker."""
    setup_logging()
    logger = logging.getLogger(__name__)

    parser = argparse.ArgumentParser(description="CineHub release reminder worker")
    parser.add_argument(
        "--queue",
        default=RELEASE_QUEUE,
        help=f"Queue name to process (default: {RELEASE_QUEUE})",
    )
    args = parser.parse_args()

    try:
        config = CinehubConfig.from_env()
    except Exception as e:
        logger.error(f"Failed to load config: {e}")
        sys.exit(1)

    shutdown_event = asyncio.Event()

    async def run():
        """Async main function."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, shutdown_event.set)

        try:
            logger.info(f"Starting worker for queue: {args.queue}...")
            await run_worker(
                queue_name=args.queue,
                config=config,
                logger=logger,
                shutdown_event=shutdown_event,
            )
        except Exception as e:
            logger.error(f"Fatal error in worker: {e}", exc_info=True)
            sys.exit(1)

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")


if __name__ == "__main__":
    main()
