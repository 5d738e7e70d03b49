"""Worker logic: lease due jobs and run their handlers."""

import asyncio
import logging
from datetime import timedelta
from typing import Optional

from cinehub.models import Job
from cinehub.queue import JobQueue, calculate_backoff_with_jitter
from cinehub.registry import JobRegistry


async def run_worker_loop(
    job_queue: JobQueue,
    registry: JobRegistry,
    queue_name: str,
    logger: logging.Logger,
    max_concurrent: int = 10,
    poll_interval_seconds: float = 5,
    lease_duration: timedelta = timedelta(minutes=10),
    lease_reaper_interval_seconds: int = 60,
    shutdown_event: Optional[asyncio.Event] = None,
) -> None:
    """
    Run the worker loop that dispatches due jobs from a queue.

    Args:
        job_queue: Job queue to lease from
        registry: Job handler registry
        queue_name: Queue to poll (e.g., "movie-emails")
        logger: Logger instance
        max_concurrent: Maximum jobs leased at once for the queue
        poll_interval_seconds: Sleep between polls when the queue is idle
        lease_duration: How long a leased job stays claimed before it is reaped
        lease_reaper_interval_seconds: Time between lease reaper runs
        shutdown_event: Optional event to signal shutdown
    """
    logger.info(f"Starting worker loop for queue {queue_name}")

    last_reaper_run = None

    while True:
        if shutdown_event and shutdown_event.is_set():
            logger.info("Shutdown signal received, exiting worker loop")
            break

        try:
            now = job_queue.clock()
            if (
                last_reaper_run is None
                or (now - last_reaper_run).total_seconds() >= lease_reaper_interval_seconds
            ):
                try:
                    await job_queue.revert_expired_leases()
                except Exception as e:
                    logger.error(f"Error in lease reaper: {str(e)}", exc_info=True)
                last_reaper_run = now

            jobs = await job_queue.lease_due_jobs(
                queue_name, max_count=max_concurrent, lease_duration=lease_duration
            )

            if jobs:
                logger.info(f"Leased {len(jobs)} jobs from {queue_name}")
                await asyncio.gather(
                    *(process_job(job_queue, registry, job, logger) for job in jobs)
                )
                continue

            logger.debug(f"No due jobs on {queue_name}")

        except Exception as e:
            logger.error(f"Error in worker loop: {str(e)}", exc_info=True)

        await _sleep_or_shutdown(poll_interval_seconds, shutdown_event)


async def process_job(
    job_queue: JobQueue, registry: JobRegistry, job: Job, logger: logging.Logger
) -> None:
    """Run one leased job and settle it: complete, retry with backoff, or fail."""
    handler = registry.get_handler(job.name)
    if not handler:
        logger.error(f"No handler found for job {job.id} (name={job.name})")
        error = {
            "error": f"No handler for job name {job.name}",
            "timestamp": job_queue.clock().isoformat(),
        }
        await job_queue.mark_job_failed(job.id, error)
        return

    attempt = job.attempts + 1
    logger.info(f"Executing job {job.id} (name={job.name}, attempt={attempt})")

    try:
        ctx = {"job": job, "logger": logger}
        await handler(ctx, job.payload)
    except Exception as e:
        logger.error(f"Job {job.id} failed: {str(e)}", exc_info=True)

        error = {
            "error": str(e),
            "type": type(e).__name__,
            "timestamp": job_queue.clock().isoformat(),
        }

        if attempt < job.max_attempts:
            backoff_seconds = calculate_backoff_with_jitter(job.backoff_policy, attempt)
            await job_queue.mark_job_retry(job.id, error, backoff_seconds)
            logger.info(
                f"Job {job.id} will retry (attempt {attempt}/{job.max_attempts}) "
                f"after {backoff_seconds}s"
            )
        else:
            await job_queue.mark_job_failed(job.id, error)
            logger.error(f"Job {job.id} failed permanently after {job.max_attempts} attempts")
        return

    await job_queue.mark_job_completed(job.id)
    logger.info(f"Job {job.id} completed successfully")


async def _sleep_or_shutdown(
    seconds: float, shutdown_event: Optional[asyncio.Event]
) -> None:
    if shutdown_event is None:
        await asyncio.sleep(seconds)
        return
    try:
        await asyncio.wait_for(shutdown_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        pass
