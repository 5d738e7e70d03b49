"""Durable delayed-job queue backed by the jobs table."""

import logging
import random
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

import asyncpg

from cinehub.errors import JobNotFoundError
from cinehub.models import Job, JobStatus, utcnow
from cinehub.store import JobStore

MAX_BACKOFF_SECONDS = 3600


class JobHandle:
    """Reference to a queued job, used to inspect or remove it."""

    def __init__(self, queue: "JobQueue", job: Job, delay: Optional[int] = None):
        self._queue = queue
        self.job = job
        self._delay = delay

    @property
    def id(self) -> str:
        return self.job.id

    @property
    def delay(self) -> int:
        """Milliseconds between job creation and its scheduled run time."""
        if self._delay is not None:
            return self._delay
        created_at = self.job.created_at or self.job.run_at
        return int((self.job.run_at - created_at).total_seconds() * 1000)

    async def get_state(self) -> Optional[JobStatus]:
        """
        Current state of the job, re-read from the store.

        Returns None once the job is gone (completed or removed).
        """
        try:
            job = await self._queue.store.get_job(self.job.id)
        except JobNotFoundError:
            return None
        self.job = job
        return job.state(self._queue.clock())

    async def remove(self) -> None:
        await self._queue.remove(self.job.id)


class JobQueue:
    """High-level API over the job store: enqueue, lookup, lease and settle jobs."""

    def __init__(
        self,
        db_pool: asyncpg.Pool,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = JobStore(db_pool)
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock

    async def enqueue(
        self,
        queue_name: str,
        job_name: str,
        payload: dict[str, Any],
        *,
        job_id: str,
        delay: int = 0,
        attempts: int = 1,
        backoff: Optional[dict[str, Any]] = None,
    ) -> JobHandle:
        """
        Enqueue a job that becomes eligible after a delay.

        Args:
            queue_name: Queue the job belongs to (e.g., "movie-emails")
            job_name: Handler name (e.g., "send-release-reminder")
            payload: Job payload as dictionary
            job_id: Caller-supplied unique job id
            delay: Milliseconds until the job may run
            attempts: Maximum attempts including the first one
            backoff: Retry backoff policy, {"type": ..., "base_seconds": ...}

        Returns:
            JobHandle: Handle to the stored job

        Raises:
            DuplicateJobError: If a job with the same id is already queued
        """
        if backoff is None:
            backoff = {"type": "exponential", "base_seconds": 10}

        run_at = self.clock() + timedelta(milliseconds=max(delay, 0))
        job = await self.store.insert_job(
            id=job_id,
            queue=queue_name,
            name=job_name,
            payload=payload,
            run_at=run_at,
            max_attempts=attempts,
            backoff_policy=backoff,
        )

        self.logger.info(f"Enqueued job {job_id} on {queue_name}, run_at {run_at.isoformat()}")
        return JobHandle(self, job, delay=max(delay, 0))

    async def get_job(self, job_id: str) -> Optional[JobHandle]:
        """Get a handle for a job, or None if it does not exist."""
        try:
            job = await self.store.get_job(job_id)
        except JobNotFoundError:
            return None
        return JobHandle(self, job)

    async def list_jobs(
        self,
        *,
        queue_name: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 50,
    ) -> list[Job]:
        """List jobs with optional filters."""
        return await self.store.list_jobs(queue=queue_name, status=status, limit=limit)

    async def remove(self, job_id: str) -> bool:
        removed = await self.store.delete_job(job_id)
        if removed:
            self.logger.info(f"Removed job {job_id}")
        return removed

    async def lease_due_jobs(
        self, queue_name: str, max_count: int, lease_duration: timedelta
    ) -> list[Job]:
        """
        Atomically lease due jobs for a queue.

        Never leases more than max_count jobs counting those already active.
        """
        now = self.clock()

        running_count = await self.store.count_active_jobs(queue_name)
        available_slots = max_count - running_count
        if available_slots <= 0:
            return []

        return await self.store.lease_due_jobs(
            queue_name, available_slots, now, now + lease_duration
        )

    async def revert_expired_leases(self) -> int:
        """
        Revert jobs with expired leases.

        This should be called periodically to recover from worker crashes.
        """
        count = await self.store.revert_expired_leases(self.clock())
        if count > 0:
            self.logger.info(f"Reverted {count} jobs with expired leases")
        return count

    async def mark_job_completed(self, job_id: str) -> None:
        await self.store.complete_job(job_id)
        self.logger.info(f"Job {job_id} completed")

    async def mark_job_retry(
        self, job_id: str, error: dict[str, Any], backoff_seconds: int
    ) -> None:
        next_run_at = self.clock() + timedelta(seconds=backoff_seconds)
        await self.store.retry_job(job_id, error, next_run_at)
        self.logger.info(f"Job {job_id} scheduled for retry at {next_run_at}")

    async def mark_job_failed(self, job_id: str, error: dict[str, Any]) -> None:
        await self.store.fail_job(job_id, error)
        self.logger.error(f"Job {job_id} marked as failed")


def calculate_backoff_with_jitter(backoff_policy: dict[str, Any], attempt: int) -> int:
    """
    Calculate backoff delay with jitter based on policy and attempt number.

    Args:
        backoff_policy: Backoff policy configuration
        attempt: Attempt number that just failed (1-indexed)

    Returns:
        Backoff delay in seconds, between 1x and 1.2x the policy delay
    """
    base_delay = calculate_backoff(backoff_policy, attempt)

    # Up to 20% extra; never shorter than the policy delay
    jitter_factor = 1.0 + random.uniform(0.0, 0.2)
    jittered_delay = int(base_delay * jitter_factor)

    return max(1, jittered_delay)


def calculate_backoff(backoff_policy: dict[str, Any], attempt: int) -> int:
    """
    Calculate backoff delay based on policy and attempt number.

    Args:
        backoff_policy: Backoff policy configuration
        attempt: Attempt number that just failed (1-indexed)

    Returns:
        Backoff delay in seconds, capped at one hour
    """
    policy_type = backoff_policy.get("type", "exponential")
    base_seconds = backoff_policy.get("base_seconds", 10)

    if policy_type == "linear":
        delay = base_seconds * attempt
    elif policy_type == "constant":
        return base_seconds
    else:
        # Exponential: base * 2^(attempt-1); unknown types fall back here
        delay = base_seconds * (2 ** (attempt - 1))
    return min(delay, MAX_BACKOFF_SECONDS)
