"""Database store layer for queued notification jobs."""

import json
from datetime import datetime
from typing import Any, Optional

import asyncpg

from cinehub.errors import DuplicateJobError, JobNotFoundError
from cinehub.models import Job, JobStatus


class JobStore:
    """Database layer for job operations."""

    def __init__(self, db_pool: asyncpg.Pool):
        self.db_pool = db_pool

    async def insert_job(
        self,
        id: str,
        queue: str,
        name: str,
        payload: dict[str, Any],
        run_at: datetime,
        max_attempts: int,
        backoff_policy: dict[str, Any],
    ) -> Job:
        """Insert a new delayed job. Raises DuplicateJobError if the id is taken."""
        async with self.db_pool.acquire() as conn:
            try:
                row = await conn.fetchrow(
                    """
                    INSERT INTO jobs (
                        id, queue, name, status, payload, run_at,
                        attempts, max_attempts, backoff_policy
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
                    RETURNING *
                    """,
                    id,
                    queue,
                    name,
                    JobStatus.DELAYED.value,
                    json.dumps(payload),
                    run_at,
                    0,
                    max_attempts,
                    json.dumps(backoff_policy),
                )
            except asyncpg.UniqueViolationError as e:
                raise DuplicateJobError(id) from e

        return self._row_to_job(row)

    async def get_job(self, job_id: str) -> Job:
        """Get a job by ID."""
        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow("SELECT * FROM jobs WHERE id = $1", job_id)

        if not row:
            raise JobNotFoundError(job_id)

        return self._row_to_job(row)

    async def list_jobs(
        self,
        queue: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 50,
    ) -> list[Job]:
        """List jobs with optional filters."""
        query = "SELECT * FROM jobs WHERE 1=1"
        params = []
        param_idx = 1

        if queue:
            query += f" AND queue = ${param_idx}"
            params.append(queue)
            param_idx += 1

        if status:
            query += f" AND status = ${param_idx}"
            params.append(status)
            param_idx += 1

        query += f" ORDER BY run_at ASC LIMIT ${param_idx}"
        params.append(limit)

        async with self.db_pool.acquire() as conn:
            rows = await conn.fetch(query, *params)

        return [self._row_to_job(row) for row in rows]

    async def delete_job(self, job_id: str) -> bool:
        """Delete a job in any state. Returns True if a row was removed."""
        async with self.db_pool.acquire() as conn:
            result = await conn.execute("DELETE FROM jobs WHERE id = $1", job_id)
        # Result string looks like "DELETE 1"
        return int(result.split()[-1]) > 0 if result else False

    async def count_active_jobs(self, queue: str) -> int:
        """Count jobs currently leased by dispatchers for a queue."""
        async with self.db_pool.acquire() as conn:
            count = await conn.fetchval(
                "SELECT COUNT(*) FROM jobs WHERE queue = $1 AND status = $2",
                queue,
                JobStatus.ACTIVE.value,
            )
        return count

    async def lease_due_jobs(
        self, queue: str, limit: int, now: datetime, lease_expires_at: datetime
    ) -> list[Job]:
        """
        Atomically lease due jobs for dispatch.

        Uses FOR UPDATE SKIP LOCKED so that concurrent dispatchers never claim
        the same job. Returns the jobs that were leased, now marked active.
        """
        async with self.db_pool.acquire() as conn:
            rows = await conn.fetch(
                """
                UPDATE jobs
                SET status = $1, lease_expires_at = $2, updated_at = now()
                WHERE id IN (
                    SELECT id FROM jobs
                    WHERE queue = $3
                      AND status = $4
                      AND run_at <= $5
                    ORDER BY run_at ASC
                    LIMIT $6
                    FOR UPDATE SKIP LOCKED
                )
                RETURNING *
                """,
                JobStatus.ACTIVE.value,
                lease_expires_at,
                queue,
                JobStatus.DELAYED.value,
                now,
                limit,
            )

        return [self._row_to_job(row) for row in rows]

    async def complete_job(self, job_id: str) -> None:
        """Remove a job that was dispatched successfully."""
        async with self.db_pool.acquire() as conn:
            await conn.execute(
                "DELETE FROM jobs WHERE id = $1 AND status = $2",
                job_id,
                JobStatus.ACTIVE.value,
            )

    async def retry_job(
        self, job_id: str, error: dict[str, Any], next_run_at: datetime
    ) -> None:
        """Put a failed job back in the delayed state with incremented attempts.

        Only a job still leased is touched; a row recreated since the lease
        (e.g. by a reschedule) is left as is.
        """
        async with self.db_pool.acquire() as conn:
            await conn.execute(
                """
                UPDATE jobs
                SET status = $1,
                    attempts = attempts + 1,
                    last_error = $2,
                    run_at = $3,
                    lease_expires_at = NULL,
                    updated_at = now()
                WHERE id = $4 AND status = $5
                """,
                JobStatus.DELAYED.value,
                json.dumps(error),
                next_run_at,
                job_id,
                JobStatus.ACTIVE.value,
            )

    async def fail_job(self, job_id: str, error: dict[str, Any]) -> None:
        """Mark a job as permanently failed. Only a job still leased is touched."""
        async with self.db_pool.acquire() as conn:
            await conn.execute(
                """
                UPDATE jobs
                SET status = $1,
                    attempts = attempts + 1,
                    last_error = $2,
                    lease_expires_at = NULL,
                    updated_at = now()
                WHERE id = $3 AND status = $4
                """,
                JobStatus.FAILED.value,
                json.dumps(error),
                job_id,
                JobStatus.ACTIVE.value,
            )

    async def revert_expired_leases(self, now: datetime) -> int:
        """
        Return jobs with expired leases to the queue, or fail them.

        A lease only expires when a dispatcher died mid-job, so the attempt
        is counted. Returns the number of jobs touched.
        """
        async with self.db_pool.acquire() as conn:
            reverted = await conn.execute(
                """
                UPDATE jobs
                SET status = $1,
                    attempts = attempts + 1,
                    lease_expires_at = NULL,
                    run_at = $4,
                    last_error = jsonb_build_object(
                        'error', 'Lease expired - worker may have crashed',
                        'timestamp', $3::text
                    ),
                    updated_at = now()
                WHERE status = $2
                  AND lease_expires_at < $4
                  AND attempts + 1 < max_attempts
                """,
                JobStatus.DELAYED.value,
                JobStatus.ACTIVE.value,
                now.isoformat(),
                now,
            )
            reverted_count = int(reverted.split()[-1]) if reverted else 0

            failed = await conn.execute(
                """
                UPDATE jobs
                SET status = $1,
                    attempts = attempts + 1,
                    lease_expires_at = NULL,
                    last_error = jsonb_build_object(
                        'error', 'Lease expired after max attempts',
                        'timestamp', $3::text
                    ),
                    updated_at = now()
                WHERE status = $2
                  AND lease_expires_at < $4
                  AND attempts + 1 >= max_attempts
                """,
                JobStatus.FAILED.value,
                JobStatus.ACTIVE.value,
                now.isoformat(),
                now,
            )
            failed_count = int(failed.split()[-1]) if failed else 0

        return reverted_count + failed_count

    def _row_to_job(self, row: asyncpg.Record) -> Job:
        """Convert a database row to a Job model."""
        return Job(
            id=row["id"],
            queue=row["queue"],
            name=row["name"],
            status=JobStatus(row["status"]),
            payload=json.loads(row["payload"])
            if isinstance(row["payload"], str)
            else row["payload"],
            run_at=row["run_at"],
            attempts=row["attempts"],
            max_attempts=row["max_attempts"],
            backoff_policy=json.loads(row["backoff_policy"])
            if isinstance(row["backoff_policy"], str)
            else row["backoff_policy"],
            lease_expires_at=row["lease_expires_at"],
            last_error=json.loads(row["last_error"])
            if row["last_error"] and isinstance(row["last_error"], str)
            else row["last_error"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
