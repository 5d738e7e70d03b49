"""Release reminder scheduling for movies.

Turns movie lifecycle events into queue operations. Every job is keyed by the
movie id (``movie-release-<movie id>``). None of the public coroutines raise;
queue errors are logged.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from cinehub.models import Movie, utcnow

RELEASE_QUEUE = "movie-emails"
RELEASE_REMINDER_JOB = "send-release-reminder"
RELEASE_REMINDER_ATTEMPTS = 3
RELEASE_REMINDER_BACKOFF = {"type": "exponential", "base_seconds": 60}


def release_job_id(movie_id) -> str:
    """Deterministic queue job id for a movie's release reminder."""
    return f"movie-release-{movie_id}"


class ReleaseNotificationScheduler:
    """Schedules, cancels and reschedules release reminder jobs."""

    def __init__(
        self,
        queue: Any,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.queue = queue
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock

    async def schedule_release_notification(self, movie: Movie, user_id) -> None:
        """Enqueue a reminder that fires at the movie's release date."""
        try:
            now = self.clock()
            delay = int((movie.release_date - now).total_seconds() * 1000)

            if delay <= 0:
                self.logger.warning(
                    f"Movie {movie.title} ({movie.id}) releases in the past, "
                    f"no reminder scheduled"
                )
                return

            await self.queue.enqueue(
                RELEASE_QUEUE,
                RELEASE_REMINDER_JOB,
                {
                    "movieId": str(movie.id),
                    "userId": str(user_id),
                    "movieTitle": movie.title,
                    "releaseDate": movie.release_date.isoformat(),
                },
                job_id=release_job_id(movie.id),
                delay=delay,
                attempts=RELEASE_REMINDER_ATTEMPTS,
                backoff=dict(RELEASE_REMINDER_BACKOFF),
            )

            self.logger.info(
                f"Release reminder scheduled for {movie.title} at "
                f"{movie.release_date.isoformat()} (delay: {round(delay / 1000 / 60)} minutes)"
            )
        except Exception as e:
            self.logger.error(
                f"Failed to schedule release reminder for movie {movie.id}: {e}",
                exc_info=True,
            )

    async def cancel_release_notification(self, movie_id) -> None:
        """Remove the pending reminder for a movie, if there is one."""
        try:
            job = await self.queue.get_job(release_job_id(movie_id))
            if job is None:
                return

            await job.remove()
            self.logger.info(f"Release reminder cancelled for movie {movie_id}")
        except Exception as e:
            self.logger.error(
                f"Failed to cancel release reminder for movie {movie_id}: {e}",
                exc_info=True,
            )

    async def reschedule_release_notification(self, movie: Movie, user_id) -> None:
        """Drop the existing reminder and schedule a fresh one if still upcoming."""
        await self.cancel_release_notification(movie.id)

        if movie.is_future_release(self.clock()):
            await self.schedule_release_notification(movie, user_id)
