"""Dispatch of due release reminder jobs."""

import logging
from typing import Any, Optional
from uuid import UUID

from cinehub.mail import MailService
from cinehub.models import Job
from cinehub.notifications import RELEASE_REMINDER_JOB
from cinehub.registry import JobRegistry
from cinehub.repositories import MovieRepository


class ReleaseReminderDispatcher:
    """Sends the reminder email for a due job, using the movie's current data."""

    def __init__(
        self,
        movies: MovieRepository,
        mail: MailService,
        logger: Optional[logging.Logger] = None,
    ):
        self.movies = movies
        self.mail = mail
        self.logger = logger or logging.getLogger(__name__)

    async def handle_due(self, job: Job) -> None:
        """
        Handle a due reminder job.

        A movie or owner deleted since scheduling is not an error: the job is
        simply done. Mail failures propagate so the worker retries the job.
        """
        movie_id = job.payload["movieId"]
        self.logger.info(
            f"Processing release reminder for {job.payload.get('movieTitle')} ({movie_id})"
        )

        found = await self.movies.find_by_id_with_owner(UUID(str(movie_id)))
        if found is None:
            self.logger.warning(f"Movie {movie_id} not found, skipping reminder")
            return

        movie, owner = found
        if owner is None:
            self.logger.warning(f"Owner of movie {movie_id} not found, skipping reminder")
            return

        try:
            await self.mail.send_release_reminder(owner.email, movie.title, movie.release_date)
        except Exception as e:
            self.logger.error(f"Failed to send release reminder for movie {movie_id}: {e}")
            raise

        self.logger.info(f"Release reminder sent to {owner.email} for {movie.title}")

    async def handle(self, ctx: dict[str, Any], payload: dict[str, Any]) -> None:
        """Registry entrypoint; ctx carries the job being run."""
        await self.handle_due(ctx["job"])

    def register(self, registry: JobRegistry) -> None:
        registry.register(RELEASE_REMINDER_JOB, self.handle)
