"""Movie lifecycle use cases."""

import logging
import math
import time
from typing import Any, Optional
from uuid import UUID

from cinehub.errors import ForbiddenError, InvalidMovieError, MovieNotFoundError
from cinehub.models import Movie
from cinehub.notifications import ReleaseNotificationScheduler
from cinehub.repositories import MovieRepository
from cinehub.storage import StorageService


class MovieService:
    """
    Create, list, update and delete movies.

    Release reminders follow the movie: created with a future release date,
    rescheduled when the release date changes, cancelled on delete.
    """

    def __init__(
        self,
        movies: MovieRepository,
        scheduler: ReleaseNotificationScheduler,
        storage: Optional[StorageService] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.movies = movies
        self.scheduler = scheduler
        self.storage = storage
        self.logger = logger or logging.getLogger(__name__)

    async def create(self, user_id: UUID, data: dict[str, Any]) -> Movie:
        candidate = Movie(
            id=None,
            title=data.get("title"),
            description=data.get("description"),
            release_date=data.get("release_date"),
            duration=data.get("duration"),
            user_id=user_id,
        )
        if not candidate.is_valid():
            raise InvalidMovieError("Invalid movie data")

        movie = await self.movies.create(user_id, data)
        self.logger.info(f"Movie created: {movie.title} by user {user_id}")

        if movie.is_future_release(self.scheduler.clock()):
            await self.scheduler.schedule_release_notification(movie, user_id)

        return movie

    async def find_all(
        self,
        *,
        search: Optional[str] = None,
        min_duration: Optional[int] = None,
        max_duration: Optional[int] = None,
        start_date=None,
        end_date=None,
        genre: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "release_date",
        sort_order: str = "desc",
    ) -> dict[str, Any]:
        """List movies from every user, one page at a time."""
        skip = (page - 1) * limit
        data, total = await self.movies.find_all(
            search=search,
            min_duration=min_duration,
            max_duration=max_duration,
            start_date=start_date,
            end_date=end_date,
            genre=genre,
            skip=skip,
            take=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        return {
            "data": data,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": math.ceil(total / limit) if limit else 0,
            },
        }

    async def find_one(self, movie_id: UUID) -> Movie:
        """Any user may read any movie."""
        movie = await self.movies.find_by_id(movie_id)
        if not movie:
            raise MovieNotFoundError(str(movie_id))
        return movie

    async def _find_owned(self, movie_id: UUID, user_id: UUID) -> Movie:
        movie = await self.find_one(movie_id)
        if not movie.belongs_to_user(user_id):
            raise ForbiddenError(str(user_id), str(movie_id))
        return movie

    async def update(self, movie_id: UUID, user_id: UUID, data: dict[str, Any]) -> Movie:
        await self._find_owned(movie_id, user_id)

        updated = await self.movies.update(movie_id, data)

        if data.get("release_date") is not None:
            await self.scheduler.reschedule_release_notification(updated, user_id)

        self.logger.info(f"Movie updated: {updated.title}")
        return updated

    async def remove(self, movie_id: UUID, user_id: UUID) -> None:
        movie = await self._find_owned(movie_id, user_id)

        await self.scheduler.cancel_release_notification(movie_id)
        await self.movies.delete(movie_id)

        self.logger.info(f"Movie deleted: {movie.title}")

    async def upload_poster(
        self,
        movie_id: UUID,
        user_id: UUID,
        filename: str,
        content: bytes,
        content_type: str,
    ) -> Movie:
        return await self._upload_image(
            "poster", movie_id, user_id, filename, content, content_type
        )

    async def upload_backdrop(
        self,
        movie_id: UUID,
        user_id: UUID,
        filename: str,
        content: bytes,
        content_type: str,
    ) -> Movie:
        return await self._upload_image(
            "backdrop", movie_id, user_id, filename, content, content_type
        )

    async def _upload_image(
        self,
        kind: str,
        movie_id: UUID,
        user_id: UUID,
        filename: str,
        content: bytes,
        content_type: str,
    ) -> Movie:
        if self.storage is None:
            raise RuntimeError("Storage is not configured")

        movie = await self._find_owned(movie_id, user_id)
        url_field = f"{kind}_url"

        old_url = getattr(movie, url_field)
        if old_url:
            old_key = old_url.rsplit("/", 1)[-1]
            try:
                await self.storage.delete_image(f"movies/{movie_id}/{kind}/{old_key}")
            except Exception as e:
                self.logger.warning(f"Failed to delete old {kind} for movie {movie_id}: {e}")

        key = f"movies/{movie_id}/{kind}/{int(time.time() * 1000)}-{filename}"
        result = await self.storage.upload_image(content, key, content_type)

        updated = await self.movies.update(movie_id, {url_field: result.url})
        self.logger.info(f"{kind.capitalize()} updated for movie {movie_id}")
        return updated
