"""Data models for users, movies and queued notification jobs."""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    """Notification job states."""

    WAITING = "waiting"
    DELAYED = "delayed"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class Job:
    """Represents a queued job record."""

    def __init__(
        self,
        id: str,
        queue: str,
        name: str,
        status: JobStatus,
        payload: Dict[str, Any],
        run_at: datetime,
        attempts: int,
        max_attempts: int,
        backoff_policy: Dict[str, Any],
        lease_expires_at: Optional[datetime] = None,
        last_error: Optional[Dict[str, Any]] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.id = id
        self.queue = queue
        self.name = name
        self.status = JobStatus(status) if isinstance(status, str) else status
        self.payload = payload
        self.run_at = run_at
        self.attempts = attempts
        self.max_attempts = max_attempts
        self.backoff_policy = backoff_policy
        self.lease_expires_at = lease_expires_at
        self.last_error = last_error
        self.created_at = created_at
        self.updated_at = updated_at

    def state(self, now: Optional[datetime] = None) -> JobStatus:
        """
        Observable state of the job.

        Pending jobs are stored as delayed; once their run_at has passed they
        are reported as waiting until a dispatcher claims them.
        """
        if self.status != JobStatus.DELAYED:
            return self.status
        now = now or utcnow()
        return JobStatus.WAITING if self.run_at <= now else JobStatus.DELAYED

    def to_dict(self) -> Dict[str, Any]:
        """Convert job to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "queue": self.queue,
            "name": self.name,
            "status": self.state().value,
            "payload": self.payload,
            "run_at": self.run_at.isoformat() if self.run_at else None,
            "attempts": self.attempts,
            "max_attempts": self.max_attempts,
            "backoff_policy": self.backoff_policy,
            "lease_expires_at": (
                self.lease_expires_at.isoformat() if self.lease_expires_at else None
            ),
            "last_error": self.last_error,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class User:
    """Represents a registered user."""

    def __init__(
        self,
        id: UUID,
        name: str,
        email: str,
        password: str,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.id = id
        self.name = name
        self.email = email
        self.password = password
        self.created_at = created_at
        self.updated_at = updated_at

    @staticmethod
    def is_strong_password(password: str) -> bool:
        """At least 6 characters with an upper-case letter, a lower-case letter and a digit."""
        return (
            len(password) >= 6
            and re.search(r"[A-Z]", password) is not None
            and re.search(r"[a-z]", password) is not None
            and re.search(r"[0-9]", password) is not None
        )

    def is_valid_email(self) -> bool:
        return bool(EMAIL_PATTERN.match(self.email or ""))

    def is_valid(self) -> bool:
        return (
            3 <= len(self.name or "") <= 100
            and self.is_valid_email()
            and len(self.email) <= 255
        )

    def to_dict(self) -> Dict[str, Any]:
        """Public representation; never includes the password hash."""
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class Movie:
    """Represents a movie in a user's collection."""

    def __init__(
        self,
        id: UUID,
        title: str,
        description: str,
        release_date: datetime,
        duration: int,
        user_id: UUID,
        original_title: Optional[str] = None,
        subtitle: Optional[str] = None,
        status: Optional[str] = None,
        age_rating: Optional[str] = None,
        budget: Optional[float] = None,
        revenue: Optional[float] = None,
        profit: Optional[float] = None,
        poster_url: Optional[str] = None,
        backdrop_url: Optional[str] = None,
        trailer_url: Optional[str] = None,
        genres: Optional[List[str]] = None,
        production_companies: Optional[List[str]] = None,
        spoken_languages: Optional[List[str]] = None,
        vote_average: Optional[float] = None,
        vote_count: Optional[int] = None,
        popularity: Optional[float] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.id = id
        self.title = title
        self.description = description
        self.release_date = release_date
        self.duration = duration
        self.user_id = user_id
        self.original_title = original_title
        self.subtitle = subtitle
        self.status = status
        self.age_rating = age_rating
        self.budget = budget
        self.revenue = revenue
        self.profit = profit
        self.poster_url = poster_url
        self.backdrop_url = backdrop_url
        self.trailer_url = trailer_url
        self.genres = list(genres or [])
        self.production_companies = list(production_companies or [])
        self.spoken_languages = list(spoken_languages or [])
        self.vote_average = vote_average
        self.vote_count = vote_count
        self.popularity = popularity
        self.created_at = created_at
        self.updated_at = updated_at

    def belongs_to_user(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)

    def is_future_release(self, now: Optional[datetime] = None) -> bool:
        now = now or utcnow()
        return self.release_date > now

    def is_valid(self) -> bool:
        """Minimum data a stored movie must carry."""
        return (
            bool(self.title)
            and bool(self.description)
            and len(self.description) >= 10
            and self.duration is not None
            and 0 < self.duration <= 1000
            and self.release_date is not None
            and self.user_id is not None
        )

    def to_dict(self, current_user_id=None) -> Dict[str, Any]:
        """Convert movie to dictionary; is_owner is set when a viewer is given."""
        return {
            "id": str(self.id),
            "title": self.title,
            "original_title": self.original_title,
            "subtitle": self.subtitle,
            "description": self.description,
            "release_date": self.release_date.isoformat() if self.release_date else None,
            "duration": self.duration,
            "status": self.status,
            "age_rating": self.age_rating,
            "budget": self.budget,
            "revenue": self.revenue,
            "profit": self.profit,
            "poster_url": self.poster_url,
            "backdrop_url": self.backdrop_url,
            "trailer_url": self.trailer_url,
            "genres": self.genres,
            "production_companies": self.production_companies,
            "spoken_languages": self.spoken_languages,
            "vote_average": self.vote_average,
            "vote_count": self.vote_count,
            "popularity": self.popularity,
            "user_id": str(self.user_id),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "is_owner": (
                self.belongs_to_user(current_user_id)
                if current_user_id is not None
                else None
            ),
        }
