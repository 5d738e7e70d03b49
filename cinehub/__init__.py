"""CineHub: movie collection service with release reminders."""

from cinehub.config import CinehubConfig
from cinehub.ddl import JOBS_TABLE_DDL, MOVIES_TABLE_DDL, SCHEMA_DDL, USERS_TABLE_DDL
from cinehub.dispatcher import ReleaseReminderDispatcher
from cinehub.errors import (
    CinehubError,
    DuplicateJobError,
    EmailInUseError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidMovieError,
    InvalidUserError,
    JobNotFoundError,
    MailSendError,
    MovieNotFoundError,
    RemoteHttpError,
    StorageError,
    UserNotFoundError,
)
from cinehub.http_client import CinehubHttpClient
from cinehub.models import Job, JobStatus, Movie, User
from cinehub.notifications import ReleaseNotificationScheduler, release_job_id
from cinehub.queue import JobHandle, JobQueue
from cinehub.registry import JobRegistry
from cinehub.worker import run_worker_loop

__version__ = "0.1.0"

__all__ = [
    "CinehubConfig",
    "JOBS_TABLE_DDL",
    "MOVIES_TABLE_DDL",
    "SCHEMA_DDL",
    "USERS_TABLE_DDL",
    "ReleaseReminderDispatcher",
    "CinehubError",
    "DuplicateJobError",
    "EmailInUseError",
    "ForbiddenError",
    "InvalidCredentialsError",
    "InvalidMovieError",
    "InvalidUserError",
    "JobNotFoundError",
    "MailSendError",
    "MovieNotFoundError",
    "RemoteHttpError",
    "StorageError",
    "UserNotFoundError",
    "CinehubHttpClient",
    "Job",
    "JobStatus",
    "Movie",
    "User",
    "ReleaseNotificationScheduler",
    "release_job_id",
    "JobHandle",
    "JobQueue",
    "JobRegistry",
    "run_worker_loop",
]
