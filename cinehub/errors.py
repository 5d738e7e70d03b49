"""Exception types for the cinehub service."""


class CinehubError(Exception):
    """Base exception for all cinehub errors."""

    pass


class MovieNotFoundError(CinehubError):
    """Raised when a movie is not found."""

    def __init__(self, movie_id: str, message: str = None):
        self.movie_id = movie_id
        if message is None:
            message = f"Movie {movie_id} not found"
        super().__init__(message)


class UserNotFoundError(CinehubError):
    """Raised when a user is not found."""

    def __init__(self, user_id: str, message: str = None):
        self.user_id = user_id
        if message is None:
            message = f"User {user_id} not found"
        super().__init__(message)


class ForbiddenError(CinehubError):
    """Raised when a user acts on a resource they do not own."""

    def __init__(self, user_id: str, resource_id: str, message: str = None):
        self.user_id = user_id
        self.resource_id = resource_id
        if message is None:
            message = f"User {user_id} is not allowed to modify {resource_id}"
        super().__init__(message)


class EmailInUseError(CinehubError):
    """Raised when registering or updating to an email that already exists."""

    def __init__(self, email: str, message: str = None):
        self.email = email
        if message is None:
            message = f"Email {email} is already in use"
        super().__init__(message)


class InvalidCredentialsError(CinehubError):
    """Raised when login credentials or a bearer token are invalid."""

    pass


class InvalidMovieError(CinehubError):
    """Raised when movie data fails domain validation."""

    pass


class InvalidUserError(CinehubError):
    """Raised when user data or a password change fails domain validation."""

    pass


class JobNotFoundError(CinehubError):
    """Raised when a queued job is not found."""

    def __init__(self, job_id: str, message: str = None):
        self.job_id = job_id
        if message is None:
            message = f"Job {job_id} not found"
        super().__init__(message)


class DuplicateJobError(CinehubError):
    """Raised when a job with the same id is already queued."""

    def __init__(self, job_id: str, message: str = None):
        self.job_id = job_id
        if message is None:
            message = f"Job {job_id} already exists"
        super().__init__(message)


class MailSendError(CinehubError):
    """Raised when the mail provider rejects or fails to send an email."""

    def __init__(self, recipient: str, message: str = None):
        self.recipient = recipient
        if message is None:
            message = f"Failed to send email to {recipient}"
        super().__init__(message)


class StorageError(CinehubError):
    """Raised when an object storage operation fails."""

    def __init__(self, key: str, message: str = None):
        self.key = key
        if message is None:
            message = f"Storage operation failed for {key}"
        super().__init__(message)


class RemoteHttpError(CinehubError):
    """Raised when an HTTP request to a remote cinehub service fails."""

    def __init__(self, status_code: int, message: str, response_body: str = None):
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(f"HTTP {status_code}: {message}")
