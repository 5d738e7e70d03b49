"""Unit tests for data models."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from cinehub.models import Job, JobStatus, Movie, User

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def _job(**overrides):
    fields = {
        "id": "movie-release-1",
        "queue": "movie-emails",
        "name": "send-release-reminder",
        "status": JobStatus.DELAYED,
        "payload": {"movieId": "1"},
        "run_at": NOW + timedelta(minutes=3),
        "attempts": 0,
        "max_attempts": 3,
        "backoff_policy": {"type": "exponential", "base_seconds": 60},
        "created_at": NOW,
        "updated_at": NOW,
    }
    fields.update(overrides)
    return Job(**fields)


def test_job_status_from_string():
    """Test that a stored status string becomes a JobStatus."""
    assert _job(status="active").status == JobStatus.ACTIVE


def test_job_state_delayed_before_run_at():
    """Test that a pending job is delayed until its run time."""
    assert _job().state(NOW) == JobStatus.DELAYED


def test_job_state_waiting_once_due():
    """Test that a due unclaimed job reports waiting."""
    job = _job()
    assert job.state(NOW + timedelta(minutes=3)) == JobStatus.WAITING
    assert job.state(NOW + timedelta(hours=1)) == JobStatus.WAITING


def test_job_state_passes_through_other_statuses():
    """Test that active and failed jobs report their stored status."""
    assert _job(status=JobStatus.ACTIVE).state(NOW) == JobStatus.ACTIVE
    assert _job(status=JobStatus.FAILED).state(NOW) == JobStatus.FAILED


def test_job_to_dict():
    """Test job serialization."""
    data = _job(run_at=NOW - timedelta(seconds=1)).to_dict()

    assert data["id"] == "movie-release-1"
    assert data["status"] == "waiting"
    assert data["max_attempts"] == 3
    assert data["lease_expires_at"] is None
    assert data["created_at"] == NOW.isoformat()


def test_user_strong_password():
    """Test password strength rules."""
    assert User.is_strong_password("Secret1")
    assert not User.is_strong_password("Sec1")
    assert not User.is_strong_password("secret1")
    assert not User.is_strong_password("SECRET1")
    assert not User.is_strong_password("Secrets")


def test_user_validation():
    """Test user name and email validation."""
    assert User(uuid4(), "Ana", "ana@example.com", "hash").is_valid()
    assert not User(uuid4(), "Al", "al@example.com", "hash").is_valid()
    assert not User(uuid4(), "Ana", "not-an-email", "hash").is_valid()


def test_user_to_dict_hides_password():
    """Test that the password hash is never serialized."""
    data = User(uuid4(), "Ana", "ana@example.com", "hash").to_dict()

    assert "password" not in data
    assert data["email"] == "ana@example.com"


def _movie(**overrides):
    fields = {
        "id": uuid4(),
        "title": "Arrival",
        "description": "Linguist meets visitors from another world.",
        "release_date": NOW + timedelta(days=1),
        "duration": 116,
        "user_id": uuid4(),
    }
    fields.update(overrides)
    return Movie(**fields)


def test_movie_belongs_to_user_compares_as_strings():
    """Test ownership checks accept UUIDs or strings."""
    movie = _movie()

    assert movie.belongs_to_user(movie.user_id)
    assert movie.belongs_to_user(str(movie.user_id))
    assert not movie.belongs_to_user(uuid4())


def test_movie_is_future_release():
    """Test release date comparison against a reference time."""
    movie = _movie()

    assert movie.is_future_release(NOW)
    assert not movie.is_future_release(NOW + timedelta(days=1))
    assert not movie.is_future_release(NOW + timedelta(days=2))


def test_movie_validation():
    """Test movie domain validation."""
    assert _movie().is_valid()
    assert not _movie(title="").is_valid()
    assert not _movie(description="Too short").is_valid()
    assert not _movie(duration=0).is_valid()
    assert not _movie(duration=1001).is_valid()


def test_movie_list_fields_default_to_empty():
    """Test that list fields are never None."""
    movie = _movie()

    assert movie.genres == []
    assert movie.production_companies == []
    assert movie.spoken_languages == []


def test_movie_to_dict_owner_flag():
    """Test that is_owner reflects the viewer."""
    movie = _movie()

    assert movie.to_dict()["is_owner"] is None
    assert movie.to_dict(current_user_id=movie.user_id)["is_owner"] is True
    assert movie.to_dict(current_user_id=uuid4())["is_owner"] is False
    assert movie.to_dict()["release_date"] == movie.release_date.isoformat()
