"""Configuration for the cinehub service."""

import os
from typing import Optional


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"Invalid integer in {name}: {raw!r}") from e


class CinehubConfig:
    """Configuration object for the cinehub API and worker."""

    def __init__(
        self,
        db_dsn: str,
        jwt_secret: str,
        jwt_expiration_hours: int = 24,
        resend_api_key: Optional[str] = None,
        mail_from: str = "onboarding@resend.dev",
        frontend_url: str = "http://localhost:3000",
        r2_account_id: Optional[str] = None,
        r2_access_key_id: Optional[str] = None,
        r2_secret_access_key: Optional[str] = None,
        r2_bucket_name: str = "cubes-movies",
        r2_public_url: Optional[str] = None,
        worker_poll_interval_seconds: int = 5,
        worker_max_concurrent: int = 10,
        environment: str = "development",
    ):
        self.db_dsn = db_dsn
        self.jwt_secret = jwt_secret
        self.jwt_expiration_hours = jwt_expiration_hours
        self.resend_api_key = resend_api_key
        self.mail_from = mail_from
        self.frontend_url = frontend_url.rstrip("/")
        self.r2_account_id = r2_account_id
        self.r2_access_key_id = r2_access_key_id
        self.r2_secret_access_key = r2_secret_access_key
        self.r2_bucket_name = r2_bucket_name
        self.r2_public_url = r2_public_url.rstrip("/") if r2_public_url else None
        self.worker_poll_interval_seconds = worker_poll_interval_seconds
        self.worker_max_concurrent = worker_max_concurrent
        self.environment = environment

    @classmethod
    def from_env(cls) -> "CinehubConfig":
        """Create config from environment variables."""
        db_dsn = os.getenv("CINEHUB_DB_DSN")
        if not db_dsn:
            raise ValueError("CINEHUB_DB_DSN environment variable is required")

        jwt_secret = os.getenv("CINEHUB_JWT_SECRET")
        if not jwt_secret:
            raise ValueError("CINEHUB_JWT_SECRET environment variable is required")

        return cls(
            db_dsn=db_dsn,
            jwt_secret=jwt_secret,
            jwt_expiration_hours=_int_env("CINEHUB_JWT_EXPIRATION_HOURS", 24),
            resend_api_key=os.getenv("CINEHUB_RESEND_API_KEY") or None,
            mail_from=os.getenv("CINEHUB_MAIL_FROM", "onboarding@resend.dev"),
            frontend_url=os.getenv("CINEHUB_FRONTEND_URL", "http://localhost:3000"),
            r2_account_id=os.getenv("CINEHUB_R2_ACCOUNT_ID"),
            r2_access_key_id=os.getenv("CINEHUB_R2_ACCESS_KEY_ID"),
            r2_secret_access_key=os.getenv("CINEHUB_R2_SECRET_ACCESS_KEY"),
            r2_bucket_name=os.getenv("CINEHUB_R2_BUCKET_NAME", "cubes-movies"),
            r2_public_url=os.getenv("CINEHUB_R2_PUBLIC_URL") or None,
            worker_poll_interval_seconds=_int_env(
                "CINEHUB_WORKER_POLL_INTERVAL_SECONDS", 5
            ),
            worker_max_concurrent=_int_env("CINEHUB_WORKER_MAX_CONCURRENT", 10),
            environment=os.getenv("CINEHUB_ENVIRONMENT", "development"),
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def r2_endpoint_url(self) -> Optional[str]:
        """S3-compatible endpoint for the configured R2 account."""
        if not self.r2_account_id:
            return None
        return f"https://{self.r2_account_id}.r2.cloudflarestorage.com"
