"""FastAPI application wiring for the cinehub API."""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import asyncpg
from fastapi import FastAPI

from cinehub import __version__
from cinehub.auth import AuthService
from cinehub.config import CinehubConfig
from cinehub.fastapi_router import (
    create_auth_router,
    create_current_user_dependency,
    create_health_router,
    create_movies_router,
    create_users_router,
)
from cinehub.mail import MailService
from cinehub.movies import MovieService
from cinehub.notifications import ReleaseNotificationScheduler
from cinehub.queue import JobQueue
from cinehub.repositories import MovieRepository, UserRepository
from cinehub.storage import StorageService
from cinehub.users import UserService

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Services shared by all requests, built over one connection pool."""

    def __init__(self, config: CinehubConfig, db_pool: asyncpg.Pool):
        self.config = config
        self.db_pool = db_pool
        self.mail = MailService(config)
        self.storage = StorageService(config) if config.r2_account_id else None
        self.job_queue = JobQueue(db_pool)
        self.scheduler = ReleaseNotificationScheduler(self.job_queue)
        self.users = UserService(UserRepository(db_pool))
        self.auth = AuthService(config, self.users, self.mail)
        self.movies = MovieService(MovieRepository(db_pool), self.scheduler, self.storage)


def create_app(config: Optional[CinehubConfig] = None) -> FastAPI:
    """
    Create the FastAPI application.

    The database pool is opened on startup and closed on shutdown; the
    routers reach services through the container stored on app.state.
    """
    config = config or CinehubConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db_pool = await asyncpg.create_pool(config.db_dsn, min_size=2, max_size=10)
        app.state.services = ServiceContainer(config, db_pool)
        logger.info("Database pool initialized")
        try:
            yield
        finally:
            await db_pool.close()
            logger.info("Database pool closed")

    app = FastAPI(
        title="CineHub API",
        description="Movie collection management with release reminders",
        version=__version__,
        lifespan=lifespan,
    )

    def services() -> ServiceContainer:
        return app.state.services

    get_current_user = create_current_user_dependency(
        lambda: services().auth, config.jwt_secret
    )

    app.include_router(create_auth_router(lambda: services().auth))
    app.include_router(
        create_users_router(lambda: services().users, get_current_user)
    )
    app.include_router(
        create_movies_router(lambda: services().movies, get_current_user)
    )
    app.include_router(
        create_health_router(
            lambda: services().db_pool, environment=config.environment, version=__version__
        )
    )

    return app


def main():
    """Run the API with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(
        create_app(),
        host=os.getenv("CINEHUB_HOST", "0.0.0.0"),
        port=int(os.getenv("CINEHUB_PORT", "3000")),
    )


if __name__ == "__main__":
    main()
