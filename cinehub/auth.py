"""
JWT authentication for the API.

Tokens are HS256-signed with the configured secret and carry the user id as
``sub`` plus the user's email.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import UUID

import jwt

from cinehub.config import CinehubConfig
from cinehub.errors import (
    EmailInUseError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from cinehub.mail import MailService
from cinehub.models import User
from cinehub.users import UserService, verify_password

JWT_ALGORITHM = "HS256"


def create_access_token(user: User, secret: str, expiration_hours: int = 24) -> str:
    """Create a signed JWT for an authenticated user."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "iat": now,
        "exp": now + timedelta(hours=expiration_hours),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def verify_access_token(token: str, secret: str) -> Optional[dict[str, Any]]:
    """Decode a JWT; returns None if it is invalid or expired."""
    try:
        return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None


class AuthService:
    """Login, registration and token validation."""

    def __init__(
        self,
        config: CinehubConfig,
        users: UserService,
        mail: MailService,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.users = users
        self.mail = mail
        self.logger = logger or logging.getLogger(__name__)
        self._background_tasks: set[asyncio.Task] = set()

    def _auth_response(self, user: User) -> dict[str, Any]:
        token = create_access_token(
            user, self.config.jwt_secret, self.config.jwt_expiration_hours
        )
        return {
            "access_token": token,
            "user": {"id": str(user.id), "name": user.name, "email": user.email},
        }

    async def login(self, email: str, password: str) -> dict[str, Any]:
        user = await self.users.find_by_email(email)
        if not user or not await verify_password(password, user.password):
            raise InvalidCredentialsError("Invalid credentials")

        self.logger.info(f"User authenticated: {user.email}")
        return self._auth_response(user)

    async def register(self, name: str, email: str, password: str) -> dict[str, Any]:
        if await self.users.find_by_email(email):
            raise EmailInUseError(email)

        user = await self.users.create(name, email, password)
        self.logger.info(f"New user registered: {user.email}")

        # Welcome email is detached; failures are only logged
        task = asyncio.create_task(self.mail.send_welcome_email(user.email, user.name))
        self._background_tasks.add(task)
        task.add_done_callback(self._welcome_email_done)

        return self._auth_response(user)

    def _welcome_email_done(self, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self.logger.error(
                f"Failed to send welcome email: {task.exception()}",
                exc_info=task.exception(),
            )

    async def validate_user(self, user_id: str) -> User:
        """Resolve the user behind a token's subject."""
        try:
            return await self.users.find_one(UUID(user_id))
        except (ValueError, UserNotFoundError) as e:
            raise InvalidCredentialsError("User not found") from e
