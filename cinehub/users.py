"""User account use cases."""

import asyncio
import logging
from typing import Optional
from uuid import UUID

import bcrypt

from cinehub.errors import EmailInUseError, InvalidUserError, UserNotFoundError
from cinehub.models import User
from cinehub.repositories import UserRepository

BCRYPT_ROUNDS = 10


async def hash_password(plain_password: str) -> str:
    hashed = await asyncio.to_thread(
        bcrypt.hashpw, plain_password.encode("utf-8"), bcrypt.gensalt(BCRYPT_ROUNDS)
    )
    return hashed.decode("utf-8")


async def verify_password(plain_password: str, hashed_password: str) -> bool:
    return await asyncio.to_thread(
        bcrypt.checkpw, plain_password.encode("utf-8"), hashed_password.encode("utf-8")
    )


class UserService:
    """Create, read, update and delete user accounts."""

    def __init__(
        self, users: UserRepository, logger: Optional[logging.Logger] = None
    ):
        self.users = users
        self.logger = logger or logging.getLogger(__name__)

    async def create(self, name: str, email: str, password: str) -> User:
        if await self.users.find_by_email(email):
            raise EmailInUseError(email)

        candidate = User(id=None, name=name, email=email, password="")
        if not candidate.is_valid():
            raise InvalidUserError("Invalid user data")
        if not User.is_strong_password(password):
            raise InvalidUserError(
                "Password must have at least 6 characters with an upper-case letter, "
                "a lower-case letter and a number"
            )

        user = await self.users.create(name, email, await hash_password(password))
        self.logger.info(f"User created: {user.email}")
        return user

    async def find_all(self) -> list[User]:
        return await self.users.find_all()

    async def find_one(self, user_id: UUID) -> User:
        user = await self.users.find_by_id(user_id)
        if not user:
            raise UserNotFoundError(str(user_id))
        return user

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self.users.find_by_email(email)

    async def update(
        self, user_id: UUID, name: Optional[str] = None, email: Optional[str] = None
    ) -> User:
        existing = await self.find_one(user_id)

        if email is not None and email.lower() != existing.email.lower():
            if await self.users.find_by_email(email):
                raise EmailInUseError(email)

        if name is not None:
            existing.name = name
        if email is not None:
            existing.email = email
        if not existing.is_valid():
            raise InvalidUserError("Invalid user data")

        updated = await self.users.update(user_id, name=name, email=email)
        self.logger.info(f"User updated: {updated.email}")
        return updated

    async def update_password(
        self, user_id: UUID, current_password: str, new_password: str
    ) -> None:
        user = await self.find_one(user_id)

        if not await verify_password(current_password, user.password):
            raise InvalidUserError("Current password is incorrect")

        if not User.is_strong_password(new_password):
            raise InvalidUserError("New password does not meet the strength requirements")

        await self.users.update_password(user_id, await hash_password(new_password))
        self.logger.info(f"Password updated for user: {user.email}")

    async def remove(self, user_id: UUID) -> None:
        """Delete a user; their movies are removed by the database cascade."""
        user = await self.find_one(user_id)
        await self.users.delete(user_id)
        self.logger.info(f"User deleted: {user.email}")
