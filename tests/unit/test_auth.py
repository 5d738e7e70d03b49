"""Unit tests for JWT authentication."""

import asyncio
import logging
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import jwt
import pytest

from cinehub.auth import AuthService, create_access_token, verify_access_token
from cinehub.config import CinehubConfig
from cinehub.errors import EmailInUseError, InvalidCredentialsError
from cinehub.models import User
from cinehub.users import UserService

pytestmark = pytest.mark.usefixtures("fast_bcrypt")

SECRET = "test-secret"


@pytest.fixture
def mail():
    service = MagicMock()
    service.send_welcome_email = AsyncMock()
    return service


@pytest.fixture
def auth_service(user_repository, mail):
    config = CinehubConfig(db_dsn="postgresql://localhost/cinehub", jwt_secret=SECRET)
    return AuthService(config, UserService(user_repository), mail)


async def _drain(auth_service):
    await asyncio.gather(*list(auth_service._background_tasks), return_exceptions=True)


def test_access_token_round_trip():
    """Test that a token carries the user id and email."""
    user = User(uuid4(), "Ana Silva", "ana@example.com", "hash")

    claims = verify_access_token(create_access_token(user, SECRET), SECRET)

    assert claims["sub"] == str(user.id)
    assert claims["email"] == "ana@example.com"
    assert claims["exp"] - claims["iat"] == int(timedelta(hours=24).total_seconds())


def test_access_token_wrong_secret():
    """Test that tokens signed with another secret are rejected."""
    user = User(uuid4(), "Ana Silva", "ana@example.com", "hash")

    assert verify_access_token(create_access_token(user, "other"), SECRET) is None


def test_access_token_expired():
    """Test that expired tokens are rejected."""
    user = User(uuid4(), "Ana Silva", "ana@example.com", "hash")

    token = create_access_token(user, SECRET, expiration_hours=-1)

    assert verify_access_token(token, SECRET) is None
    assert verify_access_token("not-a-token", SECRET) is None


@pytest.mark.asyncio
async def test_register_returns_token_and_sends_welcome(auth_service, mail):
    """Test registration issues a token and emails the user."""
    response = await auth_service.register("Ana Silva", "ana@example.com", "Secret1")
    await _drain(auth_service)

    assert response["user"]["email"] == "ana@example.com"
    claims = jwt.decode(response["access_token"], SECRET, algorithms=["HS256"])
    assert claims["sub"] == response["user"]["id"]
    mail.send_welcome_email.assert_awaited_once_with("ana@example.com", "Ana Silva")


@pytest.mark.asyncio
async def test_register_survives_welcome_email_failure(auth_service, mail, caplog):
    """Test that a failing welcome email is logged only."""
    mail.send_welcome_email.side_effect = RuntimeError("mail down")

    with caplog.at_level(logging.ERROR):
        response = await auth_service.register("Ana Silva", "ana@example.com", "Secret1")
        await _drain(auth_service)
        await asyncio.sleep(0)

    assert response["access_token"]
    assert "Failed to send welcome email" in caplog.text


@pytest.mark.asyncio
async def test_register_duplicate_email(auth_service):
    """Test that an existing email cannot register again."""
    await auth_service.register("Ana Silva", "ana@example.com", "Secret1")
    await _drain(auth_service)

    with pytest.raises(EmailInUseError):
        await auth_service.register("Ana Silva", "ana@example.com", "Secret1")


@pytest.mark.asyncio
async def test_login(auth_service):
    """Test login with valid and invalid credentials."""
    await auth_service.register("Ana Silva", "ana@example.com", "Secret1")
    await _drain(auth_service)

    response = await auth_service.login("ana@example.com", "Secret1")
    assert response["user"]["name"] == "Ana Silva"

    with pytest.raises(InvalidCredentialsError):
        await auth_service.login("ana@example.com", "Wrong1")
    with pytest.raises(InvalidCredentialsError):
        await auth_service.login("nobody@example.com", "Secret1")


@pytest.mark.asyncio
async def test_validate_user(auth_service):
    """Test resolving a token subject to a user."""
    response = await auth_service.register("Ana Silva", "ana@example.com", "Secret1")
    await _drain(auth_service)

    user = await auth_service.validate_user(response["user"]["id"])
    assert user.email == "ana@example.com"

    with pytest.raises(InvalidCredentialsError):
        await auth_service.validate_user(str(uuid4()))
    with pytest.raises(InvalidCredentialsError):
        await auth_service.validate_user("not-a-uuid")
