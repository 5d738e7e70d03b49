"""Unit tests for user accounts."""

from uuid import uuid4

import pytest

from cinehub.errors import EmailInUseError, InvalidUserError, UserNotFoundError
from cinehub.users import UserService, hash_password, verify_password

pytestmark = pytest.mark.usefixtures("fast_bcrypt")


@pytest.fixture
def user_service(user_repository):
    return UserService(user_repository)


@pytest.mark.asyncio
async def test_hash_and_verify_password():
    """Test bcrypt hashing round trip."""
    hashed = await hash_password("Secret1")

    assert hashed != "Secret1"
    assert await verify_password("Secret1", hashed)
    assert not await verify_password("Secret2", hashed)


@pytest.mark.asyncio
async def test_create_user_hashes_password(user_service, user_repository):
    """Test that stored passwords are hashed."""
    user = await user_service.create("Ana Silva", "ana@example.com", "Secret1")

    stored = user_repository.users[user.id]
    assert stored.password != "Secret1"
    assert await verify_password("Secret1", stored.password)


@pytest.mark.asyncio
async def test_create_user_duplicate_email(user_service):
    """Test that emails are unique regardless of case."""
    await user_service.create("Ana Silva", "ana@example.com", "Secret1")

    with pytest.raises(EmailInUseError):
        await user_service.create("Other Ana", "ANA@example.com", "Secret1")


@pytest.mark.asyncio
async def test_create_user_weak_password(user_service):
    """Test that weak passwords are rejected."""
    with pytest.raises(InvalidUserError, match="Password"):
        await user_service.create("Ana Silva", "ana@example.com", "secret")


@pytest.mark.asyncio
async def test_create_user_invalid_name(user_service):
    """Test that too-short names are rejected."""
    with pytest.raises(InvalidUserError):
        await user_service.create("Al", "al@example.com", "Secret1")


@pytest.mark.asyncio
async def test_find_one_missing(user_service):
    """Test lookup of an unknown user."""
    with pytest.raises(UserNotFoundError):
        await user_service.find_one(uuid4())


@pytest.mark.asyncio
async def test_update_user(user_service):
    """Test updating name and email."""
    user = await user_service.create("Ana Silva", "ana@example.com", "Secret1")

    updated = await user_service.update(user.id, name="Ana Souza", email="souza@example.com")

    assert updated.name == "Ana Souza"
    assert updated.email == "souza@example.com"


@pytest.mark.asyncio
async def test_update_user_email_taken(user_service):
    """Test that changing to another user's email fails."""
    await user_service.create("Bea Costa", "bea@example.com", "Secret1")
    user = await user_service.create("Ana Silva", "ana@example.com", "Secret1")

    with pytest.raises(EmailInUseError):
        await user_service.update(user.id, email="bea@example.com")


@pytest.mark.asyncio
async def test_update_password(user_service, user_repository):
    """Test changing the password with the current one."""
    user = await user_service.create("Ana Silva", "ana@example.com", "Secret1")

    await user_service.update_password(user.id, "Secret1", "Better2")

    assert await verify_password("Better2", user_repository.users[user.id].password)


@pytest.mark.asyncio
async def test_update_password_wrong_current(user_service):
    """Test that the current password must match."""
    user = await user_service.create("Ana Silva", "ana@example.com", "Secret1")

    with pytest.raises(InvalidUserError, match="incorrect"):
        await user_service.update_password(user.id, "Wrong1", "Better2")


@pytest.mark.asyncio
async def test_remove_user(user_service, user_repository):
    """Test deleting a user."""
    user = await user_service.create("Ana Silva", "ana@example.com", "Secret1")

    await user_service.remove(user.id)

    assert user.id not in user_repository.users
    with pytest.raises(UserNotFoundError):
        await user_service.remove(user.id)
