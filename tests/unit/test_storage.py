"""Unit tests for object storage."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from cinehub.config import CinehubConfig
from cinehub.errors import StorageError
from cinehub.storage import StorageService


def _config(public_url=None):
    return CinehubConfig(
        db_dsn="postgresql://localhost/cinehub",
        jwt_secret="secret",
        r2_account_id="acc123",
        r2_public_url=public_url,
    )


def _client_error(operation):
    return ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, operation)


@pytest.mark.asyncio
async def test_upload_image_uses_public_url():
    """Test that uploads go to the bucket and return the public URL."""
    s3_client = MagicMock()
    storage = StorageService(_config("https://cdn.cinehub.example"), s3_client=s3_client)

    result = await storage.upload_image(b"img", "movies/1/poster/1-a.jpg", "image/png")

    s3_client.put_object.assert_called_once_with(
        Bucket="cubes-movies", Key="movies/1/poster/1-a.jpg", Body=b"img", ContentType="image/png"
    )
    assert result.url == "https://cdn.cinehub.example/movies/1/poster/1-a.jpg"
    assert result.key == "movies/1/poster/1-a.jpg"
    assert result.bucket == "cubes-movies"


def test_object_url_without_public_domain():
    """Test the fallback URL through the R2 endpoint."""
    storage = StorageService(_config(), s3_client=MagicMock())

    assert storage.object_url("a.jpg") == "https://acc123.r2.cloudflarestorage.com/cubes-movies/a.jpg"


@pytest.mark.asyncio
async def test_upload_image_error():
    """Test that S3 errors become StorageError."""
    s3_client = MagicMock()
    s3_client.put_object.side_effect = _client_error("PutObject")
    storage = StorageService(_config(), s3_client=s3_client)

    with pytest.raises(StorageError) as exc_info:
        await storage.upload_image(b"img", "a.jpg")

    assert exc_info.value.key == "a.jpg"


@pytest.mark.asyncio
async def test_delete_image():
    """Test deleting an object."""
    s3_client = MagicMock()
    storage = StorageService(_config(), s3_client=s3_client)

    await storage.delete_image("a.jpg")

    s3_client.delete_object.assert_called_once_with(Bucket="cubes-movies", Key="a.jpg")


@pytest.mark.asyncio
async def test_delete_image_error():
    """Test that delete failures become StorageError."""
    s3_client = MagicMock()
    s3_client.delete_object.side_effect = _client_error("DeleteObject")
    storage = StorageService(_config(), s3_client=s3_client)

    with pytest.raises(StorageError):
        await storage.delete_image("a.jpg")


@pytest.mark.asyncio
async def test_get_signed_url():
    """Test presigning a GET URL."""
    s3_client = MagicMock()
    s3_client.generate_presigned_url.return_value = "https://signed.example/a.jpg"
    storage = StorageService(_config(), s3_client=s3_client)

    url = await storage.get_signed_url("a.jpg", expires_in=60)

    assert url == "https://signed.example/a.jpg"
    s3_client.generate_presigned_url.assert_called_once_with(
        "get_object", Params={"Bucket": "cubes-movies", "Key": "a.jpg"}, ExpiresIn=60
    )
