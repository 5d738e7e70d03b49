"""Object storage for movie images (Cloudflare R2 through the S3 API)."""

import asyncio
import logging
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from cinehub.config import CinehubConfig
from cinehub.errors import StorageError


class UploadResult:
    """Location of an uploaded object."""

    def __init__(self, url: str, key: str, bucket: str):
        self.url = url
        self.key = key
        self.bucket = bucket


class StorageService:
    """Uploads and deletes images in an S3-compatible bucket."""

    def __init__(
        self,
        config: CinehubConfig,
        s3_client: Any = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.bucket = config.r2_bucket_name
        self.public_url = config.r2_public_url
        self.endpoint_url = config.r2_endpoint_url
        self.logger = logger or logging.getLogger(__name__)

        if s3_client is None:
            s3_client = boto3.client(
                "s3",
                region_name="auto",
                endpoint_url=self.endpoint_url,
                aws_access_key_id=config.r2_access_key_id,
                aws_secret_access_key=config.r2_secret_access_key,
            )
        self.s3_client = s3_client

    def object_url(self, key: str) -> str:
        """Public URL when the bucket has a public domain, else the endpoint URL."""
        if self.public_url:
            return f"{self.public_url}/{key}"
        return f"{self.endpoint_url}/{self.bucket}/{key}"

    async def upload_image(
        self, content: bytes, key: str, content_type: str = "image/jpeg"
    ) -> UploadResult:
        # boto3 is blocking; keep it off the event loop
        try:
            await asyncio.to_thread(
                self.s3_client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            self.logger.error(f"Failed to upload file: {key}", exc_info=True)
            raise StorageError(key, f"Failed to upload {key}: {e}") from e

        self.logger.info(f"Upload successful: {key} to bucket {self.bucket}")
        return UploadResult(url=self.object_url(key), key=key, bucket=self.bucket)

    async def delete_image(self, key: str) -> None:
        try:
            await asyncio.to_thread(
                self.s3_client.delete_object, Bucket=self.bucket, Key=key
            )
        except (BotoCoreError, ClientError) as e:
            self.logger.error(f"Failed to delete file: {key}", exc_info=True)
            raise StorageError(key, f"Failed to delete {key}: {e}") from e

        self.logger.info(f"Delete successful: {key} from bucket {self.bucket}")

    async def get_signed_url(self, key: str, expires_in: int = 3600) -> str:
        """Temporary GET URL for a private object."""
        try:
            return await asyncio.to_thread(
                self.s3_client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            self.logger.error(f"Failed to sign URL for: {key}", exc_info=True)
            raise StorageError(key, f"Failed to sign URL for {key}: {e}") from e
