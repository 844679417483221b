# receitas/app/infra/storage/r2_provider.py
"""
Cloudflare R2 storage provider implementation.
R2 is S3-compatible, so we use boto3 with custom endpoint.
"""
from __future__ import annotations

import logging
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from receitas.app.config import settings
from receitas.app.domain.errors import UploadError
from receitas.app.infra.storage.base import StorageProvider

logger = logging.getLogger(__name__)


class StorageConfigurationError(UploadError):
    pass


class R2StorageProvider(StorageProvider):
    """
    Cloudflare R2 storage provider using boto3 (S3-compatible).

    Settings used (env or .env):
    - R2_ACCOUNT_ID: Cloudflare account ID
    - R2_ACCESS_KEY_ID: R2 access key ID
    - R2_SECRET_ACCESS_KEY: R2 secret access key
    - R2_BUCKET_NAME: Name of the R2 bucket
    - R2_PUBLIC_URL: (Optional) Public URL for the bucket
    """

    def __init__(
        self,
        account_id: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        bucket_name: Optional[str] = None,
        public_base_url: Optional[str] = None,
        client=None,
    ):
        self.account_id = account_id or settings.R2_ACCOUNT_ID
        self.access_key_id = access_key_id or settings.R2_ACCESS_KEY_ID
        self.secret_access_key = secret_access_key or settings.R2_SECRET_ACCESS_KEY
        self.bucket_name = bucket_name or settings.R2_BUCKET_NAME
        self.endpoint_url = f"https://{self.account_id}.r2.cloudflarestorage.com"
        self.public_base_url = (
            public_base_url or settings.R2_PUBLIC_URL or f"{self.endpoint_url}/{self.bucket_name}"
        ).rstrip("/")

        if client is not None:
            self._client = client
            return

        if not all([self.account_id, self.access_key_id, self.secret_access_key, self.bucket_name]):
            raise StorageConfigurationError(
                "Missing R2 configuration. Required: R2_ACCOUNT_ID, R2_ACCESS_KEY_ID, "
                "R2_SECRET_ACCESS_KEY, R2_BUCKET_NAME"
            )

        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=Config(
                signature_version="s3v4",
                retries={"max_attempts": 3, "mode": "adaptive"},
            ),
            region_name="auto",  # R2 uses 'auto' as region
        )

        logger.info(
            "R2StorageProvider initialized: bucket=%s, endpoint=%s",
            self.bucket_name,
            self.endpoint_url,
        )

    def upload_object(
        self,
        object_key: str,
        data: bytes,
        content_type: Optional[str] = None,
        metadata: Optional[dict[str, str]] = None,
    ) -> None:
        """Upload bytes to R2."""
        params = {
            "Bucket": self.bucket_name,
            "Key": object_key,
            "Body": data,
        }
        if content_type:
            params["ContentType"] = content_type
        if metadata:
            params["Metadata"] = metadata

        try:
            self._client.put_object(**params)
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to upload to R2: key=%s, error=%s", object_key, e)
            raise UploadError(f"Failed to upload {object_key}: {e}") from e

        logger.info("Uploaded to R2: key=%s, size=%d bytes", object_key, len(data))

    def public_url(self, object_key: str) -> str:
        return f"{self.public_base_url}/{object_key}"

    def key_from_url(self, url: str) -> Optional[str]:
        prefix = f"{self.public_base_url}/"
        if not url.startswith(prefix):
            return None
        key = url[len(prefix):].split("?", 1)[0]
        return key or None

    def delete_object(self, object_key: str) -> bool:
        """Delete an object from R2."""
        try:
            self._client.delete_object(
                Bucket=self.bucket_name,
                Key=object_key,
            )
            logger.info("Deleted object from R2: key=%s", object_key)
            return True

        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to delete object from R2: %s", e)
            return False

    def object_exists(self, object_key: str) -> bool:
        """Check if an object exists in R2."""
        try:
            self._client.head_object(
                Bucket=self.bucket_name,
                Key=object_key,
            )
            return True
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "404" or error_code == "NoSuchKey":
                return False
            logger.error("Error checking object existence: %s", e)
            raise UploadError(f"Failed to check object existence: {e}") from e
