# receitas/app/services/images.py
"""
Image blob management: owner-scoped uploads and best-effort cleanup.
"""
from __future__ import annotations

import logging
from typing import Callable, Literal, Optional

from receitas.app.config import settings
from receitas.app.domain.errors import ImageTooLargeError, InvalidImageError, UploadError
from receitas.app.domain.models import ImageUpload
from receitas.app.infra.storage.base import StorageProvider

logger = logging.getLogger(__name__)

ImageKind = Literal["cover", "memory"]

MEMORIES_PREFIX = "memories"


def _default_provider() -> StorageProvider:
    from receitas.app.infra.storage.r2_provider import R2StorageProvider

    return R2StorageProvider()


class ImageStore:
    """
    Uploads recipe images and deletes them by URL.

    Responsibilities:
    - Reject oversized or non-image files before touching storage
    - Namespace keys by owner and upload time
    - Never let cleanup failures reach the caller
    """

    def __init__(
        self,
        provider: Optional[StorageProvider] = None,
        max_size_bytes: int = settings.MAX_IMAGE_SIZE_BYTES,
        provider_factory: Callable[[], StorageProvider] = _default_provider,
    ):
        self._provider = provider
        self._provider_factory = provider_factory
        self.max_size_bytes = max_size_bytes

    @property
    def provider(self) -> StorageProvider:
        if self._provider is None:
            self._provider = self._provider_factory()
        return self._provider

    def check(self, image: ImageUpload) -> None:
        """
        Validate an image without uploading it.

        Raises:
            ImageTooLargeError: If the image exceeds the size limit
            InvalidImageError: If the content type is not an image
        """
        if image.size_bytes > self.max_size_bytes:
            raise ImageTooLargeError(image.filename, image.size_bytes, self.max_size_bytes)
        if not image.content_type or not image.content_type.startswith("image/"):
            raise InvalidImageError(image.filename, image.content_type)

    def upload(self, owner_id: str, image: ImageUpload, kind: ImageKind = "cover") -> str:
        """
        Upload a recipe image and return its URL.

        Args:
            owner_id: Owner of the recipe
            image: The selected file
            kind: "cover" for the recipe image, "memory" for memory photos

        Returns:
            URL to store in the recipe

        Raises:
            ImageTooLargeError, InvalidImageError: Before any storage call
            UploadError: If storage fails
        """
        self.check(image)
        prefix = MEMORIES_PREFIX if kind == "memory" else None
        object_key = self.provider.generate_object_key(owner_id, image.filename, prefix=prefix)
        return self._put(object_key, owner_id, image)

    def upload_profile_photo(self, owner_id: str, image: ImageUpload) -> str:
        self.check(image)
        return self._put(f"users/{owner_id}/profile.jpg", owner_id, image)

    def _put(self, object_key: str, owner_id: str, image: ImageUpload) -> str:
        try:
            self.provider.upload_object(
                object_key,
                image.data,
                content_type=image.content_type,
                metadata={"uploadedBy": owner_id},
            )
        except UploadError:
            raise
        except Exception as error:
            logger.error("Unexpected error uploading %s: %s", object_key, error)
            raise UploadError(f"Failed to upload {object_key}: {error}") from error
        return self.provider.public_url(object_key)

    def owns_key(self, owner_id: str, object_key: str) -> bool:
        """Whether `object_key` lives under one of the owner's folders."""
        return any(
            object_key.startswith(prefix)
            for prefix in (f"recipes/{owner_id}/", f"users/{owner_id}/")
        )

    def delete_by_url(self, owner_id: str, url: Optional[str]) -> None:
        """
        Delete an image uploaded by `owner_id`. Failures are logged, never raised.

        Objects outside the owner's folders are left alone.
        """
        if not url:
            return
        try:
            object_key = self.provider.key_from_url(url)
            if object_key is None:
                logger.warning("Skipping delete of image outside storage: %s", url)
                return
            if not self.owns_key(owner_id, object_key):
                logger.warning(
                    "Skipping delete of image not owned by user=%s: key=%s", owner_id, object_key
                )
                return
            if not self.provider.object_exists(object_key):
                logger.info("Image already removed: key=%s", object_key)
                return
            if not self.provider.delete_object(object_key):
                logger.warning("Could not delete image: key=%s", object_key)
        except Exception as error:
            logger.warning("Error deleting image %s: %s", url, error)
