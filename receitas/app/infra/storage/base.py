# receitas/app/infra/storage/base.py
"""
Abstract base class for storage providers.
This interface allows easy swapping between different storage backends (R2, S3, GCS, etc.)
"""
from __future__ import annotations

import re
import time
from abc import ABC, abstractmethod
from typing import Optional


class StorageProvider(ABC):
    """
    Abstract interface for image storage operations.

    Implementations:
    - R2StorageProvider: Cloudflare R2 (S3-compatible)
    """

    @abstractmethod
    def upload_object(
        self,
        object_key: str,
        data: bytes,
        content_type: Optional[str] = None,
        metadata: Optional[dict[str, str]] = None,
    ) -> None:
        """
        Store an object.

        Args:
            object_key: The key/path where the object will be stored
            data: Object contents
            content_type: MIME type of the content (e.g., "image/jpeg")
            metadata: Extra metadata saved with the object
        """
        pass

    @abstractmethod
    def public_url(self, object_key: str) -> str:
        """
        Return a URL that resolves to the stored object.

        Args:
            object_key: The key/path of the object

        Returns:
            A fetchable URL
        """
        pass

    @abstractmethod
    def key_from_url(self, url: str) -> Optional[str]:
        """
        Recover the object key from a URL returned by `public_url`.

        Returns:
            The key, or None if the URL does not belong to this storage
        """
        pass

    @abstractmethod
    def delete_object(self, object_key: str) -> bool:
        """
        Delete an object from storage.

        Args:
            object_key: The key/path of the object to delete

        Returns:
            True if deletion was successful
        """
        pass

    @abstractmethod
    def object_exists(self, object_key: str) -> bool:
        """
        Check if an object exists in storage.

        Args:
            object_key: The key/path of the object

        Returns:
            True if the object exists
        """
        pass

    def generate_object_key(
        self,
        owner_id: str,
        filename: str,
        prefix: Optional[str] = None,
        timestamp_ms: Optional[int] = None,
    ) -> str:
        """
        Generate an owner-scoped object key for a recipe image.

        Format: recipes/{owner_id}[/{prefix}]/{timestamp_ms}_{filename}

        Args:
            owner_id: The owner's id
            filename: Original filename
            prefix: Optional sub-folder (e.g. "memories")
            timestamp_ms: Milliseconds since epoch (defaults to now)

        Returns:
            The generated object key
        """
        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)
        safe_filename = sanitize_filename(filename)
        folder = f"recipes/{owner_id}/{prefix}" if prefix else f"recipes/{owner_id}"
        return f"{folder}/{timestamp_ms}_{safe_filename}"


def sanitize_filename(filename: str) -> str:
    """Strip path components and unsafe characters from a filename."""
    filename = filename.replace("\\", "/").rsplit("/", 1)[-1]
    filename = re.sub(r"[^a-zA-Z0-9._-]", "_", filename)
    if len(filename) > 100:
        name, dot, ext = filename.rpartition(".")
        if dot and len(ext) < 10:
            filename = name[: 99 - len(ext)] + "." + ext
        else:
            filename = filename[:100]
    return filename or "image"
