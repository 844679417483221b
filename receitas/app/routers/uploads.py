from __future__ import annotations

from typing import Any, Optional

from starlette.datastructures import UploadFile

from receitas.app.domain.models import ImageUpload


async def image_from_part(value: Any) -> Optional[ImageUpload]:
    """Read a multipart file part; plain fields and empty file inputs give None."""
    if not isinstance(value, UploadFile) or not value.filename:
        return None
    data = await value.read()
    return ImageUpload(filename=value.filename, content_type=value.content_type, data=data)
