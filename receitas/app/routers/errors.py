from __future__ import annotations

from fastapi import HTTPException, status

from receitas.app.config import settings
from receitas.app.domain.errors import (
    AuthError,
    ImageTooLargeError,
    IndexBuildingError,
    InvalidImageError,
    RecipeAppError,
    RecipeNotFoundError,
    RecipeValidationError,
    StoreError,
    UploadError,
)


def http_error(exc: RecipeAppError) -> HTTPException:
    """Translate a domain error into the HTTP error shown to the user."""
    detail = exc.user_message
    if isinstance(exc, AuthError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)
    if isinstance(exc, IndexBuildingError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            headers={"Retry-After": str(settings.INDEX_RETRY_AFTER_SECONDS)},
        )
    if isinstance(exc, RecipeNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    if isinstance(exc, RecipeValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
    if isinstance(exc, ImageTooLargeError):
        return HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=detail)
    if isinstance(exc, InvalidImageError):
        return HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=detail)
    if isinstance(exc, (StoreError, UploadError)):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
