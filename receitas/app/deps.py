# receitas/app/deps.py (singletons expostos como dependências)

from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import Client, create_client

from receitas.app.config import settings
from receitas.app.domain.errors import AuthError
from receitas.app.infra.db.supabase_profiles_repo import SupabaseProfileRepository
from receitas.app.infra.db.supabase_recipes_repo import SupabaseRecipeRepository
from receitas.app.services.images import ImageStore
from receitas.app.services.profiles import ProfileService
from receitas.app.services.recipes import RecipeService
from receitas.app.services.session import CurrentUser, SessionProvider

_client: Client | None = None
_images: ImageStore | None = None


def _new_client() -> Client:
    return create_client(str(settings.SUPABASE_URL), settings.SUPABASE_SERVICE_ROLE_KEY)


def get_supabase() -> Client:
    global _client
    if _client is None:
        _client = _new_client()
    return _client


def get_image_store() -> ImageStore:
    global _images
    if _images is None:
        _images = ImageStore()
    return _images


def get_session_provider(supa: Client = Depends(get_supabase)) -> SessionProvider:
    return SessionProvider(supa, login_client_factory=_new_client)


def get_recipe_service(
    supa: Client = Depends(get_supabase),
    images: ImageStore = Depends(get_image_store),
) -> RecipeService:
    return RecipeService(SupabaseRecipeRepository(supa), images)


def get_profile_service(
    supa: Client = Depends(get_supabase),
    images: ImageStore = Depends(get_image_store),
) -> ProfileService:
    return ProfileService(SupabaseProfileRepository(supa), images)


auth_scheme = HTTPBearer(auto_error=False)


def get_access_token(
    cred: HTTPAuthorizationCredentials | None = Depends(auth_scheme),
) -> str:
    if cred is None or cred.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
    return cred.credentials


async def get_current_user(
    token: str = Depends(get_access_token),
    sessions: SessionProvider = Depends(get_session_provider),
) -> CurrentUser:
    """
    Recebe Authorization: Bearer <access_token> do Supabase,
    valida no GoTrue e retorna dados mínimos do usuário.
    """
    try:
        return sessions.identify(token)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
