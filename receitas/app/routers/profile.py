from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from receitas.app.deps import get_current_user, get_profile_service, get_recipe_service
from receitas.app.domain.errors import RecipeAppError
from receitas.app.domain.models import UserProfile
from receitas.app.routers.errors import http_error
from receitas.app.routers.uploads import image_from_part
from receitas.app.schemas.profile import ProfileResponse
from receitas.app.services.profiles import ProfileService
from receitas.app.services.recipes import RecipeService
from receitas.app.services.session import CurrentUser

router = APIRouter(prefix="/profile", tags=["profile"])


def _profile_response(profile: UserProfile) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        displayName=profile.display_name,
        email=profile.email,
        photoURL=profile.photo_url,
        bio=profile.bio,
        favoriteRecipes=profile.favorite_recipes,
    )


@router.get("/", response_model=ProfileResponse)
async def get_profile(
    user: CurrentUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    try:
        profile = await run_in_threadpool(profiles.get_or_create, user)
    except RecipeAppError as exc:
        raise http_error(exc)
    return _profile_response(profile)


@router.patch("/", response_model=ProfileResponse)
async def update_profile(
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    form_data = await request.form()
    display_name = form_data.get("displayName")
    bio = form_data.get("bio")
    photo = await image_from_part(form_data.get("photo"))
    try:
        profile = await run_in_threadpool(
            profiles.update,
            user,
            display_name if isinstance(display_name, str) else None,
            bio if isinstance(bio, str) else None,
            photo,
        )
    except RecipeAppError as exc:
        raise http_error(exc)
    return _profile_response(profile)


@router.put("/favorites/{recipe_id}", response_model=ProfileResponse)
async def add_favorite(
    recipe_id: str,
    user: CurrentUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
    recipes: RecipeService = Depends(get_recipe_service),
) -> ProfileResponse:
    try:
        recipe = await run_in_threadpool(recipes.get_recipe, user.id, recipe_id)
        if recipe is None:
            raise HTTPException(status_code=404, detail="Receita não encontrada.")
        profile = await run_in_threadpool(profiles.add_favorite, user, recipe_id)
    except RecipeAppError as exc:
        raise http_error(exc)
    return _profile_response(profile)


@router.delete("/favorites/{recipe_id}", response_model=ProfileResponse)
async def remove_favorite(
    recipe_id: str,
    user: CurrentUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    try:
        profile = await run_in_threadpool(profiles.remove_favorite, user, recipe_id)
    except RecipeAppError as exc:
        raise http_error(exc)
    return _profile_response(profile)
