# receitas/app/routers/recipes.py
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from receitas.app.deps import get_current_user, get_recipe_service
from receitas.app.domain.errors import RecipeAppError
from receitas.app.domain.filters import (
    ALL_DIFFICULTIES,
    ALL_OCCASIONS,
    ALL_PREPARATION_TIMES,
    RecipeFilter,
)
from receitas.app.domain.form import RecipeForm
from receitas.app.domain.models import (
    Difficulty,
    ImageUpload,
    Occasion,
    PreparationTime,
    Recipe,
    SubStep,
    Unit,
)
from receitas.app.routers.errors import http_error
from receitas.app.routers.uploads import image_from_part
from receitas.app.schemas.recipes import (
    FilterOptions,
    InstructionSectionResponse,
    RecipeCreatedResponse,
    RecipeDetailResponse,
    RecipeListResponse,
    RecipeOptionsResponse,
    RecipePayload,
    RecipeResponse,
    ingredient_item,
    instruction_item,
    memory_item,
)
from receitas.app.services.recipes import RecipeService
from receitas.app.services.session import CurrentUser

log = logging.getLogger("recipes")
router = APIRouter(prefix="/recipes", tags=["recipes"])

PAYLOAD_FIELD = "payload"
COVER_FIELD = "image"
MEMORY_IMAGE_PREFIX = "memoryImage."


def _format_timestamp(recipe: Recipe) -> Optional[str]:
    return recipe.created_at.isoformat() if recipe.created_at else None


def _recipe_response(recipe: Recipe) -> RecipeResponse:
    return RecipeResponse(**_response_fields(recipe))


def _response_fields(recipe: Recipe) -> dict[str, Any]:
    return {
        "id": recipe.id,
        "title": recipe.title,
        "description": recipe.description,
        "ingredients": [ingredient_item(i) for i in recipe.ingredients],
        "instructions": [instruction_item(i) for i in recipe.instructions],
        "imageUrl": recipe.image_url,
        "occasion": recipe.occasion,
        "difficulty": recipe.difficulty,
        "preparationTime": recipe.preparation_time,
        "secretMessage": recipe.secret_message,
        "rating": recipe.rating,
        "memories": [memory_item(m) for m in recipe.memories],
        "createdAt": _format_timestamp(recipe),
    }


def _recipe_detail(recipe: Recipe) -> RecipeDetailResponse:
    sections = [
        InstructionSectionResponse(
            subStep=section.sub_step,
            steps=[instruction.step for instruction in section.steps],
        )
        for section in recipe.instruction_sections()
    ]
    return RecipeDetailResponse(
        **_response_fields(recipe),
        sections=sections,
        showSpecialFields=recipe.is_special,
    )


async def _read_submission(
    request: Request,
) -> tuple[RecipeForm, Optional[ImageUpload], dict[int, ImageUpload]]:
    """Parse the multipart form: JSON `payload`, optional `image` and `memoryImage.{index}` files."""
    form_data = await request.form()
    raw_payload = form_data.get(PAYLOAD_FIELD)
    if not isinstance(raw_payload, str):
        raise HTTPException(status_code=400, detail="Campo 'payload' em falta")
    try:
        payload = RecipePayload.model_validate_json(raw_payload)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors())

    cover = await image_from_part(form_data.get(COVER_FIELD))
    memory_images: dict[int, ImageUpload] = {}
    for key, value in form_data.multi_items():
        if not key.startswith(MEMORY_IMAGE_PREFIX):
            continue
        try:
            index = int(key[len(MEMORY_IMAGE_PREFIX):])
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Campo inválido: {key}")
        image = await image_from_part(value)
        if image is not None:
            memory_images[index] = image
    return payload.to_form(), cover, memory_images


@router.get("/", response_model=RecipeListResponse)
async def list_recipes(
    q: str = Query(default="", max_length=200),
    occasion: Optional[str] = Query(default=None),
    difficulty: Optional[str] = Query(default=None),
    preparationTime: Optional[str] = Query(default=None),
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeListResponse:
    criteria = RecipeFilter(
        query=q,
        occasion=occasion,
        difficulty=difficulty,
        preparation_time=preparationTime,
    )
    try:
        listing = await run_in_threadpool(service.list_recipes, user.id, criteria)
    except RecipeAppError as exc:
        log.error("Failed to list recipes for user=%s: %s", user.id, exc)
        raise http_error(exc)

    return RecipeListResponse(
        items=[_recipe_response(recipe) for recipe in listing.recipes],
        total=len(listing.recipes),
        unfilteredTotal=listing.unfiltered_total,
        emptyState=listing.empty_state.value,
    )


@router.get("/options", response_model=RecipeOptionsResponse)
async def recipe_options() -> RecipeOptionsResponse:
    return RecipeOptionsResponse(
        occasions=list(Occasion),
        difficulties=list(Difficulty),
        preparationTimes=list(PreparationTime),
        subSteps=list(SubStep),
        units=list(Unit),
        filters=FilterOptions(
            occasions=[ALL_OCCASIONS, *(o.value for o in Occasion)],
            difficulties=[ALL_DIFFICULTIES, *(d.value for d in Difficulty)],
            preparationTimes=[ALL_PREPARATION_TIMES, *(p.value for p in PreparationTime)],
        ),
    )


@router.get("/{recipe_id}", response_model=RecipeDetailResponse)
async def get_recipe(
    recipe_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeDetailResponse:
    try:
        recipe = await run_in_threadpool(service.get_recipe, user.id, recipe_id)
    except RecipeAppError as exc:
        raise http_error(exc)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Receita não encontrada.")
    return _recipe_detail(recipe)


@router.post("/", response_model=RecipeCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_recipe(
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeCreatedResponse:
    form, cover, memory_images = await _read_submission(request)
    try:
        recipe_id = await run_in_threadpool(
            service.create_recipe, user.id, form, cover, memory_images
        )
    except RecipeAppError as exc:
        raise http_error(exc)
    return RecipeCreatedResponse(id=recipe_id)


@router.put("/{recipe_id}", response_model=RecipeDetailResponse)
async def update_recipe(
    recipe_id: str,
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeDetailResponse:
    form, cover, memory_images = await _read_submission(request)
    try:
        recipe = await run_in_threadpool(
            service.update_recipe, user.id, recipe_id, form, cover, memory_images
        )
    except RecipeAppError as exc:
        raise http_error(exc)
    return _recipe_detail(recipe)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(
    recipe_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
) -> Response:
    try:
        await run_in_threadpool(service.delete_recipe, user.id, recipe_id)
    except RecipeAppError as exc:
        raise http_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
