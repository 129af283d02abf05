# api/v1/meals.py
from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.v1.deps import get_meal_dao, get_meal_generator, get_profile_dao
from api.v1.schemas import GenerateIn, GenerateOut, MealEnvelope, MealList, MealOut, MealStatusIn
from core.errors import MealGenerationFailed, ModelResponseError
from core.meal_generator import MealGenerator
from core.models.meal import PreferencesOverride
from core.prompt_builder import build_prompt
from services.auth import current_user_id
from services.db import MealDAO, ProfileDAO, load_generation_request

_LOG = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/generate",
    response_model=GenerateOut,
    status_code=status.HTTP_201_CREATED,
    summary="Generate, validate and store one AI meal suggestion",
)
async def generate_meal(
    body: GenerateIn | None = None,
    user_id: int = Depends(current_user_id),
    profiles: ProfileDAO = Depends(get_profile_dao),
    meals: MealDAO = Depends(get_meal_dao),
    generator: MealGenerator = Depends(get_meal_generator),
) -> GenerateOut:
    override = None
    if body and body.preferences_override:
        override = PreferencesOverride(**body.preferences_override.model_dump())

    request = await load_generation_request(profiles, meals, user_id, override)
    if request is None:
        raise HTTPException(400, "Profile must be configured before generating meals")

    try:
        result = await generator.generate(user_id, request)
    except MealGenerationFailed as exc:
        await meals.log_failure(user_id, "validation", str(exc), build_prompt(request))
        raise HTTPException(status.HTTP_502_BAD_GATEWAY, str(exc)) from exc
    except ModelResponseError as exc:
        await meals.log_failure(user_id, "model", str(exc), build_prompt(request))
        raise HTTPException(
            status.HTTP_503_SERVICE_UNAVAILABLE, f"Meal generation unavailable: {exc}"
        ) from exc

    saved = await meals.create_meal(user_id, result.meal)
    return GenerateOut(
        meal=MealOut.model_validate(saved, from_attributes=True),
        warnings=result.warnings,
    )


@router.get("", response_model=MealList, summary="List the caller's meals, newest first")
async def list_meals(
    status_: Literal["pending", "accepted", "rejected"] | None = Query(None, alias="status"),
    cuisine: str | None = None,
    limit: int = Query(20, gt=0, le=100),
    offset: int = Query(0, ge=0),
    user_id: int = Depends(current_user_id),
    meals: MealDAO = Depends(get_meal_dao),
) -> MealList:
    rows = await meals.list_for_user(user_id, status_, cuisine, limit, offset)
    total = await meals.count_for_user(user_id, status_)
    return MealList(
        meals=[MealOut.model_validate(m, from_attributes=True) for m in rows],
        total=total,
    )


@router.patch(
    "/{meal_id}",
    response_model=MealEnvelope,
    summary="Accept or reject a generated meal",
)
async def update_meal_status(
    meal_id: int,
    body: MealStatusIn,
    user_id: int = Depends(current_user_id),
    meals: MealDAO = Depends(get_meal_dao),
) -> MealEnvelope:
    if meal_id <= 0:
        raise HTTPException(status_code=400, detail="Invalid meal ID")

    meal = await meals.update_status(meal_id, user_id, body.status)
    if meal is None:
        raise HTTPException(status_code=404, detail="Meal not found")
    return MealEnvelope(meal=MealOut.model_validate(meal, from_attributes=True))
