from __future__ import annotations

from fastapi import APIRouter, Depends, status

from api.v1.deps import get_profile_dao
from api.v1.schemas import (
    DislikedIn,
    ProfileBundle,
    ProfileIn,
    ProfileOut,
    RestrictionOut,
    RestrictionsIn,
)
from core.models.meal import Restriction
from services.auth import current_user_id
from services.db import ProfileDAO

router = APIRouter()


# ───────────────────────── read ─────────────────────────────
@router.get("", response_model=ProfileBundle)
async def get_profile(
    user_id: int = Depends(current_user_id),
    profiles: ProfileDAO = Depends(get_profile_dao),
) -> ProfileBundle:
    profile = await profiles.get_profile(user_id)
    restrictions = await profiles.get_restrictions(user_id)
    disliked = await profiles.get_disliked_ingredients(user_id)

    return ProfileBundle(
        profile=ProfileOut.model_validate(profile, from_attributes=True) if profile else None,
        dietary_restrictions=[RestrictionOut.model_validate(r, from_attributes=True) for r in restrictions],
        disliked_ingredients=[d.ingredient for d in disliked],
    )


# ───────────────────────── upsert ───────────────────────────
@router.put("", response_model=ProfileOut, status_code=status.HTTP_200_OK)
async def upsert_profile(
    body: ProfileIn,
    user_id: int = Depends(current_user_id),
    profiles: ProfileDAO = Depends(get_profile_dao),
) -> ProfileOut:
    profile = await profiles.upsert_profile(user_id, **body.model_dump())
    return ProfileOut.model_validate(profile, from_attributes=True)


# ───────────────────────── restrictions ─────────────────────
@router.put("/restrictions", response_model=list[RestrictionOut])
async def set_restrictions(
    body: RestrictionsIn,
    user_id: int = Depends(current_user_id),
    profiles: ProfileDAO = Depends(get_profile_dao),
) -> list[RestrictionOut]:
    rows = await profiles.set_restrictions(
        user_id,
        [Restriction(category=r.category, value=r.value) for r in body.restrictions],
    )
    return [RestrictionOut.model_validate(r, from_attributes=True) for r in rows]


# ───────────────────────── dislikes ─────────────────────────
@router.put("/disliked-ingredients", response_model=list[str])
async def set_disliked_ingredients(
    body: DislikedIn,
    user_id: int = Depends(current_user_id),
    profiles: ProfileDAO = Depends(get_profile_dao),
) -> list[str]:
    rows = await profiles.set_disliked_ingredients(user_id, body.ingredients)
    return [d.ingredient for d in rows]
