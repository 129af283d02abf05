from __future__ import annotations
from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

Category = Literal["lifestyle", "allergy", "religious", "medical"]

ALLOWED_RESTRICTIONS: dict[str, list[str]] = {
    "lifestyle": ["vegetarian", "vegan", "pescatarian", "flexitarian"],
    "allergy": [
        "gluten", "dairy", "nuts", "peanuts", "tree-nuts", "eggs", "shellfish",
        "fish", "soy", "sesame", "celery", "mustard", "lupin", "molluscs",
    ],
    "religious": ["halal", "kosher"],
    "medical": ["low-sodium", "low-sugar", "diabetic-friendly", "low-fodmap"],
}


class ProfileIn(BaseModel):
    calorie_target: int | None = Field(None, gt=0, le=10000)
    protein_target: float | None = Field(None, ge=0, le=1000)
    carb_target: float | None = Field(None, ge=0, le=1000)
    fat_target: float | None = Field(None, ge=0, le=1000)
    cuisine_preferences: List[str] = Field(default_factory=list, examples=[["Italian", "Thai"]])
    max_cook_time_minutes: int | None = Field(None, gt=0, le=480)

    @model_validator(mode="after")
    def _no_blank_cuisines(self) -> "ProfileIn":
        if any(not c.strip() for c in self.cuisine_preferences):
            raise ValueError("cuisine_preferences must not contain empty strings")
        return self


class ProfileOut(ProfileIn):
    user_id: int
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class RestrictionIn(BaseModel):
    category: Category
    value: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def _value_in_category(self) -> "RestrictionIn":
        if self.value not in ALLOWED_RESTRICTIONS[self.category]:
            raise ValueError(f'Invalid value "{self.value}" for category "{self.category}"')
        return self


class RestrictionOut(BaseModel):
    id: int
    category: str
    value: str

    model_config = ConfigDict(from_attributes=True)


class RestrictionsIn(BaseModel):
    restrictions: List[RestrictionIn]


class DislikedIn(BaseModel):
    ingredients: List[str] = Field(..., examples=[["cilantro", "olives"]])

    @model_validator(mode="after")
    def _lengths(self) -> "DislikedIn":
        if any(not 1 <= len(i) <= 100 for i in self.ingredients):
            raise ValueError("each ingredient must be 1-100 characters")
        return self


class ProfileBundle(BaseModel):
    profile: ProfileOut | None
    dietary_restrictions: List[RestrictionOut]
    disliked_ingredients: List[str]
