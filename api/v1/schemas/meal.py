from __future__ import annotations
from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

from core.models.meal import Ingredient


class OverrideIn(BaseModel):
    cuisine: str | None = Field(None, min_length=1)
    max_cook_time_minutes: int | None = Field(None, gt=0, le=480)


class GenerateIn(BaseModel):
    preferences_override: OverrideIn | None = None


class MealOut(BaseModel):
    id: int
    title: str
    description: str | None = None
    ingredients: List[Ingredient]
    instructions: List[str]
    calories: float | None = None
    protein_g: float | None = None
    carbs_g: float | None = None
    fat_g: float | None = None
    cook_time_minutes: float | None = None
    cuisine: str | None = None
    status: str
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class GenerateOut(BaseModel):
    meal: MealOut
    warnings: List[str] = []


class MealList(BaseModel):
    meals: List[MealOut]
    total: int


class MealStatusIn(BaseModel):
    status: Literal["accepted", "rejected"]


class MealEnvelope(BaseModel):
    meal: MealOut
