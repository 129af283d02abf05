from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field


class PreferencesOverride(BaseModel):
    """Per-request values that beat the stored profile for one generation."""

    cuisine: str | None = None
    max_cook_time_minutes: int | None = None

    model_config = ConfigDict(frozen=True)


class Restriction(BaseModel):
    category: str   # lifestyle / allergy / religious / medical
    value: str

    model_config = ConfigDict(frozen=True)


class GenerationRequest(BaseModel):
    calorie_target: float | None = None
    protein_target: float | None = None
    carb_target: float | None = None
    fat_target: float | None = None
    cuisine_preferences: tuple[str, ...] = ()
    max_cook_time_minutes: int | None = None
    restrictions: tuple[Restriction, ...] = ()
    disliked_ingredients: tuple[str, ...] = ()
    recent_meal_titles: tuple[str, ...] = ()
    preferences_override: PreferencesOverride | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def override_cuisine(self) -> str | None:
        if self.preferences_override and self.preferences_override.cuisine:
            return self.preferences_override.cuisine
        return None

    @property
    def effective_max_cook_time(self) -> int | None:
        if (
            self.preferences_override
            and self.preferences_override.max_cook_time_minutes is not None
        ):
            return self.preferences_override.max_cook_time_minutes
        return self.max_cook_time_minutes


class Ingredient(BaseModel):
    name: str
    quantity: float = Field(ge=0)
    unit: str


class CandidateMeal(BaseModel):
    """Structured answer of the `create_meal` function call."""

    title: str
    description: str
    ingredients: list[Ingredient]
    instructions: list[str]
    calories: float = Field(ge=0)
    protein_g: float = Field(ge=0)
    carbs_g: float = Field(ge=0)
    fat_g: float = Field(ge=0)
    cook_time_minutes: float = Field(ge=0)
    cuisine: str


@dataclass(frozen=True)
class ValidationVerdict:
    valid: bool
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class GenerationResult(BaseModel):
    meal: CandidateMeal
    warnings: list[str] = []
