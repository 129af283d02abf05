"""
core/meal_validator.py
────────────────────────────────────────────────────────────────────────
Domain rules every generated meal is checked against.

Rules (all evaluated on every call, none short-circuits)
-----
1.  macro consistency   – P*4 + C*4 + F*9 within 15 % of stated kcal  (warning)
2.  calorie range       – 100 ≤ kcal ≤ 3000                           (error)
3.  ingredients         – at least one                                 (error)
4.  instructions        – at least one                                 (error)
5.  cook time           – ≤ max + 10 min, only when a max is given     (error)

A meal is valid iff it has no errors; warnings never block it.
"""
from __future__ import annotations

from core.models.meal import CandidateMeal, ValidationVerdict

MACRO_TOLERANCE = 0.15
MIN_CALORIES = 100
MAX_CALORIES = 3000
COOK_TIME_TOLERANCE_MIN = 10


def _num(value: float) -> str:
    # full precision: 1234567.0 -> "1234567", 32.5 -> "32.5"
    return str(int(value)) if float(value).is_integer() else str(value)


def macro_calories(meal: CandidateMeal) -> float:
    """Atwater estimate of the meal's energy from its macros."""
    return meal.protein_g * 4 + meal.carbs_g * 4 + meal.fat_g * 9


def validate_meal(meal: CandidateMeal, max_cook_time: int | None) -> ValidationVerdict:
    warnings: list[str] = []
    errors: list[str] = []

    # ratio is undefined for a zero-calorie meal; the range rule rejects it anyway
    calculated = macro_calories(meal)
    if meal.calories > 0:
        ratio = abs(calculated - meal.calories) / meal.calories
        if ratio > MACRO_TOLERANCE:
            warnings.append(
                f"Macro-calorie mismatch: calculated {round(calculated)} kcal "
                f"from macros vs stated {_num(meal.calories)} kcal"
            )

    if meal.calories < MIN_CALORIES or meal.calories > MAX_CALORIES:
        errors.append(
            f"Calories out of range: {_num(meal.calories)} "
            f"(must be {MIN_CALORIES}-{MAX_CALORIES})"
        )

    if not meal.ingredients:
        errors.append("Meal has no ingredients")
    if not meal.instructions:
        errors.append("Meal has no instructions")

    if max_cook_time and meal.cook_time_minutes > max_cook_time + COOK_TIME_TOLERANCE_MIN:
        errors.append(
            f"Cook time {_num(meal.cook_time_minutes)} min exceeds max "
            f"{max_cook_time} min (with {COOK_TIME_TOLERANCE_MIN} min tolerance)"
        )

    return ValidationVerdict(valid=not errors, warnings=warnings, errors=errors)
