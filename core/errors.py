"""
core/errors.py
────────────────────────────────────────────────────────────────────────
Failure classes raised by the meal-generation pipeline.

* `ModelResponseError`   – the model service errored or answered without
                           the structured `create_meal` call.  Never retried.
* `MealGenerationFailed` – both attempts produced candidates that broke a
                           domain rule.  Carries the last attempt's errors.
"""
from __future__ import annotations


class MealPlannerError(Exception):
    """Base class for everything the generation core raises."""


class ModelResponseError(MealPlannerError):
    pass


class MealGenerationFailed(MealPlannerError):
    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(
            "AI-generated meal failed validation: " + "; ".join(self.errors)
        )
