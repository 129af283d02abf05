"""
core/meal_generator.py
────────────────────────────────────────────────────────────────────────
Generation orchestrator: prompt → model call → validation, with exactly
one retry when the first candidate breaks a domain rule.

    attempt 1 ──valid──► result
        │ invalid
        ▼
    attempt 2 ──valid──► result
        │ invalid
        ▼
    MealGenerationFailed(errors of attempt 2)

`ModelResponseError` from the client is not a validation failure and is
never retried here – it propagates straight to the caller.
"""
from __future__ import annotations

import logging
from typing import Protocol

from core.errors import MealGenerationFailed
from core.meal_validator import validate_meal
from core.models.meal import CandidateMeal, GenerationRequest, GenerationResult
from core.prompt_builder import build_prompt

_LOG = logging.getLogger(__name__)

MAX_ATTEMPTS = 2


class MealClient(Protocol):
    async def create_meal(self, prompt: str) -> CandidateMeal: ...


class MealGenerator:
    def __init__(self, client: MealClient, max_attempts: int = MAX_ATTEMPTS) -> None:
        self._client = client
        self._max_attempts = max_attempts

    async def generate(self, user_id: int, request: GenerationRequest) -> GenerationResult:
        prompt = build_prompt(request)
        max_cook = request.effective_max_cook_time

        errors: list[str] = []
        for attempt in range(1, self._max_attempts + 1):
            _LOG.debug("user=%s attempt=%d calling model", user_id, attempt)
            meal = await self._client.create_meal(prompt)
            verdict = validate_meal(meal, max_cook)

            if verdict.valid:
                if verdict.warnings:
                    _LOG.info("user=%s meal %r accepted with warnings: %s",
                              user_id, meal.title, verdict.warnings)
                return GenerationResult(meal=meal, warnings=verdict.warnings)

            errors = verdict.errors
            if attempt < self._max_attempts:
                _LOG.warning("user=%s attempt %d failed validation, retrying: %s",
                             user_id, attempt, errors)

        _LOG.error("user=%s meal generation failed after %d attempts: %s",
                   user_id, self._max_attempts, errors)
        raise MealGenerationFailed(errors)
