"""
Orchestrator tests – a scripted fake client stands in for Gemini.
"""
from __future__ import annotations

import asyncio

import pytest

from core.errors import MealGenerationFailed, ModelResponseError
from core.meal_generator import MealGenerator
from core.models.meal import CandidateMeal, GenerationRequest, Ingredient, PreferencesOverride


def _meal(**over) -> CandidateMeal:
    base = dict(
        title="Lemon Herb Salmon",
        description="Pan-seared salmon with greens",
        ingredients=[Ingredient(name="salmon", quantity=180, unit="g")],
        instructions=["Season salmon", "Sear 4 minutes per side"],
        calories=400,
        protein_g=30,
        carbs_g=40,
        fat_g=10,
        cook_time_minutes=20,
        cuisine="Mediterranean",
    )
    base.update(over)
    return CandidateMeal(**base)


class ScriptedClient:
    """Returns (or raises) the queued outcomes in order, recording prompts."""

    def __init__(self, *outcomes) -> None:
        self._outcomes = list(outcomes)
        self.prompts: list[str] = []

    async def create_meal(self, prompt: str) -> CandidateMeal:
        self.prompts.append(prompt)
        nxt = self._outcomes.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


REQ = GenerationRequest(calorie_target=400, cuisine_preferences=["Greek"])


def _run(client, request=REQ):
    return asyncio.run(MealGenerator(client).generate(1, request))


def test_first_attempt_valid_single_call():
    client = ScriptedClient(_meal())
    result = _run(client)
    assert result.meal.title == "Lemon Herb Salmon"
    assert result.warnings == []
    assert len(client.prompts) == 1


def test_invalid_then_valid_retries_once_with_same_prompt():
    client = ScriptedClient(_meal(calories=50), _meal(title="Second Try"))
    result = _run(client)
    assert result.meal.title == "Second Try"
    assert result.warnings == []
    assert len(client.prompts) == 2
    assert client.prompts[0] == client.prompts[1]


def test_both_invalid_raises_with_second_attempt_errors():
    client = ScriptedClient(
        _meal(calories=50, ingredients=[]),
        _meal(calories=50),
    )
    with pytest.raises(MealGenerationFailed) as exc:
        _run(client)
    assert exc.value.errors == ["Calories out of range: 50 (must be 100-3000)"]
    assert "50" in str(exc.value) and "100-3000" in str(exc.value)
    assert len(client.prompts) == 2


def test_warnings_come_from_final_attempt_only():
    noisy = _meal(calories=400, protein_g=10, carbs_g=10, fat_g=5)  # warns
    client = ScriptedClient(_meal(instructions=[]), noisy)
    result = _run(client)
    assert len(result.warnings) == 1
    assert "Macro-calorie mismatch" in result.warnings[0]


def test_model_error_is_not_retried():
    client = ScriptedClient(ModelResponseError("no tool call"), _meal())
    with pytest.raises(ModelResponseError):
        _run(client)
    assert len(client.prompts) == 1


def test_model_error_on_second_attempt_propagates():
    client = ScriptedClient(_meal(calories=50), ModelResponseError("quota"))
    with pytest.raises(ModelResponseError):
        _run(client)


def test_override_cook_time_drives_validation():
    req = GenerationRequest(
        max_cook_time_minutes=90,
        preferences_override=PreferencesOverride(max_cook_time_minutes=15),
    )
    client = ScriptedClient(_meal(cook_time_minutes=60), _meal(cook_time_minutes=60))
    with pytest.raises(MealGenerationFailed) as exc:
        _run(client, req)
    assert "exceeds max 15 min" in exc.value.errors[0]
