"""
core/prompt_builder.py
────────────────────────────────────────────────────────────────────────
Turns a `GenerationRequest` into the user message sent to the model.

The output is a pure function of the request: same request, same bytes.
Only fields that are set make it into the text, always in this order:

    calories → protein → carbs → fat → cuisine → max cook time
    → restrictions (grouped by category) → dislikes → recent meals
"""
from __future__ import annotations

from core.models.meal import GenerationRequest

SYSTEM_PROMPT = """You are a creative meal planning assistant. Your job is to generate delicious, varied meals that match the user's dietary profile and preferences.

Guidelines:
- Be creative and suggest diverse meals across different cuisines
- Ensure macronutrient values are realistic and internally consistent
- Provide clear, actionable cooking instructions
- Use common, accessible ingredients unless the user prefers otherwise
- Respect all dietary restrictions and avoid disliked ingredients completely
- If given recent meal titles, avoid repeating similar meals"""

_HEADER = "Generate a meal with the following requirements:"


def _fmt(value: float) -> str:
    # 2000.0 -> "2000", 32.5 -> "32.5", never scientific notation
    return str(int(value)) if float(value).is_integer() else str(value)


def build_prompt(request: GenerationRequest) -> str:
    parts: list[str] = [_HEADER]

    if request.calorie_target:
        parts.append(f"- Target calories: {_fmt(request.calorie_target)} kcal")
    if request.protein_target:
        parts.append(f"- Target protein: {_fmt(request.protein_target)}g")
    if request.carb_target:
        parts.append(f"- Target carbs: {_fmt(request.carb_target)}g")
    if request.fat_target:
        parts.append(f"- Target fat: {_fmt(request.fat_target)}g")

    cuisine = request.override_cuisine
    if cuisine:
        parts.append(f"- Cuisine: {cuisine}")
    elif request.cuisine_preferences:
        parts.append(f"- Preferred cuisines: {', '.join(request.cuisine_preferences)}")

    max_cook = request.effective_max_cook_time
    if max_cook:
        parts.append(f"- Maximum cook time: {max_cook} minutes")

    # dicts keep insertion order → categories appear in first-seen order
    grouped: dict[str, list[str]] = {}
    for r in request.restrictions:
        grouped.setdefault(r.category, []).append(r.value)
    for category, values in grouped.items():
        parts.append(f"- Dietary restriction ({category}): {', '.join(values)}")

    if request.disliked_ingredients:
        parts.append(
            "- Avoid these ingredients completely: "
            + ", ".join(request.disliked_ingredients)
        )

    if request.recent_meal_titles:
        parts.append(
            "- Recently accepted meals (avoid repeating): "
            + ", ".join(request.recent_meal_titles)
        )

    return "\n".join(parts)
