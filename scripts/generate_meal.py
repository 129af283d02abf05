"""
Generate one meal for a user straight from the command line.

Usage
-----

    # profile defaults, print only
    python -m scripts.generate_meal <USER_ID>

    # one-off overrides, store the meal as "pending"
    python -m scripts.generate_meal <USER_ID> --cuisine Thai --max-cook 20 --save
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging

from config import settings
from core.errors import MealGenerationFailed, ModelResponseError
from core.meal_generator import MealGenerator
from core.models.meal import PreferencesOverride
from services.db import MealDAO, ProfileDAO, init_models, load_generation_request, session_factory
from services.gemini import get_meal_client


async def _run(user_id: int, override: PreferencesOverride | None, save: bool) -> int:
    if settings.auto_create_tables:
        await init_models()

    async with session_factory()() as db:
        profiles, meals = ProfileDAO(db), MealDAO(db)
        request = await load_generation_request(profiles, meals, user_id, override)
        if request is None:
            print(f"✗ user {user_id} has no profile – configure one first")
            return 1

        try:
            result = await MealGenerator(get_meal_client()).generate(user_id, request)
        except (MealGenerationFailed, ModelResponseError) as exc:
            print(f"✗ {exc}")
            return 2

        print(json.dumps(result.model_dump(), indent=2))
        if save:
            row = await meals.create_meal(user_id, result.meal)
            print(f"✓ stored meal {row.id} for user {user_id}")
    return 0


def _positive_int(raw: str) -> int:
    value = int(raw)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive number of minutes, got {raw}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser()
    parser.add_argument("user_id", type=int, help="target user id")
    parser.add_argument("--cuisine", help="override the profile's cuisines for this run")
    parser.add_argument("--max-cook", type=_positive_int, help="override max cook time (minutes)")
    parser.add_argument("--save", action="store_true", help="persist the generated meal")
    return parser


def override_from_args(args: argparse.Namespace) -> PreferencesOverride | None:
    if args.cuisine is None and args.max_cook is None:
        return None
    return PreferencesOverride(cuisine=args.cuisine, max_cook_time_minutes=args.max_cook)


def main() -> None:
    args = build_parser().parse_args()

    logging.basicConfig(level=settings.log_level.upper())
    override = override_from_args(args)
    raise SystemExit(asyncio.run(_run(args.user_id, override, args.save)))


if __name__ == "__main__":
    main()
