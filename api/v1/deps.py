"""
api/v1/deps.py
────────────────────────────────────────────────────────────────────────
FastAPI dependencies shared by the v1 routers.

Each DAO is bound to the request's `AsyncSession`; the generator wraps the
process-wide Gemini client so every request reuses one SDK handle.
"""
from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.meal_generator import MealGenerator
from services.db import MealDAO, ProfileDAO, UserDAO, get_session
from services.gemini import GeminiMealClient, get_meal_client


def get_user_dao(db: AsyncSession = Depends(get_session)) -> UserDAO:
    return UserDAO(db)


def get_profile_dao(db: AsyncSession = Depends(get_session)) -> ProfileDAO:
    return ProfileDAO(db)


def get_meal_dao(db: AsyncSession = Depends(get_session)) -> MealDAO:
    return MealDAO(db)


def get_meal_generator(
    client: GeminiMealClient = Depends(get_meal_client),
) -> MealGenerator:
    return MealGenerator(client)
