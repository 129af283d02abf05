"""
services/db.py
────────────────────────────────────────────────────────────────────────
* Async SQLAlchemy v2 setup
* Models for users, profiles, restrictions, dislikes, meals, failures
* Small DAO helpers used by routers / scripts
"""
from __future__ import annotations

from datetime import datetime
from typing import AsyncGenerator, Sequence

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String, Text, delete, func, select, update
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncAttrs,
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

from config import settings
from core.models.meal import CandidateMeal, GenerationRequest, PreferencesOverride, Restriction

# ───────── connection helper ────────────────────────────────────────
_ENGINE: AsyncEngine | None = None


def engine() -> AsyncEngine:
    global _ENGINE
    if _ENGINE is None:
        _ENGINE = create_async_engine(settings.database_url, pool_pre_ping=True)
    return _ENGINE


# ───────── declarative base ──────────────────────────────────────────
Base = declarative_base(cls=AsyncAttrs)

MEAL_STATUSES = ("pending", "accepted", "rejected")


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), unique=True)
    calorie_target: Mapped[int | None] = mapped_column(Integer)
    protein_target: Mapped[float | None] = mapped_column(Float)
    carb_target: Mapped[float | None] = mapped_column(Float)
    fat_target: Mapped[float | None] = mapped_column(Float)
    cuisine_preferences: Mapped[list] = mapped_column(JSON, default=list)
    max_cook_time_minutes: Mapped[int | None] = mapped_column(Integer)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


class DietaryRestriction(Base):
    __tablename__ = "dietary_restrictions"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    category: Mapped[str] = mapped_column(String)
    value: Mapped[str] = mapped_column(String)


class DislikedIngredient(Base):
    __tablename__ = "disliked_ingredients"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    ingredient: Mapped[str] = mapped_column(String)


class Meal(Base):
    __tablename__ = "meals"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String)
    description: Mapped[str | None] = mapped_column(Text)
    ingredients: Mapped[list] = mapped_column(JSON)      # [{name, quantity, unit}]
    instructions: Mapped[list] = mapped_column(JSON)     # [str]
    calories: Mapped[float | None] = mapped_column(Float)
    protein_g: Mapped[float | None] = mapped_column(Float)
    carbs_g: Mapped[float | None] = mapped_column(Float)
    fat_g: Mapped[float | None] = mapped_column(Float)
    cook_time_minutes: Mapped[float | None] = mapped_column(Float)
    cuisine: Mapped[str | None] = mapped_column(String)
    status: Mapped[str] = mapped_column(String, default="pending")
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


class GenerationFailure(Base):
    __tablename__ = "generation_failures"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int]
    stage: Mapped[str]                   # "validation" | "model"
    error_message: Mapped[str] = mapped_column(Text)
    raw_input: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


# ───────── DAO helpers ───────────────────────────────────────────────


class UserDAO:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, email: str, password_hash: str) -> User:
        user = User(email=email, password_hash=password_hash)
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def by_email(self, email: str) -> User | None:
        res = await self.db.execute(select(User).where(User.email == email))
        return res.scalar_one_or_none()

    async def get(self, user_id: int) -> User | None:
        return await self.db.get(User, user_id)


class ProfileDAO:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_profile(self, user_id: int) -> Profile | None:
        res = await self.db.execute(select(Profile).where(Profile.user_id == user_id))
        return res.scalar_one_or_none()

    async def upsert_profile(self, user_id: int, **fields) -> Profile:
        fields["cuisine_preferences"] = list(fields.get("cuisine_preferences") or [])

        # Try update → if row doesn’t exist we’ll insert.
        res = await self.db.execute(
            update(Profile)
            .where(Profile.user_id == user_id)
            .values(**fields)
            .returning(Profile)
        )
        profile = res.scalar_one_or_none()
        if profile is None:
            profile = Profile(user_id=user_id, **fields)
            self.db.add(profile)

        await self.db.commit()
        await self.db.refresh(profile)
        return profile

    async def get_restrictions(self, user_id: int) -> Sequence[DietaryRestriction]:
        res = await self.db.execute(
            select(DietaryRestriction)
            .where(DietaryRestriction.user_id == user_id)
            .order_by(DietaryRestriction.id)
        )
        return res.scalars().all()

    async def set_restrictions(
        self, user_id: int, restrictions: list[Restriction]
    ) -> Sequence[DietaryRestriction]:
        await self.db.execute(
            delete(DietaryRestriction).where(DietaryRestriction.user_id == user_id)
        )
        self.db.add_all(
            DietaryRestriction(user_id=user_id, category=r.category, value=r.value)
            for r in restrictions
        )
        await self.db.commit()
        return await self.get_restrictions(user_id)

    async def get_disliked_ingredients(self, user_id: int) -> Sequence[DislikedIngredient]:
        res = await self.db.execute(
            select(DislikedIngredient)
            .where(DislikedIngredient.user_id == user_id)
            .order_by(DislikedIngredient.id)
        )
        return res.scalars().all()

    async def set_disliked_ingredients(
        self, user_id: int, ingredients: list[str]
    ) -> Sequence[DislikedIngredient]:
        await self.db.execute(
            delete(DislikedIngredient).where(DislikedIngredient.user_id == user_id)
        )
        self.db.add_all(
            DislikedIngredient(user_id=user_id, ingredient=i) for i in ingredients
        )
        await self.db.commit()
        return await self.get_disliked_ingredients(user_id)


class MealDAO:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_meal(self, user_id: int, meal: CandidateMeal) -> Meal:
        row = Meal(user_id=user_id, status="pending", **meal.model_dump())
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        return row

    async def get(self, meal_id: int) -> Meal | None:
        return await self.db.get(Meal, meal_id)

    async def list_for_user(
        self,
        user_id: int,
        status: str | None = None,
        cuisine: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Sequence[Meal]:
        q = select(Meal).where(Meal.user_id == user_id)
        if status:
            q = q.where(Meal.status == status)
        if cuisine:
            q = q.where(Meal.cuisine == cuisine)
        q = q.order_by(Meal.created_at.desc(), Meal.id.desc()).limit(limit).offset(offset)
        return (await self.db.execute(q)).scalars().all()

    async def count_for_user(self, user_id: int, status: str | None = None) -> int:
        q = select(func.count()).select_from(Meal).where(Meal.user_id == user_id)
        if status:
            q = q.where(Meal.status == status)
        return (await self.db.execute(q)).scalar_one()

    async def update_status(self, meal_id: int, user_id: int, status: str) -> Meal | None:
        """Owner-scoped status change; `None` when the meal isn't the user's."""
        meal = await self.get(meal_id)
        if meal is None or meal.user_id != user_id:
            return None
        meal.status = status
        await self.db.commit()
        await self.db.refresh(meal)
        return meal

    async def recent_accepted_titles(self, user_id: int, limit: int = 10) -> list[str]:
        res = await self.db.execute(
            select(Meal.title)
            .where(Meal.user_id == user_id, Meal.status == "accepted")
            .order_by(Meal.created_at.desc(), Meal.id.desc())
            .limit(limit)
        )
        return list(res.scalars().all())

    async def log_failure(
        self, user_id: int, stage: str, error: str, raw_input: str = ""
    ) -> None:
        """
        Persist a Gemini generation failure to the database.
        """
        self.db.add(
            GenerationFailure(
                user_id=user_id,
                stage=stage,
                error_message=error,
                raw_input=raw_input,
            )
        )
        await self.db.commit()


# ───────── request assembly ──────────────────────────────────────────

async def load_generation_request(
    profiles: ProfileDAO,
    meals: MealDAO,
    user_id: int,
    override: PreferencesOverride | None = None,
    recent_limit: int | None = None,
) -> GenerationRequest | None:
    """Collect profile + restrictions + dislikes + history; `None` without a profile."""
    profile = await profiles.get_profile(user_id)
    if profile is None:
        return None

    restrictions = await profiles.get_restrictions(user_id)
    disliked = await profiles.get_disliked_ingredients(user_id)
    recent = await meals.recent_accepted_titles(
        user_id, recent_limit or settings.recent_meal_limit
    )

    return GenerationRequest(
        calorie_target=profile.calorie_target,
        protein_target=profile.protein_target,
        carb_target=profile.carb_target,
        fat_target=profile.fat_target,
        cuisine_preferences=profile.cuisine_preferences or [],
        max_cook_time_minutes=profile.max_cook_time_minutes,
        restrictions=[Restriction(category=r.category, value=r.value) for r in restrictions],
        disliked_ingredients=[d.ingredient for d in disliked],
        recent_meal_titles=recent,
        preferences_override=override,
    )


# ───────── schema + session helpers ──────────────────────────────────

async def init_models() -> None:
    async with engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine(), expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with session_factory()() as session:
        yield session
