"""
Route tests – DAOs and the generator are swapped out through
`app.dependency_overrides`, so no database or Gemini key is needed.
"""
from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from api.v1.deps import get_meal_dao, get_meal_generator, get_profile_dao, get_user_dao
from core.errors import ModelResponseError
from core.meal_generator import MealGenerator
from core.models.meal import CandidateMeal, Ingredient
from main import app
from services.auth import create_token, current_user_id

USER_ID = 1
NOW = datetime(2026, 1, 1, 12, 0, 0)


def _candidate(**over) -> CandidateMeal:
    base = dict(
        title="Thai Basil Chicken",
        description="Spicy stir-fry",
        ingredients=[Ingredient(name="chicken thigh", quantity=250, unit="g")],
        instructions=["Chop", "Stir-fry", "Serve with rice"],
        calories=400, protein_g=30, carbs_g=40, fat_g=10,
        cook_time_minutes=20,
        cuisine="Thai",
    )
    base.update(over)
    return CandidateMeal(**base)


# ── fakes ───────────────────────────────────────────────────────────
class FakeProfiles:
    def __init__(self, profile=None, restrictions=(), disliked=()) -> None:
        self.profile = profile
        self.restrictions = list(restrictions)
        self.disliked = list(disliked)

    async def get_profile(self, user_id):
        return self.profile

    async def upsert_profile(self, user_id, **fields):
        self.profile = SimpleNamespace(user_id=user_id, updated_at=NOW, **fields)
        return self.profile

    async def get_restrictions(self, user_id):
        return self.restrictions

    async def set_restrictions(self, user_id, restrictions):
        self.restrictions = [
            SimpleNamespace(id=i + 1, category=r.category, value=r.value)
            for i, r in enumerate(restrictions)
        ]
        return self.restrictions

    async def get_disliked_ingredients(self, user_id):
        return self.disliked

    async def set_disliked_ingredients(self, user_id, ingredients):
        self.disliked = [SimpleNamespace(ingredient=i) for i in ingredients]
        return self.disliked


class FakeMeals:
    def __init__(self) -> None:
        self.rows: list[SimpleNamespace] = []
        self.failures: list[tuple] = []

    async def create_meal(self, user_id, meal):
        row = SimpleNamespace(
            id=len(self.rows) + 1, user_id=user_id, status="pending",
            created_at=NOW, **meal.model_dump(),
        )
        self.rows.append(row)
        return row

    async def list_for_user(self, user_id, status=None, cuisine=None, limit=20, offset=0):
        rows = [r for r in reversed(self.rows) if r.user_id == user_id]
        if status:
            rows = [r for r in rows if r.status == status]
        if cuisine:
            rows = [r for r in rows if r.cuisine == cuisine]
        return rows[offset: offset + limit]

    async def count_for_user(self, user_id, status=None):
        return len([r for r in self.rows if r.user_id == user_id and (not status or r.status == status)])

    async def update_status(self, meal_id, user_id, status):
        for r in self.rows:
            if r.id == meal_id and r.user_id == user_id:
                r.status = status
                return r
        return None

    async def recent_accepted_titles(self, user_id, limit=10):
        return [r.title for r in reversed(self.rows) if r.status == "accepted"][:limit]

    async def log_failure(self, user_id, stage, error, raw_input=""):
        self.failures.append((user_id, stage, error))


class FakeUsers:
    def __init__(self) -> None:
        self.rows: dict[str, SimpleNamespace] = {}

    async def by_email(self, email):
        return self.rows.get(email)

    async def create(self, email, password_hash):
        row = SimpleNamespace(id=len(self.rows) + 1, email=email,
                              password_hash=password_hash, created_at=NOW)
        self.rows[email] = row
        return row

    async def get(self, user_id):
        return next((u for u in self.rows.values() if u.id == user_id), None)


class ScriptedClient:
    def __init__(self, *outcomes) -> None:
        self.outcomes = list(outcomes)
        self.prompts: list[str] = []

    async def create_meal(self, prompt):
        self.prompts.append(prompt)
        nxt = self.outcomes.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


PROFILE = SimpleNamespace(
    user_id=USER_ID, calorie_target=400, protein_target=None, carb_target=None,
    fat_target=None, cuisine_preferences=["Italian"], max_cook_time_minutes=30,
    updated_at=NOW,
)


@pytest.fixture
def wire():
    """Install fakes; yields a setter so each test can pick its own."""
    state = SimpleNamespace(
        profiles=FakeProfiles(PROFILE),
        meals=FakeMeals(),
        users=FakeUsers(),
        client=ScriptedClient(_candidate()),
    )
    app.dependency_overrides[current_user_id] = lambda: USER_ID
    app.dependency_overrides[get_profile_dao] = lambda: state.profiles
    app.dependency_overrides[get_meal_dao] = lambda: state.meals
    app.dependency_overrides[get_user_dao] = lambda: state.users
    app.dependency_overrides[get_meal_generator] = lambda: MealGenerator(state.client)
    yield state
    app.dependency_overrides.clear()


client = TestClient(app)


# ── generate ────────────────────────────────────────────────────────
def test_generate_stores_meal_and_returns_201(wire):
    r = client.post("/api/v1/meals/generate", json={})
    assert r.status_code == 201
    body = r.json()
    assert body["meal"]["title"] == "Thai Basil Chicken"
    assert body["meal"]["status"] == "pending"
    assert body["warnings"] == []
    assert len(wire.meals.rows) == 1


def test_generate_override_reaches_prompt(wire):
    r = client.post(
        "/api/v1/meals/generate",
        json={"preferences_override": {"cuisine": "Thai", "max_cook_time_minutes": 15}},
    )
    assert r.status_code == 201
    prompt = wire.client.prompts[0]
    assert "- Cuisine: Thai" in prompt
    assert "Italian" not in prompt
    assert "- Maximum cook time: 15 minutes" in prompt


def test_generate_without_profile_is_400(wire):
    wire.profiles.profile = None
    r = client.post("/api/v1/meals/generate")
    assert r.status_code == 400


def test_generate_double_validation_failure_is_502(wire):
    wire.client = ScriptedClient(_candidate(calories=50), _candidate(calories=50))
    r = client.post("/api/v1/meals/generate", json={})
    assert r.status_code == 502
    assert "100-3000" in r.json()["detail"]
    assert wire.meals.rows == []
    assert wire.meals.failures[0][1] == "validation"


def test_generate_model_error_is_503(wire):
    wire.client = ScriptedClient(ModelResponseError("no tool call"))
    r = client.post("/api/v1/meals/generate", json={})
    assert r.status_code == 503
    assert wire.meals.failures[0][1] == "model"


def test_generate_rejects_bad_override(wire):
    r = client.post(
        "/api/v1/meals/generate",
        json={"preferences_override": {"max_cook_time_minutes": 1000}},
    )
    assert r.status_code == 422


# ── list / patch ────────────────────────────────────────────────────
def test_list_and_accept(wire):
    client.post("/api/v1/meals/generate", json={})
    meal_id = wire.meals.rows[0].id

    r = client.patch(f"/api/v1/meals/{meal_id}", json={"status": "accepted"})
    assert r.status_code == 200
    assert r.json()["meal"]["status"] == "accepted"

    listing = client.get("/api/v1/meals", params={"status": "accepted"}).json()
    assert listing["total"] == 1
    assert listing["meals"][0]["id"] == meal_id


def test_patch_unknown_meal_is_404(wire):
    r = client.patch("/api/v1/meals/99", json={"status": "rejected"})
    assert r.status_code == 404


def test_patch_rejects_pending_status(wire):
    r = client.patch("/api/v1/meals/1", json={"status": "pending"})
    assert r.status_code == 422


# ── profile ─────────────────────────────────────────────────────────
def test_profile_roundtrip(wire):
    r = client.put("/api/v1/profile", json={"calorie_target": 2100, "cuisine_preferences": ["Thai"]})
    assert r.status_code == 200
    assert r.json()["calorie_target"] == 2100

    r = client.put(
        "/api/v1/profile/restrictions",
        json={"restrictions": [{"category": "allergy", "value": "nuts"}]},
    )
    assert r.status_code == 200

    r = client.put("/api/v1/profile/disliked-ingredients", json={"ingredients": ["okra"]})
    assert r.json() == ["okra"]

    bundle = client.get("/api/v1/profile").json()
    assert bundle["profile"]["cuisine_preferences"] == ["Thai"]
    assert bundle["dietary_restrictions"][0]["value"] == "nuts"
    assert bundle["disliked_ingredients"] == ["okra"]


def test_restriction_value_must_match_category(wire):
    r = client.put(
        "/api/v1/profile/restrictions",
        json={"restrictions": [{"category": "religious", "value": "vegan"}]},
    )
    assert r.status_code == 422


# ── auth ────────────────────────────────────────────────────────────
def test_register_login_me(wire):
    r = client.post("/api/v1/auth/register", json={"email": "Cook@Example.com", "password": "s3cretpass"})
    assert r.status_code == 201
    assert r.json()["user"]["email"] == "cook@example.com"

    assert client.post("/api/v1/auth/register",
                       json={"email": "cook@example.com", "password": "s3cretpass"}).status_code == 409
    assert client.post("/api/v1/auth/login",
                       json={"email": "cook@example.com", "password": "wrongpass"}).status_code == 401

    r = client.post("/api/v1/auth/login", json={"email": "cook@example.com", "password": "s3cretpass"})
    assert r.status_code == 200 and r.json()["token"]


def test_short_password_rejected(wire):
    r = client.post("/api/v1/auth/register", json={"email": "a@b.co", "password": "short"})
    assert r.status_code == 422


def test_bearer_token_required():
    app.dependency_overrides[get_meal_dao] = lambda: FakeMeals()
    try:
        assert client.get("/api/v1/meals").status_code == 401
        token = create_token(USER_ID, "x@y.z")
        r = client.get("/api/v1/meals", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 200
    finally:
        app.dependency_overrides.clear()


def test_health():
    assert client.get("/health").json()["status"] == "ok"
