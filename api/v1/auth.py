from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from api.v1.deps import get_user_dao
from api.v1.schemas import Credentials, TokenOut, UserOut
from services.auth import create_token, current_user_id, hash_password, verify_password
from services.db import UserDAO

router = APIRouter()


# ───────────────────────── register ─────────────────────────
@router.post(
    "/register",
    response_model=TokenOut,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    body: Credentials,
    users: UserDAO = Depends(get_user_dao),
) -> TokenOut:
    if await users.by_email(body.email):
        raise HTTPException(status_code=409, detail="Email already registered")

    user = await users.create(body.email, hash_password(body.password))
    return TokenOut(
        token=create_token(user.id, user.email),
        user=UserOut.model_validate(user, from_attributes=True),
    )


# ───────────────────────── login ────────────────────────────
@router.post("/login", response_model=TokenOut)
async def login(
    body: Credentials,
    users: UserDAO = Depends(get_user_dao),
) -> TokenOut:
    user = await users.by_email(body.email)
    if user is None or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return TokenOut(
        token=create_token(user.id, user.email),
        user=UserOut.model_validate(user, from_attributes=True),
    )


# ───────────────────────── me ───────────────────────────────
@router.get("/me", response_model=UserOut)
async def me(
    user_id: int = Depends(current_user_id),
    users: UserDAO = Depends(get_user_dao),
) -> UserOut:
    user = await users.get(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserOut.model_validate(user, from_attributes=True)
