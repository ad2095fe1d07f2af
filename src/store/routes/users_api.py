# src/store/routes/users_api.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.crud.users import create_user, delete_user, list_users
from src.store.models.user import User
from src.store.schemas.user_schema import UserLogin, UserRead, UserRegister
from src.store.utils.auth import authenticate_user, get_admin_user, get_current_user, issue_token, user_public
from src.store.utils.database import get_db

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def api_register(payload: UserRegister, db: AsyncSession = Depends(get_db)):
    user = await create_user(
        db,
        name=payload.name,
        email=str(payload.email),
        password=payload.password.get_secret_value(),
        phone=payload.phone,
    )
    return {"token": issue_token(user), "user": user_public(user)}


@router.post("/login")
async def api_login(payload: UserLogin, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, str(payload.email), payload.password.get_secret_value())
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return {"token": issue_token(user), "user": user_public(user)}


@router.get("/profile")
async def api_profile(current_user: User = Depends(get_current_user)):
    return user_public(current_user)


@router.get("", response_model=List[UserRead])
async def api_list_users(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await list_users(db, limit=limit, offset=offset)


@router.delete("/{user_id}")
async def api_delete_user(
    user_id: int,
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    if user_id == current_user.id:
        raise HTTPException(status_code=409, detail="You cannot delete your own account")
    await delete_user(db, user_id)
    return {"message": "User deleted", "id": user_id}
