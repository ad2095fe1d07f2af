# src/store/routes/offers_api.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.crud.offer import (
    create_offer,
    delete_offer,
    get_offer,
    list_active_offers,
    list_offers,
    update_offer,
)
from src.store.models.user import User
from src.store.schemas.offer_schema import OfferCreate, OfferOut, OfferUpdate
from src.store.utils.auth import get_admin_user
from src.store.utils.database import get_db

router = APIRouter(prefix="/api/offers", tags=["Offers"])


@router.get("", response_model=List[OfferOut])
async def api_list_offers(db: AsyncSession = Depends(get_db)):
    return await list_offers(db)


@router.get("/active", response_model=List[OfferOut])
async def api_active_offers(db: AsyncSession = Depends(get_db)):
    return await list_active_offers(db)


@router.get("/{offer_id}", response_model=OfferOut)
async def api_get_offer(offer_id: int, db: AsyncSession = Depends(get_db)):
    return await get_offer(db, offer_id)


@router.post("", response_model=OfferOut, status_code=status.HTTP_201_CREATED)
async def api_create_offer(
    payload: OfferCreate,
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await create_offer(db, payload.model_dump())


@router.put("/{offer_id}", response_model=OfferOut)
async def api_update_offer(
    offer_id: int,
    payload: OfferUpdate,
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await update_offer(db, offer_id, payload.model_dump(exclude_unset=True))


@router.delete("/{offer_id}")
async def api_delete_offer(
    offer_id: int,
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_offer(db, offer_id)
    return {"message": "Offer deleted", "id": offer_id}
