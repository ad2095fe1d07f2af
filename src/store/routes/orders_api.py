# src/store/routes/orders_api.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.crud.order import create_order, get_order, list_orders, update_order_status
from src.store.models.ops.order_info import OrderStatus
from src.store.models.user import User
from src.store.schemas.order_schema import OrderCreate, OrderOut, OrderStatusUpdate
from src.store.utils.auth import get_admin_user, get_current_user
from src.store.utils.database import get_db

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.post("", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
async def api_place_order(
    payload: OrderCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await create_order(db, current_user, payload)


@router.get("/mine", response_model=List[OrderOut])
async def api_my_orders(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await list_orders(db, user_id=current_user.id)


@router.get("", response_model=List[OrderOut])
async def api_list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await list_orders(
        db,
        status=status_filter.value if status_filter else None,
        limit=limit,
        offset=offset,
    )


@router.get("/{order_id}", response_model=OrderOut)
async def api_get_order(
    order_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    order = await get_order(db, order_id)
    if order.user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(status_code=403, detail="Forbidden")
    return order


@router.patch("/{order_id}/status", response_model=OrderOut)
async def api_update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await update_order_status(db, order_id, payload.status)
