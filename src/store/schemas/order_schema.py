# src/store/schemas/order_schema.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from src.store.models.ops.order_info import OrderStatus
from src.store.schemas.common import CamelModel, CamelOut


class OrderItemIn(CamelModel):
    product_id: int
    quantity: int = Field(ge=1)


class OrderCreate(CamelModel):
    items: List[OrderItemIn] = Field(min_length=1)
    shipping_address: Optional[Dict[str, Any]] = None
    payment_method: Optional[str] = Field(default=None, max_length=30)
    notes: Optional[str] = Field(default=None, max_length=500)


class OrderStatusUpdate(CamelModel):
    status: OrderStatus


class OrderOut(CamelOut):
    id: int
    user_id: int
    items: List[Dict[str, Any]]
    total: float
    status: str
    shipping_address: Optional[Dict[str, Any]] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    created_dt: datetime
