# src/store/crud/order.py
from __future__ import annotations

import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.models.catalog.product_info import ProductInfo
from src.store.models.ops.order_info import OrderInfo, OrderStatus
from src.store.models.user import User
from src.store.schemas.order_schema import OrderCreate
from src.store.utils.errors import ConflictError, NotFoundError
from src.store.utils.timezone import now_local

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


async def take_stock(db: AsyncSession, product_id: int, quantity: int) -> bool:
    """
    Decrement stock in a single guarded UPDATE. False when fewer than
    `quantity` units are left at the moment the row is written, so two
    concurrent orders can never push stock below zero.
    """
    res = await db.execute(
        update(ProductInfo)
        .where(ProductInfo.id == product_id, ProductInfo.stock >= quantity)
        .values(stock=ProductInfo.stock - quantity)
        .execution_options(synchronize_session=False)
    )
    return bool(res.rowcount)


async def create_order(db: AsyncSession, user: User, payload: OrderCreate) -> OrderInfo:
    """
    Price the cart from the product table, take the stock and store the
    order in one transaction. Client-side prices are never trusted.
    """
    wanted: "OrderedDict[int, int]" = OrderedDict()
    for item in payload.items:
        wanted[item.product_id] = wanted.get(item.product_id, 0) + item.quantity

    lines: List[Dict[str, Any]] = []
    total = Decimal("0")
    for product_id, quantity in wanted.items():
        product = await db.get(ProductInfo, product_id)
        if product is None or not product.is_active:
            await db.rollback()
            raise NotFoundError("Product", product_id)
        if not await take_stock(db, product_id, quantity):
            name = product.name
            left = await db.scalar(select(ProductInfo.stock).where(ProductInfo.id == product_id))
            await db.rollback()
            raise ConflictError(f"Insufficient stock for '{name}' ({left} left)")

        price = Decimal(product.price).quantize(_CENT)
        line_total = (price * quantity).quantize(_CENT)
        total += line_total
        lines.append(
            {
                "product_id": product.id,
                "name": product.name,
                "price": float(price),
                "quantity": quantity,
                "line_total": float(line_total),
            }
        )

    stamp = now_local()
    order = OrderInfo(
        user_id=user.id,
        items=lines,
        total=total,
        status=OrderStatus.pending.value,
        shipping_address=payload.shipping_address,
        payment_method=payload.payment_method,
        notes=payload.notes,
        created_dt=stamp,
        updated_dt=stamp,
    )
    db.add(order)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    await db.refresh(order)
    logger.info("Order %s placed by user %s, total %s", order.id, user.id, total)
    return order


async def list_orders(
    db: AsyncSession,
    user_id: Optional[int] = None,
    status: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> List[OrderInfo]:
    stmt = select(OrderInfo)
    if user_id is not None:
        stmt = stmt.where(OrderInfo.user_id == user_id)
    if status:
        stmt = stmt.where(OrderInfo.status == status)
    res = await db.execute(stmt.order_by(OrderInfo.id.desc()).limit(limit).offset(offset))
    return list(res.scalars().all())


async def get_order(db: AsyncSession, order_id: int) -> OrderInfo:
    row = await db.get(OrderInfo, order_id)
    if row is None:
        raise NotFoundError("Order", order_id)
    return row


async def update_order_status(db: AsyncSession, order_id: int, status: OrderStatus) -> OrderInfo:
    order = await get_order(db, order_id)
    previous = order.status
    if previous == status.value:
        return order
    if previous == OrderStatus.cancelled.value:
        raise ConflictError(f"Order {order_id} is cancelled")

    if status == OrderStatus.cancelled:
        # put the goods back on the shelf
        for line in order.items or []:
            await db.execute(
                update(ProductInfo)
                .where(ProductInfo.id == int(line["product_id"]))
                .values(stock=ProductInfo.stock + int(line["quantity"]))
                .execution_options(synchronize_session=False)
            )

    order.status = status.value
    order.updated_dt = now_local()
    await db.commit()
    await db.refresh(order)
    logger.info("Order %s status %s -> %s", order_id, previous, status.value)
    return order
