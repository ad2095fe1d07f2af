# src/store/crud/report.py
from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.models.catalog.product_info import ProductInfo
from src.store.models.ops.order_info import OrderInfo, OrderStatus
from src.store.models.user import User
from src.store.utils.timezone import LOCAL_TZ, now_local, today_local


async def sales_summary(db: AsyncSession) -> Dict[str, Any]:
    not_cancelled = OrderInfo.status != OrderStatus.cancelled.value

    orders = await db.scalar(select(func.count()).select_from(OrderInfo))
    revenue = await db.scalar(select(func.coalesce(func.sum(OrderInfo.total), 0)).where(not_cancelled))
    by_status_rows = await db.execute(select(OrderInfo.status, func.count()).group_by(OrderInfo.status))
    products = await db.scalar(select(func.count()).select_from(ProductInfo))
    low_stock = await db.scalar(select(func.count()).select_from(ProductInfo).where(ProductInfo.stock <= 5))
    customers = await db.scalar(select(func.count()).select_from(User).where(User.is_admin.is_(False)))

    return {
        "orders": int(orders or 0),
        "revenue": float(Decimal(str(revenue or 0))),
        "ordersByStatus": {status: int(n) for status, n in by_status_rows.all()},
        "products": int(products or 0),
        "lowStock": int(low_stock or 0),
        "customers": int(customers or 0),
    }


async def daily_sales(db: AsyncSession, days: int = 30, today: Optional[Any] = None) -> List[Dict[str, Any]]:
    """Revenue and order count per local calendar day, oldest first, zero-filled."""
    today = today or today_local()
    first = today - timedelta(days=days - 1)
    since = now_local() - timedelta(days=days + 1)

    stmt = select(OrderInfo.created_dt, OrderInfo.total).where(
        OrderInfo.status != OrderStatus.cancelled.value,
        OrderInfo.created_dt >= since,
    )
    buckets: Dict[Any, Dict[str, Any]] = {
        first + timedelta(days=i): {"revenue": Decimal("0"), "orders": 0} for i in range(days)
    }
    for created_dt, total in (await db.execute(stmt)).all():
        # SQLite hands back naive datetimes
        stamp = created_dt if created_dt.tzinfo else LOCAL_TZ.localize(created_dt)
        day = stamp.astimezone(LOCAL_TZ).date()
        if day in buckets:
            buckets[day]["revenue"] += Decimal(str(total))
            buckets[day]["orders"] += 1

    return [
        {"date": day.isoformat(), "revenue": float(v["revenue"]), "orders": v["orders"]}
        for day, v in sorted(buckets.items())
    ]
