# src/store/routes/reports_api.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.crud.report import daily_sales, sales_summary
from src.store.models.user import User
from src.store.utils.auth import get_admin_user
from src.store.utils.database import get_db

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.get("/summary")
async def api_summary(
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await sales_summary(db)


@router.get("/sales")
async def api_sales(
    days: int = Query(30, ge=1, le=366),
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return {"days": days, "series": await daily_sales(db, days=days)}
