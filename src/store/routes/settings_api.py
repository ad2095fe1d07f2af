# src/store/routes/settings_api.py
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.crud.setting import get_settings, put_setting
from src.store.models.user import User
from src.store.schemas.setting_schema import SettingValue
from src.store.utils.auth import get_admin_user
from src.store.utils.database import get_db

router = APIRouter(prefix="/api/settings", tags=["Settings"])


@router.get("")
async def api_get_settings(db: AsyncSession = Depends(get_db)):
    return await get_settings(db)


@router.put("/{key}")
async def api_put_setting(
    payload: SettingValue,
    key: str = Path(..., min_length=1, max_length=80, pattern=r"^[A-Za-z0-9_.-]+$"),
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    row = await put_setting(db, key, payload.value, updated_by=current_user.email)
    return {"key": row.key, "value": row.value}
