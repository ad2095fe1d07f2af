# src/store/routes/import_api.py
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.crud.product_import import import_products_csv
from src.store.models.user import User
from src.store.utils.auth import get_admin_user
from src.store.utils.database import get_db
from src.store.utils.errors import ValidationError

router = APIRouter(prefix="/api/import", tags=["Import"])

MAX_CSV_BYTES = 10 * 1024 * 1024


@router.post("/products")
async def api_import_products(
    file: UploadFile = File(...),
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    raw = await file.read()
    if not raw:
        raise ValidationError({"file": "Empty file"})
    if len(raw) > MAX_CSV_BYTES:
        raise ValidationError({"file": "File exceeds 10 MB"})
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise ValidationError({"file": "File must be UTF-8 encoded CSV"})
    return await import_products_csv(db, text, created_by=current_user.email)
