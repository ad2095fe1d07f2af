# src/store/routes/products_api.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.crud.product import create_product, delete_product, get_product, list_products, update_product
from src.store.models.user import User
from src.store.schemas.catalog_schema import ProductCreate, ProductOut, ProductPage, ProductUpdate
from src.store.utils.auth import get_admin_user
from src.store.utils.database import get_db

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=ProductPage)
async def api_list_products(
    q: Optional[str] = Query(None),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    subcategory_id: Optional[int] = Query(None, alias="subcategoryId"),
    active: Optional[bool] = Query(None),
    featured: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    rows, total = await list_products(
        db,
        limit=size,
        offset=(page - 1) * size,
        q=(q or "").strip() or None,
        category_id=category_id,
        subcategory_id=subcategory_id,
        active=active,
        featured=featured,
    )
    return {
        "items": rows,
        "total": total,
        "page": page,
        "pages": (total + size - 1) // size,
    }


@router.get("/{product_id}", response_model=ProductOut)
async def api_get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    return await get_product(db, product_id)


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
async def api_create_product(
    payload: ProductCreate,
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await create_product(db, payload.model_dump(), created_by=current_user.email)


@router.put("/{product_id}", response_model=ProductOut)
async def api_update_product(
    product_id: int,
    payload: ProductUpdate,
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await update_product(db, product_id, payload.model_dump(exclude_unset=True), updated_by=current_user.email)


@router.delete("/{product_id}")
async def api_delete_product(
    product_id: int,
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_product(db, product_id)
    return {"message": "Product deleted", "id": product_id}
