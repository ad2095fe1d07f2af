# src/store/routes/categories_api.py
"""
/api/categories, /api/subcategories and /api/subsubcategories.

The three routers are built by one factory; they differ only in the level
they manage and the schemas they accept.
"""

from typing import List, Optional, Type

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.crud.category import (
    CATEGORY,
    SUBCATEGORY,
    SUBSUBCATEGORY,
    CategoryLevel,
    create_node,
    delete_node,
    get_node,
    list_nodes,
    update_node,
)
from src.store.models.user import User
from src.store.schemas.catalog_schema import (
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    SubcategoryCreate,
    SubcategoryOut,
    SubcategoryUpdate,
    SubSubcategoryCreate,
    SubSubcategoryOut,
    SubSubcategoryUpdate,
)
from src.store.utils.auth import get_admin_user
from src.store.utils.database import get_db


def build_router(
    prefix: str,
    tag: str,
    level: CategoryLevel,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    out_schema: Type[BaseModel],
) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag])

    @router.get("", response_model=List[out_schema])  # type: ignore[valid-type]
    async def api_list(
        parent_id: Optional[int] = Query(None, alias="parentId"),
        active: bool = Query(False),
        db: AsyncSession = Depends(get_db),
    ):
        return await list_nodes(db, level, parent_id=parent_id, active_only=active)

    @router.get("/{node_id}", response_model=out_schema)
    async def api_get(node_id: int, db: AsyncSession = Depends(get_db)):
        return await get_node(db, level, node_id)

    @router.post("", response_model=out_schema, status_code=status.HTTP_201_CREATED)
    async def api_create(
        payload: create_schema,  # type: ignore[valid-type]
        current_user: User = Depends(get_admin_user),
        db: AsyncSession = Depends(get_db),
    ):
        return await create_node(db, level, payload.model_dump())

    @router.put("/{node_id}", response_model=out_schema)
    async def api_update(
        node_id: int,
        payload: update_schema,  # type: ignore[valid-type]
        current_user: User = Depends(get_admin_user),
        db: AsyncSession = Depends(get_db),
    ):
        return await update_node(db, level, node_id, payload.model_dump(exclude_unset=True))

    @router.delete("/{node_id}")
    async def api_delete(
        node_id: int,
        current_user: User = Depends(get_admin_user),
        db: AsyncSession = Depends(get_db),
    ):
        await delete_node(db, level, node_id)
        return {"message": f"{level.label} deleted", "id": node_id}

    return router


categories_router = build_router(
    "/api/categories", "Categories", CATEGORY, CategoryCreate, CategoryUpdate, CategoryOut
)
subcategories_router = build_router(
    "/api/subcategories", "Subcategories", SUBCATEGORY, SubcategoryCreate, SubcategoryUpdate, SubcategoryOut
)
subsubcategories_router = build_router(
    "/api/subsubcategories", "Subsubcategories", SUBSUBCATEGORY,
    SubSubcategoryCreate, SubSubcategoryUpdate, SubSubcategoryOut,
)
