# src/store/crud/category.py
"""
Category tree: categories -> subcategories -> subsubcategories.

The three levels are the same table shape with a different parent column, so
one `CategoryLevel` describes each level and the CRUD functions take it as
their first argument.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.models.catalog.category_info import CategoryInfo, SubcategoryInfo, SubSubcategoryInfo
from src.store.schemas.common import slugify
from src.store.utils.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryLevel:
    label: str
    model: Type[Any]
    parent_field: Optional[str] = None
    child: Optional["CategoryLevel"] = None


SUBSUBCATEGORY = CategoryLevel("Subsubcategory", SubSubcategoryInfo, parent_field="subcategory_id")
SUBCATEGORY = CategoryLevel("Subcategory", SubcategoryInfo, parent_field="category_id", child=SUBSUBCATEGORY)
CATEGORY = CategoryLevel("Category", CategoryInfo, child=SUBCATEGORY)

_PARENTS = {SUBCATEGORY.label: CATEGORY, SUBSUBCATEGORY.label: SUBCATEGORY}


async def list_nodes(
    db: AsyncSession,
    level: CategoryLevel,
    parent_id: Optional[int] = None,
    active_only: bool = False,
) -> List[Any]:
    model = level.model
    stmt = select(model)
    if parent_id is not None and level.parent_field:
        stmt = stmt.where(getattr(model, level.parent_field) == parent_id)
    if active_only:
        stmt = stmt.where(model.is_active.is_(True))
    res = await db.execute(stmt.order_by(model.name.asc(), model.id.asc()))
    return list(res.scalars().all())


async def get_node(db: AsyncSession, level: CategoryLevel, node_id: int) -> Any:
    row = await db.get(level.model, node_id)
    if row is None:
        raise NotFoundError(level.label, node_id)
    return row


async def get_category_by_name(db: AsyncSession, name: str) -> Optional[CategoryInfo]:
    stmt = select(CategoryInfo).where(func.lower(CategoryInfo.name) == (name or "").strip().lower())
    return await db.scalar(stmt)


async def _check_parent(db: AsyncSession, level: CategoryLevel, values: Dict[str, Any]) -> None:
    if not level.parent_field or values.get(level.parent_field) is None:
        return
    parent = _PARENTS[level.label]
    await get_node(db, parent, int(values[level.parent_field]))


async def _unique_slug(db: AsyncSession, level: CategoryLevel, base: str, exclude_id: Optional[int] = None) -> str:
    model = level.model
    slug, n = base, 1
    while True:
        stmt = select(model.id).where(model.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(model.id != exclude_id)
        if await db.scalar(stmt) is None:
            return slug
        n += 1
        slug = f"{base}-{n}"


async def create_node(db: AsyncSession, level: CategoryLevel, values: Dict[str, Any]) -> Any:
    await _check_parent(db, level, values)
    values = dict(values)
    values["slug"] = await _unique_slug(db, level, slugify(values.get("slug") or values["name"]))

    row = level.model(**values)
    db.add(row)
    try:
        await db.commit()
        await db.refresh(row)
    except IntegrityError as e:
        await db.rollback()
        logger.error("Integrity error while creating %s: %s", level.label, e)
        raise ConflictError(f"{level.label} '{values['name']}' already exists") from e
    return row


async def update_node(db: AsyncSession, level: CategoryLevel, node_id: int, changes: Dict[str, Any]) -> Any:
    row = await get_node(db, level, node_id)
    changes = {k: v for k, v in changes.items() if not (k in ("name", "is_active") and v is None)}
    await _check_parent(db, level, changes)
    if changes.get("slug"):
        changes["slug"] = await _unique_slug(db, level, slugify(changes["slug"]), exclude_id=node_id)
    else:
        changes.pop("slug", None)

    for key, value in changes.items():
        setattr(row, key, value)
    try:
        await db.commit()
        await db.refresh(row)
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError(f"Could not update {level.label} {node_id}") from e
    return row


async def delete_node(db: AsyncSession, level: CategoryLevel, node_id: int) -> None:
    row = await get_node(db, level, node_id)
    if level.child is not None:
        child_model = level.child.model
        count = await db.scalar(
            select(func.count()).select_from(child_model).where(getattr(child_model, level.child.parent_field) == node_id)
        )
        if count:
            raise ConflictError(f"{level.label} {node_id} still has {count} {level.child.label.lower()}(s)")
    await db.delete(row)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError(f"{level.label} {node_id} is still referenced by products") from e
