# src/store/crud/product_import.py
from __future__ import annotations

import csv
import io
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from src.store.crud.category import CATEGORY, create_node, get_category_by_name
from src.store.models.catalog.product_info import ProductInfo
from src.store.utils.errors import ValidationError
from src.store.utils.timezone import now_local

logger = logging.getLogger(__name__)

CSV_COLUMNS = ("name", "price", "stock", "category", "description", "image")


def _row_error(line: int, message: str) -> Dict[str, Any]:
    return {"line": line, "error": message}


async def import_products_csv(db: AsyncSession, text: str, created_by: str = "System") -> Dict[str, Any]:
    """
    Bulk-create products from CSV text with a header row.

    `name` and `price` are required per row; bad rows are skipped and
    reported, good rows are created. Category names that do not exist yet are
    created on the fly.
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    header = [h.strip().lower() for h in (reader.fieldnames or [])]
    missing = [c for c in ("name", "price") if c not in header]
    if missing:
        raise ValidationError({"file": f"Missing column(s): {', '.join(missing)}"})
    reader.fieldnames = header

    created = 0
    errors: List[Dict[str, Any]] = []
    category_ids: Dict[str, int] = {}
    stamp = now_local()

    # line 1 is the header
    for line, raw in enumerate(reader, start=2):
        row = {k: (v or "").strip() for k, v in raw.items() if k}
        name = row.get("name", "")
        if not name:
            errors.append(_row_error(line, "name is required"))
            continue
        try:
            price = Decimal(row.get("price", ""))
            if price < 0:
                raise InvalidOperation
        except InvalidOperation:
            errors.append(_row_error(line, f"invalid price {row.get('price')!r}"))
            continue
        try:
            stock = int(row.get("stock") or 0)
        except ValueError:
            errors.append(_row_error(line, f"invalid stock {row.get('stock')!r}"))
            continue

        category_id = None
        category_name = row.get("category", "")
        if category_name:
            key = category_name.lower()
            if key not in category_ids:
                category = await get_category_by_name(db, category_name)
                if category is None:
                    category = await create_node(db, CATEGORY, {"name": category_name})
                    logger.info("Import created category %r", category_name)
                category_ids[key] = category.id
            category_id = category_ids[key]

        db.add(
            ProductInfo(
                name=name,
                price=price,
                stock=max(stock, 0),
                category_id=category_id,
                description=row.get("description") or None,
                image=row.get("image") or None,
                created_by=created_by,
                updated_by=created_by,
                created_dt=stamp,
                updated_dt=stamp,
            )
        )
        created += 1

    await db.commit()
    logger.info("Imported %s products (%s skipped)", created, len(errors))
    return {"created": created, "skipped": len(errors), "errors": errors}
