# src/store/schemas/catalog_schema.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from src.store.schemas.common import CamelModel, CamelOut, blank_to_none


# -------------------------------------------------------------------
# Categories (three levels share one shape plus a parent reference)
# -------------------------------------------------------------------
class CategoryCreate(CamelModel):
    name: str = Field(min_length=1, max_length=120)
    slug: Optional[str] = Field(default=None, max_length=140)
    description: Optional[str] = None
    image: Optional[str] = None
    is_active: bool = True

    @field_validator("slug", "description", "image", mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    slug: Optional[str] = Field(default=None, max_length=140)
    description: Optional[str] = None
    image: Optional[str] = None
    is_active: Optional[bool] = None


class CategoryOut(CamelOut):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    is_active: bool


class SubcategoryCreate(CategoryCreate):
    category_id: int


class SubcategoryUpdate(CategoryUpdate):
    category_id: Optional[int] = None


class SubcategoryOut(CategoryOut):
    category_id: int


class SubSubcategoryCreate(CategoryCreate):
    subcategory_id: int


class SubSubcategoryUpdate(CategoryUpdate):
    subcategory_id: Optional[int] = None


class SubSubcategoryOut(CategoryOut):
    subcategory_id: int


# -------------------------------------------------------------------
# Products
# -------------------------------------------------------------------
class ProductCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    price: Decimal = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    image: Optional[str] = None
    images: Optional[List[str]] = None
    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    subsubcategory_id: Optional[int] = None
    is_active: bool = True
    is_featured: bool = False

    @field_validator("description", "image", mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    image: Optional[str] = None
    images: Optional[List[str]] = None
    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    subsubcategory_id: Optional[int] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None


class ProductOut(CamelOut):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    stock: int
    image: Optional[str] = None
    images: Optional[List[str]] = None
    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    subsubcategory_id: Optional[int] = None
    is_active: bool
    is_featured: bool
    created_dt: Optional[datetime] = None


class ProductPage(CamelModel):
    items: List[ProductOut]
    total: int
    page: int
    pages: int
