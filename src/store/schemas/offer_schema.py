# src/store/schemas/offer_schema.py
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from src.store.schemas.common import CamelModel, CamelOut, blank_to_none


class OfferCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    code: Optional[str] = Field(default=None, max_length=40)
    discount_percent: Decimal = Field(ge=0, le=100)
    image: Optional[str] = None
    product_ids: Optional[List[int]] = None
    is_active: bool = True
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("description", "code", "image", "start_date", "end_date", mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)

    @field_validator("code")
    @classmethod
    def _upper_code(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v

    @model_validator(mode="after")
    def _window(self):
        if self.start_date and self.end_date and self.start_date >= self.end_date:
            raise ValueError("End date must be after start date")
        return self


class OfferUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    code: Optional[str] = Field(default=None, max_length=40)
    discount_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)
    image: Optional[str] = None
    product_ids: Optional[List[int]] = None
    is_active: Optional[bool] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)


class OfferOut(CamelOut):
    id: int
    title: str
    description: Optional[str] = None
    code: Optional[str] = None
    discount_percent: float
    image: Optional[str] = None
    product_ids: Optional[List[int]] = None
    is_active: bool
    start_date: Optional[date] = None
    end_date: Optional[date] = None
