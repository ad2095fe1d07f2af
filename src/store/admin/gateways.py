# src/store/admin/gateways.py
from __future__ import annotations

import asyncio
from typing import Any, Dict, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from src.store.crud.banner import create_banner, get_banner_by_id, update_banner
from src.store.schemas.banner_schema import BannerCreate, BannerOut, BannerUpdate
from src.store.services.banner_client import BannerApiClient


class DbBannerGateway:
    """Banner service calls straight against the database (server-rendered admin)."""

    def __init__(self, db: AsyncSession, actor: str = "System"):
        self.db = db
        self.actor = actor

    async def get(self, banner_id: int) -> Mapping[str, Any]:
        row = await get_banner_by_id(self.db, banner_id)
        return BannerOut.model_validate(row).model_dump()

    async def create(self, fields: Dict[str, Any]) -> int:
        row = await create_banner(self.db, BannerCreate(**fields), created_by=self.actor)
        return int(row.id)

    async def update(self, banner_id: int, fields: Dict[str, Any]) -> None:
        await update_banner(self.db, banner_id, BannerUpdate(**fields), updated_by=self.actor)


class ApiBannerGateway:
    """Same calls over HTTP, for tools that talk to a remote API."""

    def __init__(self, client: BannerApiClient):
        self.client = client

    async def get(self, banner_id: int) -> Mapping[str, Any]:
        data = await asyncio.to_thread(self.client.get, banner_id)
        return BannerOut.model_validate(data).model_dump()

    async def create(self, fields: Dict[str, Any]) -> int:
        payload = BannerCreate(**fields).model_dump(mode="json", by_alias=True)
        data = await asyncio.to_thread(self.client.create, payload)
        return int(data["id"])

    async def update(self, banner_id: int, fields: Dict[str, Any]) -> None:
        payload = BannerUpdate(**fields).model_dump(mode="json", by_alias=True)
        await asyncio.to_thread(self.client.update, banner_id, payload)
