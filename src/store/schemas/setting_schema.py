# src/store/schemas/setting_schema.py
from typing import Any

from src.store.schemas.common import CamelModel


class SettingValue(CamelModel):
    value: Any = None
