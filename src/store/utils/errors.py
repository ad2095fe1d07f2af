# src/store/utils/errors.py
from __future__ import annotations

from typing import Dict


class StoreError(Exception):
    """Base class of the domain errors raised by services and controllers."""


class ValidationError(StoreError):
    """Required fields missing or invalid; carries one message per field."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()) or "Validation failed")


class NotFoundError(StoreError):
    def __init__(self, resource: str, key: object = None):
        self.resource = resource
        self.key = key
        detail = f"{resource} not found" if key is None else f"{resource} {key} not found"
        super().__init__(detail)


class ConflictError(StoreError):
    """State conflict (duplicate key, dependent rows, not enough stock)."""


class UploadError(StoreError):
    """The image host rejected the upload or could not be reached."""


class NetworkError(StoreError):
    """Any other failure of a remote service call."""
