"""Rental inquiry backend: validation, storage, and HTTP handlers."""

from __future__ import annotations

from typing import Any

from .config import Settings, load_settings
from .schema import validate_rental_inquiry, validate_user
from .storage import MemoryStorage, Storage, create_storage


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the FastAPI application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "MemoryStorage",
    "Settings",
    "Storage",
    "create_app",
    "create_storage",
    "load_settings",
    "validate_rental_inquiry",
    "validate_user",
]
