"""Error types shared by the storage, webhook, and HTTP layers."""
from __future__ import annotations

from typing import Optional


class RentalsError(Exception):
    """Base class for errors raised by the rental inquiry service."""


class ConfigurationError(RentalsError):
    """Raised when a required setting is missing or invalid."""


class NotFoundError(RentalsError):
    """Raised when a requested record does not exist."""


class BadRequestError(RentalsError):
    """Raised when a request body cannot be interpreted."""


class UpstreamError(RentalsError):
    """Raised when the outbound webhook call fails."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DuplicateUsernameError(RentalsError, ValueError):
    """Raised when creating a user whose username is already taken."""

    def __init__(self, username: str) -> None:
        super().__init__(f"A user with username '{username}' already exists")
        self.username = username


__all__ = [
    "BadRequestError",
    "ConfigurationError",
    "DuplicateUsernameError",
    "NotFoundError",
    "RentalsError",
    "UpstreamError",
]
