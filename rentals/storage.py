"""Storage interface for users and rental inquiries, plus the in-memory backend."""

from __future__ import annotations

import abc
import logging
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from .config import Settings
from .errors import ConfigurationError, DuplicateUsernameError
from .models import RentalInquiry, User
from .schema import RentalInquiryInput, UserInput

logger = logging.getLogger("rentals.storage")

STORAGE_BACKENDS = ("memory", "sqlite")


def generate_id() -> str:
    return str(uuid.uuid4())


def next_timestamp(previous: Optional[datetime]) -> datetime:
    """Return the current UTC time, nudged past ``previous`` if the clock has not advanced."""

    now = datetime.now(timezone.utc)
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def _agreement_text(value: bool) -> str:
    return "true" if value else "false"


def build_rental_inquiry(
    data: RentalInquiryInput,
    *,
    inquiry_id: str,
    created_at: datetime,
) -> RentalInquiry:
    """Assemble the stored form of a validated submission."""

    return RentalInquiry(
        id=inquiry_id,
        first_name=data.first_name,
        last_name=data.last_name,
        email=str(data.email),
        phone=data.phone,
        service_address=data.service_address,
        package_interest=data.package_interest,
        preferred_install_date=data.preferred_install_date,
        dryer_hookup_type=data.dryer_hookup_type,
        six_month_agreement=_agreement_text(data.six_month_agreement),
        autopay_agreement=_agreement_text(data.autopay_agreement),
        message=data.message or None,
        created_at=created_at,
    )


class Storage(abc.ABC):
    """Repository of users and rental inquiries used by the HTTP handlers."""

    def initialize(self) -> None:
        """Prepare the backend for use. The default implementation does nothing."""

    @abc.abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        ...

    @abc.abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]:
        ...

    @abc.abstractmethod
    def create_user(self, data: UserInput) -> User:
        """Store a new user. Raises :class:`DuplicateUsernameError` if the name is taken."""

    @abc.abstractmethod
    def create_rental_inquiry(self, data: RentalInquiryInput) -> RentalInquiry:
        ...

    @abc.abstractmethod
    def get_all_rental_inquiries(self) -> List[RentalInquiry]:
        """Return every inquiry, newest first."""

    @abc.abstractmethod
    def get_rental_inquiry(self, inquiry_id: str) -> Optional[RentalInquiry]:
        ...


class MemoryStorage(Storage):
    """Dictionary-backed storage that lives as long as the process."""

    def __init__(self) -> None:
        self._users: Dict[str, User] = {}
        self._inquiries: Dict[str, RentalInquiry] = {}
        self._last_created_at: Optional[datetime] = None
        self._lock = threading.Lock()

    def get_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            users = list(self._users.values())
        return next((user for user in users if user.username == username), None)

    def create_user(self, data: UserInput) -> User:
        with self._lock:
            if any(user.username == data.username for user in self._users.values()):
                raise DuplicateUsernameError(data.username)
            user = User(id=generate_id(), username=data.username, password=data.password)
            self._users[user.id] = user
        return user

    def create_rental_inquiry(self, data: RentalInquiryInput) -> RentalInquiry:
        with self._lock:
            created_at = next_timestamp(self._last_created_at)
            inquiry = build_rental_inquiry(data, inquiry_id=generate_id(), created_at=created_at)
            self._inquiries[inquiry.id] = inquiry
            self._last_created_at = created_at
        return inquiry

    def get_all_rental_inquiries(self) -> List[RentalInquiry]:
        with self._lock:
            inquiries = list(self._inquiries.values())
        return sorted(inquiries, key=lambda inquiry: inquiry.created_at, reverse=True)

    def get_rental_inquiry(self, inquiry_id: str) -> Optional[RentalInquiry]:
        with self._lock:
            return self._inquiries.get(inquiry_id)


def create_storage(settings: Settings) -> Storage:
    """Instantiate and initialise the backend named by ``settings.storage``."""

    backend = settings.storage
    if backend == "memory":
        storage: Storage = MemoryStorage()
    elif backend == "sqlite":
        from .database import SQLiteStorage, resolve_database_path

        db_path = resolve_database_path(settings.database_path)
        storage = SQLiteStorage(db_path)
        logger.info("Using SQLite storage at %s", db_path)
    else:
        raise ConfigurationError(
            f"Unknown storage backend '{backend}'. Expected one of: {', '.join(STORAGE_BACKENDS)}"
        )

    storage.initialize()
    return storage


__all__ = [
    "MemoryStorage",
    "STORAGE_BACKENDS",
    "Storage",
    "build_rental_inquiry",
    "create_storage",
    "generate_id",
    "next_timestamp",
]
