"""Domain records stored by the rental inquiry service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional, get_args

PackageInterest = Literal[
    "washer-dryer-used",
    "washer-dryer-new",
    "washer-only",
    "dryer-only",
    "repair-request",
]

DryerHookupType = Literal[
    "three-prong",
    "four-prong",
    "gas",
    "not-sure",
]

PACKAGE_INTERESTS = get_args(PackageInterest)
DRYER_HOOKUP_TYPES = get_args(DryerHookupType)


@dataclass(frozen=True)
class User:
    """Represents a user account held by the storage backend."""

    id: str
    username: str
    password: str


@dataclass(frozen=True)
class RentalInquiry:
    """A stored rental-service request.

    The agreement flags are kept as the strings ``"true"``/``"false"`` so the
    record serializes the same way regardless of the storage backend.
    """

    id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    service_address: str
    package_interest: str
    preferred_install_date: str
    dryer_hookup_type: str
    six_month_agreement: str
    autopay_agreement: str
    message: Optional[str]
    created_at: datetime


__all__ = [
    "DRYER_HOOKUP_TYPES",
    "DryerHookupType",
    "PACKAGE_INTERESTS",
    "PackageInterest",
    "RentalInquiry",
    "User",
]
