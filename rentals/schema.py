"""Validation rules for inquiry submissions and user records.

Validation failures are expected outcomes of user input, so the public
helpers return a :class:`ValidationResult` instead of raising.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Generic, List, Optional, Set, Tuple, Type, TypeVar

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .models import DryerHookupType, PackageInterest

MESSAGE_MAX_LENGTH = 1000

_NOT_AN_OBJECT = "Submission must be a JSON object"


class RentalInquiryInput(BaseModel):
    """Normalized rental inquiry submission, without id or creation time."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    error_messages: ClassVar[Dict[str, str]] = {
        "firstName": "First name is required",
        "lastName": "Last name is required",
        "email": "Valid email is required",
        "phone": "Phone number is required",
        "serviceAddress": "Service address is required",
        "packageInterest": "Please select a package",
        "preferredInstallDate": "Installation day preference is required",
        "dryerHookupType": "Please select dryer hookup type",
        "sixMonthAgreement": "You must agree to the six month minimum rental period",
        "autopayAgreement": "You must agree to have a card on file for autopay",
        "message": "Message must be text",
    }
    error_overrides: ClassVar[Dict[Tuple[str, str], str]] = {
        ("message", "string_too_long"): (
            f"Message must be {MESSAGE_MAX_LENGTH} characters or less"
        ),
    }

    first_name: str = Field(alias="firstName", min_length=1)
    last_name: str = Field(alias="lastName", min_length=1)
    email: str = Field(alias="email")
    phone: str = Field(alias="phone", min_length=1)
    service_address: str = Field(alias="serviceAddress", min_length=1)
    package_interest: PackageInterest = Field(alias="packageInterest")
    preferred_install_date: str = Field(alias="preferredInstallDate", min_length=1)
    dryer_hookup_type: DryerHookupType = Field(alias="dryerHookupType")
    six_month_agreement: bool = Field(alias="sixMonthAgreement", strict=True)
    autopay_agreement: bool = Field(alias="autopayAgreement", strict=True)
    message: Optional[str] = Field(default=None, alias="message", max_length=MESSAGE_MAX_LENGTH)

    @field_validator("email")
    @classmethod
    def _check_email_syntax(cls, value: str) -> str:
        # Syntax only, reserved domains such as .test included; the address is
        # stored exactly as entered.
        try:
            validate_email(
                value,
                check_deliverability=False,
                globally_deliverable=False,
                test_environment=True,
            )
        except EmailNotValidError as exc:
            raise ValueError(str(exc)) from exc
        return value

    @field_validator("message", mode="before")
    @classmethod
    def _blank_message_is_absent(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @field_validator("six_month_agreement", "autopay_agreement")
    @classmethod
    def _require_agreement(cls, value: bool) -> bool:
        if value is not True:
            raise ValueError("agreement must be accepted")
        return value


class UserInput(BaseModel):
    """Credentials for a new user account."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    error_messages: ClassVar[Dict[str, str]] = {
        "username": "Username is required",
        "password": "Password is required",
    }
    error_overrides: ClassVar[Dict[Tuple[str, str], str]] = {}

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def as_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class ValidationResult(Generic[ModelT]):
    """Either a validated model or the field errors that prevented it."""

    value: Optional[ModelT] = None
    errors: Tuple[FieldError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def error_dicts(self) -> List[Dict[str, str]]:
        return [error.as_dict() for error in self.errors]


def _translate_errors(model: Type[BaseModel], exc: ValidationError) -> Tuple[FieldError, ...]:
    messages: Dict[str, str] = getattr(model, "error_messages", {})
    overrides: Dict[Tuple[str, str], str] = getattr(model, "error_overrides", {})

    translated: List[FieldError] = []
    seen: Set[str] = set()
    for error in exc.errors():
        loc = error.get("loc") or ()
        field = str(loc[0]) if loc else ""
        if field in seen:
            continue
        seen.add(field)

        if not field:
            message = _NOT_AN_OBJECT
        else:
            message = overrides.get((field, error["type"])) or messages.get(field) or error["msg"]
        translated.append(FieldError(field=field, message=message))
    return tuple(translated)


def _validate(model: Type[ModelT], raw: object) -> ValidationResult[ModelT]:
    if not isinstance(raw, dict):
        return ValidationResult(errors=(FieldError(field="", message=_NOT_AN_OBJECT),))
    try:
        value = model.model_validate(raw)
    except ValidationError as exc:
        return ValidationResult(errors=_translate_errors(model, exc))
    return ValidationResult(value=value)


def validate_rental_inquiry(raw: object) -> ValidationResult[RentalInquiryInput]:
    """Validate an untyped inquiry submission."""

    return _validate(RentalInquiryInput, raw)


def validate_user(raw: object) -> ValidationResult[UserInput]:
    """Validate user creation input."""

    return _validate(UserInput, raw)


__all__ = [
    "FieldError",
    "MESSAGE_MAX_LENGTH",
    "RentalInquiryInput",
    "UserInput",
    "ValidationResult",
    "validate_rental_inquiry",
    "validate_user",
]
