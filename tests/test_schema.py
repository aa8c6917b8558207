"""Tests for inquiry and user validation."""

from __future__ import annotations

import pytest

from rentals.models import DRYER_HOOKUP_TYPES, PACKAGE_INTERESTS
from rentals.schema import MESSAGE_MAX_LENGTH, validate_rental_inquiry, validate_user


def _errors_by_field(result):
    return {error.field: error.message for error in result.errors}


def test_valid_submission_is_normalized(inquiry_payload) -> None:
    result = validate_rental_inquiry(inquiry_payload)

    assert result.ok
    assert result.errors == ()
    inquiry = result.value
    assert inquiry is not None
    assert inquiry.first_name == "Jane"
    assert inquiry.email == "jane@x.com"
    assert inquiry.six_month_agreement is True
    assert inquiry.message is None


def test_id_and_created_at_are_dropped(inquiry_payload) -> None:
    inquiry_payload.update({"id": "client-chosen", "createdAt": "2020-01-01T00:00:00Z"})

    result = validate_rental_inquiry(inquiry_payload)

    assert result.ok
    dumped = result.value.model_dump()
    assert "id" not in dumped
    assert "created_at" not in dumped


@pytest.mark.parametrize(
    ("field", "message"),
    [
        ("firstName", "First name is required"),
        ("lastName", "Last name is required"),
        ("phone", "Phone number is required"),
        ("serviceAddress", "Service address is required"),
        ("preferredInstallDate", "Installation day preference is required"),
    ],
)
def test_required_strings_reject_empty_values(inquiry_payload, field, message) -> None:
    inquiry_payload[field] = ""

    result = validate_rental_inquiry(inquiry_payload)

    assert not result.ok
    assert _errors_by_field(result) == {field: message}


def test_missing_required_string_uses_required_message(inquiry_payload) -> None:
    del inquiry_payload["phone"]

    result = validate_rental_inquiry(inquiry_payload)

    assert _errors_by_field(result) == {"phone": "Phone number is required"}


@pytest.mark.parametrize("email", ["", "not-an-email", "jane@", "@x.com", "jane doe@x.com"])
def test_invalid_email_is_rejected(inquiry_payload, email) -> None:
    inquiry_payload["email"] = email

    result = validate_rental_inquiry(inquiry_payload)

    assert _errors_by_field(result) == {"email": "Valid email is required"}


@pytest.mark.parametrize("email", ["Jane@X.COM", "jane@site.test", "jane.doe+rentals@example.com"])
def test_valid_email_is_kept_as_entered(inquiry_payload, email) -> None:
    inquiry_payload["email"] = email

    result = validate_rental_inquiry(inquiry_payload)

    assert result.ok, result.errors
    assert result.value.email == email


@pytest.mark.parametrize("package", PACKAGE_INTERESTS)
def test_each_package_interest_is_accepted(inquiry_payload, package) -> None:
    inquiry_payload["packageInterest"] = package

    result = validate_rental_inquiry(inquiry_payload)

    assert result.ok
    assert result.value.package_interest == package


def test_unknown_package_interest_is_rejected(inquiry_payload) -> None:
    inquiry_payload["packageInterest"] = "invalid-value"

    result = validate_rental_inquiry(inquiry_payload)

    assert _errors_by_field(result) == {"packageInterest": "Please select a package"}


@pytest.mark.parametrize("hookup", DRYER_HOOKUP_TYPES)
def test_each_dryer_hookup_type_is_accepted(inquiry_payload, hookup) -> None:
    inquiry_payload["dryerHookupType"] = hookup

    assert validate_rental_inquiry(inquiry_payload).ok


def test_unknown_dryer_hookup_type_is_rejected(inquiry_payload) -> None:
    inquiry_payload["dryerHookupType"] = "two-prong"

    result = validate_rental_inquiry(inquiry_payload)

    assert _errors_by_field(result) == {"dryerHookupType": "Please select dryer hookup type"}


@pytest.mark.parametrize("value", [False, "true", 1, None])
def test_six_month_agreement_must_be_true(inquiry_payload, value) -> None:
    inquiry_payload["sixMonthAgreement"] = value

    result = validate_rental_inquiry(inquiry_payload)

    assert _errors_by_field(result) == {
        "sixMonthAgreement": "You must agree to the six month minimum rental period"
    }


@pytest.mark.parametrize("value", [False, "true", 1, None])
def test_autopay_agreement_must_be_true(inquiry_payload, value) -> None:
    inquiry_payload["autopayAgreement"] = value

    result = validate_rental_inquiry(inquiry_payload)

    assert _errors_by_field(result) == {
        "autopayAgreement": "You must agree to have a card on file for autopay"
    }


def test_missing_agreements_are_rejected(inquiry_payload) -> None:
    del inquiry_payload["sixMonthAgreement"]
    del inquiry_payload["autopayAgreement"]

    result = validate_rental_inquiry(inquiry_payload)

    assert _errors_by_field(result) == {
        "sixMonthAgreement": "You must agree to the six month minimum rental period",
        "autopayAgreement": "You must agree to have a card on file for autopay",
    }


def test_message_at_limit_passes(inquiry_payload) -> None:
    inquiry_payload["message"] = "x" * MESSAGE_MAX_LENGTH

    result = validate_rental_inquiry(inquiry_payload)

    assert result.ok
    assert result.value.message == "x" * 1000


def test_message_over_limit_fails(inquiry_payload) -> None:
    inquiry_payload["message"] = "x" * (MESSAGE_MAX_LENGTH + 1)

    result = validate_rental_inquiry(inquiry_payload)

    assert _errors_by_field(result) == {"message": "Message must be 1000 characters or less"}


def test_empty_message_normalizes_to_none(inquiry_payload) -> None:
    inquiry_payload["message"] = ""

    result = validate_rental_inquiry(inquiry_payload)

    assert result.ok
    assert result.value.message is None


def test_non_text_message_is_rejected(inquiry_payload) -> None:
    inquiry_payload["message"] = 42

    result = validate_rental_inquiry(inquiry_payload)

    assert _errors_by_field(result) == {"message": "Message must be text"}


def test_errors_follow_field_order() -> None:
    result = validate_rental_inquiry({})

    fields = [error.field for error in result.errors]
    assert fields[:3] == ["firstName", "lastName", "email"]
    assert fields[-2:] == ["sixMonthAgreement", "autopayAgreement"]
    assert "message" not in fields


@pytest.mark.parametrize("raw", [None, [], "jane", 5])
def test_non_object_input_is_rejected(raw) -> None:
    result = validate_rental_inquiry(raw)

    assert result.error_dicts() == [{"field": "", "message": "Submission must be a JSON object"}]


def test_user_requires_username_and_password() -> None:
    result = validate_user({"username": "", "password": ""})

    assert _errors_by_field(result) == {
        "username": "Username is required",
        "password": "Password is required",
    }

    valid = validate_user({"username": "admin", "password": "hunter2"})
    assert valid.ok
    assert valid.value.username == "admin"
