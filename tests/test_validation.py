from __future__ import annotations

import pytest

from core.errors import UnknownStepError
from wizard.forms import (
    BUSINESS_ACTIVITY_DESCRIPTION_MAX_LENGTH,
    TCU_FIELD,
    form_for_step,
    server_error_messages,
)
from wizard.types import ServerInvalidField
from wizard.validation import (
    INVALID_EMAIL,
    REQUIRED_FIELD,
    TERMS_NOT_ACCEPTED,
    TOO_LONG,
    combine_validators,
    requires_terms_acceptance,
    validate_email,
    validate_max_length,
    validate_required,
    validate_required_boolean,
    validate_terms_accepted,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, REQUIRED_FIELD), ("", REQUIRED_FIELD), ("  ", REQUIRED_FIELD), ("x", None), (0, None)],
)
def test_validate_required(value: object, expected: str | None) -> None:
    assert validate_required(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, REQUIRED_FIELD), ("yes", REQUIRED_FIELD), (True, None), (False, None)],
)
def test_validate_required_boolean(value: object, expected: str | None) -> None:
    assert validate_required_boolean(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [("ada@acme.fr", None), (" ada@acme.fr ", None), ("not-an-email", INVALID_EMAIL), (None, INVALID_EMAIL)],
)
def test_validate_email(value: object, expected: str | None) -> None:
    assert validate_email(value) == expected


def test_validate_max_length() -> None:
    validator = validate_max_length(3)

    assert validator("") is None
    assert validator(None) is None
    assert validator("abc") is None
    assert validator("abcd") == TOO_LONG


def test_terms_validators() -> None:
    assert validate_terms_accepted(False) == TERMS_NOT_ACCEPTED
    assert validate_terms_accepted(True) is None
    assert validate_terms_accepted(None) is None
    assert requires_terms_acceptance("DEU")
    assert requires_terms_acceptance("deu")
    assert not requires_terms_acceptance("FRA")
    assert not requires_terms_acceptance(None)


def test_combine_validators_returns_first_message() -> None:
    validator = combine_validators(validate_required, validate_email)

    assert validator("") == REQUIRED_FIELD
    assert validator("nope") == INVALID_EMAIL
    assert validator("ada@acme.fr") is None


def test_email_form_requires_terms_for_germany(make_individual, make_info) -> None:
    german = make_info(make_individual(), account_country="DEU")
    french = make_info(make_individual(), account_country="FRA")

    assert form_for_step("Email", german).field_names == ("email", TCU_FIELD)
    assert form_for_step("Email", french).field_names == ("email",)
    assert form_for_step("Email", german).validate({"email": "ada@acme.fr", TCU_FIELD: False}) == {
        TCU_FIELD: TERMS_NOT_ACCEPTED
    }
    assert form_for_step("Email", german).validate({"email": "ada@acme.fr"}) == {TCU_FIELD: REQUIRED_FIELD}


def test_form_sanitizes_text(make_individual, make_info) -> None:
    form = form_for_step("Location", make_info(make_individual()))

    assert form.sanitize({"country": " FRA ", "city": "Paris ", "address": "1 rue", "postalCode": "75001"}) == {
        "country": "FRA",
        "city": "Paris",
        "address": "1 rue",
        "postalCode": "75001",
    }
    assert form.validate({"country": "FRA", "city": "   "}) == {
        "city": REQUIRED_FIELD,
        "address": REQUIRED_FIELD,
        "postalCode": REQUIRED_FIELD,
    }


@pytest.mark.parametrize(("country", "required"), [("DEU", True), ("NLD", True), ("FRA", False)])
def test_registration_address_requirement(make_company, make_info, country: str, required: bool) -> None:
    form = form_for_step("Registration", make_info(make_company(), account_country=country))

    errors = form.validate({"email": "ada@acme.fr", TCU_FIELD: True})

    assert ("city" in errors) is required


def test_business_activity_description_length(make_company, make_info) -> None:
    form = form_for_step("Organisation2", make_info(make_company()))
    too_long = "x" * (BUSINESS_ACTIVITY_DESCRIPTION_MAX_LENGTH + 1)

    assert form.validate({"businessActivity": "Tech", "businessActivityDescription": too_long}) == {
        "businessActivityDescription": TOO_LONG
    }


def test_steps_without_forms(make_company, make_info) -> None:
    info = make_info(make_company())

    for step_id in ("Ownership", "Documents", "Finalize"):
        assert form_for_step(step_id, info).validate({}) == {}
    with pytest.raises(UnknownStepError):
        form_for_step("Bogus", info)


def test_server_error_messages() -> None:
    errors = [ServerInvalidField(field_name="city"), ServerInvalidField(field_name="city")]

    assert server_error_messages(errors) == {"city": "error.requiredField"}
