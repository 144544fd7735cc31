"""Client-side validators run before any mutation is sent.

Every validator takes the raw field value and returns a message key or
``None`` when the value is acceptable.
"""

from __future__ import annotations

from typing import Callable, Final

from pydantic import EmailStr, TypeAdapter, ValidationError

Validator = Callable[[object], "str | None"]

REQUIRED_FIELD: Final[str] = "error.requiredField"
INVALID_EMAIL: Final[str] = "error.invalidEmail"
TOO_LONG: Final[str] = "error.tooLong"
TERMS_NOT_ACCEPTED: Final[str] = "step.finalize.termsError"

TERMS_REQUIRED_COUNTRIES: Final[frozenset[str]] = frozenset({"DEU"})

_EMAIL_ADAPTER: Final[TypeAdapter[str]] = TypeAdapter(EmailStr)


def requires_terms_acceptance(account_country: str | None) -> bool:
    """Return ``True`` when the account country must accept the terms up front."""

    return (account_country or "").upper() in TERMS_REQUIRED_COUNTRIES


def validate_required(value: object) -> str | None:
    if value is None:
        return REQUIRED_FIELD
    if isinstance(value, str) and not value.strip():
        return REQUIRED_FIELD
    return None


def validate_required_boolean(value: object) -> str | None:
    """Checkbox-style fields must hold an explicit ``True``/``False``."""

    if not isinstance(value, bool):
        return REQUIRED_FIELD
    return None


def validate_email(value: object) -> str | None:
    if not isinstance(value, str):
        return INVALID_EMAIL
    try:
        _EMAIL_ADAPTER.validate_python(value.strip())
    except ValidationError:
        return INVALID_EMAIL
    return None


def validate_max_length(max_length: int) -> Validator:
    """Return a validator rejecting strings longer than ``max_length``.

    Empty values pass; pair with :func:`validate_required` when needed.
    """

    def _validate(value: object) -> str | None:
        if not value or not isinstance(value, str):
            return None
        if len(value) > max_length:
            return TOO_LONG
        return None

    return _validate


def validate_terms_accepted(value: object) -> str | None:
    if value is False:
        return TERMS_NOT_ACCEPTED
    return None


def combine_validators(*validators: Validator) -> Validator:
    """Run ``validators`` in order and return the first message."""

    def _validate(value: object) -> str | None:
        for validator in validators:
            message = validator(value)
            if message is not None:
                return message
        return None

    return _validate


__all__ = [
    "INVALID_EMAIL",
    "REQUIRED_FIELD",
    "TERMS_NOT_ACCEPTED",
    "TOO_LONG",
    "Validator",
    "combine_validators",
    "requires_terms_acceptance",
    "validate_email",
    "validate_max_length",
    "validate_required",
    "validate_required_boolean",
    "validate_terms_accepted",
]
