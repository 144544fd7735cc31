"""Form definitions for each wizard step.

Only what the engine needs to decide whether a step may be submitted: the
field names (matching the step's server field map), how to sanitize raw
widget values and which local validators apply.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Final

from core.errors import UnknownStepError
from models.onboarding import OnboardingInfo
from wizard.field_errors import validation_error_message
from wizard.types import ServerInvalidField
from wizard.validation import (
    Validator,
    combine_validators,
    requires_terms_acceptance,
    validate_email,
    validate_max_length,
    validate_required,
    validate_required_boolean,
    validate_terms_accepted,
)

Sanitizer = Callable[[object], object]

BUSINESS_ACTIVITY_DESCRIPTION_MAX_LENGTH: Final[int] = 500

# Account countries where the legal representative address is mandatory.
ADDRESS_REQUIRED_COUNTRIES: Final[frozenset[str]] = frozenset({"DEU", "NLD"})

TCU_FIELD: Final[str] = "tcuAccepted"


def strip_text(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


@dataclass(frozen=True)
class FormField:
    name: str
    validator: Validator | None = None
    sanitizer: Sanitizer | None = strip_text


@dataclass(frozen=True)
class StepForm:
    """The local form of one step."""

    step_id: str
    fields: tuple[FormField, ...]

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(field.name for field in self.fields)

    def sanitize(self, values: Mapping[str, object]) -> dict[str, object]:
        """Return the values of known fields after sanitizing them."""

        cleaned: dict[str, object] = {}
        for field in self.fields:
            value = values.get(field.name)
            cleaned[field.name] = field.sanitizer(value) if field.sanitizer else value
        return cleaned

    def validate(self, values: Mapping[str, object]) -> dict[str, str]:
        """Return ``{field: message}`` for every field failing local validation."""

        cleaned = self.sanitize(values)
        errors: dict[str, str] = {}
        for field in self.fields:
            if field.validator is None:
                continue
            message = field.validator(cleaned[field.name])
            if message is not None:
                errors[field.name] = message
        return errors


def _required(name: str) -> FormField:
    return FormField(name=name, validator=validate_required)


def _optional(name: str) -> FormField:
    return FormField(name=name)


def _tcu_field(account_country: str | None) -> tuple[FormField, ...]:
    if not requires_terms_acceptance(account_country):
        return ()
    return (
        FormField(
            name=TCU_FIELD,
            validator=combine_validators(validate_required_boolean, validate_terms_accepted),
            sanitizer=None,
        ),
    )


def _email_form(info: OnboardingInfo) -> tuple[FormField, ...]:
    return (
        FormField(name="email", validator=combine_validators(validate_required, validate_email)),
        *_tcu_field(info.account_country),
    )


def _location_form(_info: OnboardingInfo) -> tuple[FormField, ...]:
    return (
        _required("country"),
        _required("city"),
        _required("address"),
        _required("postalCode"),
    )


def _details_form(_info: OnboardingInfo) -> tuple[FormField, ...]:
    return (
        _required("employmentStatus"),
        _required("monthlyIncome"),
        _optional("taxIdentificationNumber"),
    )


def _registration_form(info: OnboardingInfo) -> tuple[FormField, ...]:
    address_required = (info.account_country or "").upper() in ADDRESS_REQUIRED_COUNTRIES
    address_field = _required if address_required else _optional
    return (
        FormField(name="email", validator=combine_validators(validate_required, validate_email)),
        address_field("address"),
        address_field("city"),
        address_field("postalCode"),
        address_field("country"),
        *_tcu_field(info.account_country),
    )


def _organisation1_form(_info: OnboardingInfo) -> tuple[FormField, ...]:
    return (
        _required("name"),
        _optional("registrationNumber"),
        _optional("vatNumber"),
        _optional("taxIdentificationNumber"),
        _required("address"),
        _required("city"),
        _required("postalCode"),
    )


def _organisation2_form(_info: OnboardingInfo) -> tuple[FormField, ...]:
    return (
        _required("businessActivity"),
        FormField(
            name="businessActivityDescription",
            validator=combine_validators(
                validate_required,
                validate_max_length(BUSINESS_ACTIVITY_DESCRIPTION_MAX_LENGTH),
            ),
        ),
        FormField(name="monthlyPaymentVolume", sanitizer=None),
    )


_FORM_BUILDERS: Final[dict[str, Callable[[OnboardingInfo], tuple[FormField, ...]]]] = {
    "Email": _email_form,
    "Location": _location_form,
    "Details": _details_form,
    "Registration": _registration_form,
    "Organisation1": _organisation1_form,
    "Organisation2": _organisation2_form,
    "Ownership": lambda _info: (),
    "Documents": lambda _info: (),
    "Finalize": lambda _info: (),
}


def form_for_step(step_id: str, info: OnboardingInfo) -> StepForm:
    """Return the form of ``step_id`` for the current onboarding snapshot."""

    try:
        builder = _FORM_BUILDERS[step_id]
    except KeyError as exc:
        raise UnknownStepError(step_id) from exc
    return StepForm(step_id=step_id, fields=builder(info))


def server_error_messages(
    errors: Iterable[ServerInvalidField],
    values: Mapping[str, object] | None = None,
) -> dict[str, str]:
    """Return the message to show under each field carrying a server error."""

    current = values or {}
    messages: dict[str, str] = {}
    for error in errors:
        if error.field_name in messages:
            continue
        value = current.get(error.field_name)
        messages[error.field_name] = validation_error_message(
            error.code,
            value if isinstance(value, str) else None,
        )
    return messages


__all__ = [
    "ADDRESS_REQUIRED_COUNTRIES",
    "BUSINESS_ACTIVITY_DESCRIPTION_MAX_LENGTH",
    "FormField",
    "StepForm",
    "TCU_FIELD",
    "form_for_step",
    "server_error_messages",
    "strip_text",
]
