"""Map server-reported field paths onto the wizard steps that own them.

Every step declares a small table of ``FieldPathRule`` entries (an exact
dotted path and the form field it feeds) plus, for list-valued sections,
a ``PrefixWildcardRule`` that accepts any index-qualified path verbatim.
The same tables serve both the onboarding status (``map_errors``) and the
``ValidationRejection`` returned by update mutations
(``extract_server_validation_errors``).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Final

from core.errors import UnmappedFieldPathError
from models.onboarding import (
    DottedPath,
    ErrorCode,
    FinalizedStatus,
    InvalidStatus,
    ValidStatus,
    ValidationRejection,
)
from wizard.types import MISSING, ServerInvalidField

logger = logging.getLogger(__name__)

PathToField = Callable[[DottedPath], str | None]

UBO_PATH_PREFIX: Final[str] = "individualUltimateBeneficialOwners"


@dataclass(frozen=True)
class FieldPathRule:
    """Exact dotted path feeding a named form field."""

    pattern: DottedPath
    field_name: str

    def match(self, path: DottedPath) -> str | None:
        return self.field_name if tuple(path) == self.pattern else None


@dataclass(frozen=True)
class PrefixWildcardRule:
    """Accept every path under ``first_segment`` and keep it verbatim."""

    first_segment: str

    def match(self, path: DottedPath) -> str | None:
        if not path:
            return None
        head = path[0]
        if head == self.first_segment or head.startswith(f"{self.first_segment}["):
            return ".".join(path)
        return None


FieldRule = FieldPathRule | PrefixWildcardRule


@dataclass(frozen=True)
class StepFieldMap:
    """Ordered rules for one step; the first matching rule wins."""

    rules: tuple[FieldRule, ...] = ()

    def __call__(self, path: DottedPath) -> str | None:
        for rule in self.rules:
            field_name = rule.match(path)
            if field_name is not None:
                return field_name
        return None

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(rule.field_name for rule in self.rules if isinstance(rule, FieldPathRule))

    @classmethod
    def from_table(
        cls,
        table: Mapping[str, str],
        *,
        wildcards: Sequence[str] = (),
    ) -> "StepFieldMap":
        """Build a map from ``{"dotted.path": "fieldName"}`` plus wildcard prefixes."""

        rules: list[FieldRule] = [
            FieldPathRule(pattern=tuple(path.split(".")), field_name=field_name)
            for path, field_name in table.items()
        ]
        rules.extend(PrefixWildcardRule(first_segment=prefix) for prefix in wildcards)
        return cls(rules=tuple(rules))


EMPTY_FIELD_MAP: Final[StepFieldMap] = StepFieldMap()

REGISTRATION_FIELDS: Final[StepFieldMap] = StepFieldMap.from_table(
    {
        "email": "email",
        "legalRepresentativePersonalAddress.addressLine1": "address",
        "legalRepresentativePersonalAddress.city": "city",
        "legalRepresentativePersonalAddress.postalCode": "postalCode",
        "legalRepresentativePersonalAddress.country": "country",
    }
)

ORGANISATION1_FIELDS: Final[StepFieldMap] = StepFieldMap.from_table(
    {
        "name": "name",
        "registrationNumber": "registrationNumber",
        "vatNumber": "vatNumber",
        "taxIdentificationNumber": "taxIdentificationNumber",
        "residencyAddress.addressLine1": "address",
        "residencyAddress.city": "city",
        "residencyAddress.postalCode": "postalCode",
    }
)

ORGANISATION2_FIELDS: Final[StepFieldMap] = StepFieldMap.from_table(
    {
        "businessActivity": "businessActivity",
        "businessActivityDescription": "businessActivityDescription",
        "monthlyPaymentVolume": "monthlyPaymentVolume",
    }
)

OWNERSHIP_FIELDS: Final[StepFieldMap] = StepFieldMap.from_table({}, wildcards=(UBO_PATH_PREFIX,))

EMAIL_FIELDS: Final[StepFieldMap] = StepFieldMap.from_table({"email": "email"})

LOCATION_FIELDS: Final[StepFieldMap] = StepFieldMap.from_table(
    {
        "residencyAddress.country": "country",
        "residencyAddress.city": "city",
        "residencyAddress.addressLine1": "address",
        "residencyAddress.postalCode": "postalCode",
    }
)

DETAILS_FIELDS: Final[StepFieldMap] = StepFieldMap.from_table(
    {
        "employmentStatus": "employmentStatus",
        "monthlyIncome": "monthlyIncome",
        "taxIdentificationNumber": "taxIdentificationNumber",
    }
)


@dataclass(frozen=True)
class ServerValidationError:
    """Field-level failure from an update mutation, with the real error code."""

    field_name: str
    code: ErrorCode
    message: str = ""


OnboardingStatusLike = InvalidStatus | ValidStatus | FinalizedStatus


def map_errors(status: OnboardingStatusLike, path_to_field: PathToField) -> list[ServerInvalidField]:
    """Return the errors of ``status`` recognized by ``path_to_field``.

    Only an invalid status carries errors. Every match is reported with the
    ``"Missing"`` sentinel; the codes the server sent are kept in
    ``server_codes``. Paths the step does not recognize are skipped here and
    reported globally by :func:`find_unmapped_paths`.
    """

    if not isinstance(status, InvalidStatus):
        return []
    mapped: list[ServerInvalidField] = []
    for error in status.errors:
        field_name = path_to_field(error.field)
        if field_name is None:
            continue
        mapped.append(
            ServerInvalidField(
                field_name=field_name,
                code=MISSING,
                server_codes=tuple(error.codes),
                path=tuple(error.field),
            )
        )
    return mapped


def extract_server_validation_errors(
    rejection: ValidationRejection,
    path_to_field: PathToField = lambda _path: None,
) -> list[ServerValidationError]:
    """Map the fields of a mutation ``ValidationRejection`` onto form field names."""

    extracted: list[ServerValidationError] = []
    for field in rejection.fields:
        field_name = path_to_field(field.path)
        if field_name is not None:
            extracted.append(ServerValidationError(field_name=field_name, code=field.code, message=field.message))
    return extracted


def find_unmapped_paths(
    status: OnboardingStatusLike,
    path_to_fields: Iterable[PathToField],
) -> list[DottedPath]:
    """Return error paths of ``status`` that none of ``path_to_fields`` recognizes."""

    if not isinstance(status, InvalidStatus):
        return []
    mappers = tuple(path_to_fields)
    unmapped: list[DottedPath] = []
    for error in status.errors:
        if any(mapper(error.field) is not None for mapper in mappers):
            continue
        if error.field not in unmapped:
            unmapped.append(error.field)
    return unmapped


def report_unmapped_paths(paths: Sequence[DottedPath], *, strict: bool = False) -> None:
    """Log (or raise for, in strict mode) server paths no step displays."""

    if not paths:
        return
    if strict:
        raise UnmappedFieldPathError(paths)
    for path in paths:
        logger.warning("Server validation error on '%s' is not shown by any wizard step", ".".join(path))


def validation_error_message(code: ErrorCode | str, current_value: str | None = None) -> str:
    """Return the message key shown for ``code`` next to a field."""

    normalized = ErrorCode(code)
    if normalized is ErrorCode.MISSING:
        return "error.requiredField"
    if normalized is ErrorCode.INVALID_STRING:
        if current_value is None or not current_value.strip():
            return "error.requiredField"
        return "error.invalidField"
    if normalized in (ErrorCode.INVALID_TYPE, ErrorCode.TOO_LONG, ErrorCode.TOO_SHORT):
        return "error.invalidField"
    return "error.unrecognizedKeys"


__all__ = [
    "DETAILS_FIELDS",
    "EMAIL_FIELDS",
    "EMPTY_FIELD_MAP",
    "FieldPathRule",
    "LOCATION_FIELDS",
    "ORGANISATION1_FIELDS",
    "ORGANISATION2_FIELDS",
    "OWNERSHIP_FIELDS",
    "PathToField",
    "PrefixWildcardRule",
    "REGISTRATION_FIELDS",
    "ServerValidationError",
    "StepFieldMap",
    "UBO_PATH_PREFIX",
    "extract_server_validation_errors",
    "find_unmapped_paths",
    "map_errors",
    "report_unmapped_paths",
    "validation_error_message",
]
