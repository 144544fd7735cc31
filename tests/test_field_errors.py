from __future__ import annotations

import logging

import pytest

from core.errors import UnmappedFieldPathError
from models.onboarding import ValidStatus, parse_mutation_result, parse_status_payload
from wizard.field_errors import (
    EMAIL_FIELDS,
    LOCATION_FIELDS,
    ORGANISATION1_FIELDS,
    OWNERSHIP_FIELDS,
    REGISTRATION_FIELDS,
    StepFieldMap,
    extract_server_validation_errors,
    find_unmapped_paths,
    map_errors,
    report_unmapped_paths,
    validation_error_message,
)


def _invalid(*fields: tuple[str, list[str]]):
    return parse_status_payload(
        {"status": "Invalid", "errors": [{"field": field, "errors": codes} for field, codes in fields]}
    )


def test_registration_maps_legal_representative_city() -> None:
    status = _invalid(("legalRepresentativePersonalAddress.city", ["InvalidString"]))

    errors = map_errors(status, REGISTRATION_FIELDS)

    assert len(errors) == 1
    assert errors[0].field_name == "city"
    assert errors[0].code == "Missing"
    assert errors[0].server_codes == ("InvalidString",)
    assert errors[0].path == ("legalRepresentativePersonalAddress", "city")


def test_unknown_paths_match_no_step() -> None:
    status = _invalid(("unknownThing.x", ["Missing"]))
    maps = [REGISTRATION_FIELDS, ORGANISATION1_FIELDS, OWNERSHIP_FIELDS, EMAIL_FIELDS, LOCATION_FIELDS]

    assert all(map_errors(status, field_map) == [] for field_map in maps)
    assert find_unmapped_paths(status, maps) == [("unknownThing", "x")]


def test_partial_prefix_does_not_match() -> None:
    status = _invalid(("legalRepresentativePersonalAddress", ["Missing"]), ("email.domain", ["Missing"]))

    assert map_errors(status, REGISTRATION_FIELDS) == []


@pytest.mark.parametrize(
    "path",
    [
        "individualUltimateBeneficialOwners",
        "individualUltimateBeneficialOwners[0].firstName",
        "individualUltimateBeneficialOwners[2].residencyAddress.city",
    ],
)
def test_ownership_wildcard_keeps_full_path(path: str) -> None:
    errors = map_errors(_invalid((path, ["Missing"])), OWNERSHIP_FIELDS)

    assert [error.field_name for error in errors] == [path]


def test_ownership_wildcard_requires_exact_prefix() -> None:
    status = _invalid(("individualUltimateBeneficialOwnersCount", ["Missing"]))

    assert map_errors(status, OWNERSHIP_FIELDS) == []


def test_non_invalid_status_has_no_errors() -> None:
    assert map_errors(ValidStatus(), REGISTRATION_FIELDS) == []
    assert find_unmapped_paths(ValidStatus(), [REGISTRATION_FIELDS]) == []


def test_finalized_status_drops_reported_errors() -> None:
    status = parse_status_payload(
        {"status": "Finalized", "errors": [{"field": "email", "errors": ["Missing"]}]}
    )

    assert map_errors(status, EMAIL_FIELDS) == []


def test_mapping_preserves_server_order() -> None:
    status = _invalid(
        ("residencyAddress.postalCode", ["Missing"]),
        ("name", ["Missing"]),
        ("residencyAddress.city", ["Missing"]),
    )

    assert [error.field_name for error in map_errors(status, ORGANISATION1_FIELDS)] == [
        "postalCode",
        "name",
        "city",
    ]


def test_from_table_field_names() -> None:
    field_map = StepFieldMap.from_table({"a.b": "b", "c": "c"}, wildcards=("items",))

    assert field_map.field_names == ("b", "c")
    assert field_map(("a", "b")) == "b"
    assert field_map(("items[1]", "x")) == "items[1].x"
    assert field_map(("a",)) is None


def test_extract_server_validation_errors_uses_step_map() -> None:
    rejection = parse_mutation_result(
        {
            "__typename": "ValidationRejection",
            "fields": [
                {"path": ["email"], "code": "InvalidString", "message": "bad"},
                {"path": ["language"], "code": "InvalidType", "message": "bad"},
            ],
        }
    )

    errors = extract_server_validation_errors(rejection, EMAIL_FIELDS)

    assert [(error.field_name, error.code) for error in errors] == [("email", "InvalidString")]
    assert extract_server_validation_errors(rejection) == []


def test_report_unmapped_paths_logs_each_path(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="wizard.field_errors"):
        report_unmapped_paths([("a", "b"), ("c",)])

    assert "'a.b'" in caplog.text
    assert "'c'" in caplog.text


def test_report_unmapped_paths_strict() -> None:
    with pytest.raises(UnmappedFieldPathError, match="a.b"):
        report_unmapped_paths([("a", "b")], strict=True)

    report_unmapped_paths([], strict=True)


@pytest.mark.parametrize(
    ("code", "value", "expected"),
    [
        ("Missing", None, "error.requiredField"),
        ("InvalidString", "", "error.requiredField"),
        ("InvalidString", "   ", "error.requiredField"),
        ("InvalidString", "abc", "error.invalidField"),
        ("InvalidType", None, "error.invalidField"),
        ("TooLong", "x" * 600, "error.invalidField"),
        ("TooShort", "x", "error.invalidField"),
        ("UnrecognizedKeys", None, "error.unrecognizedKeys"),
    ],
)
def test_validation_error_message(code: str, value: str | None, expected: str) -> None:
    assert validation_error_message(code, value) == expected
