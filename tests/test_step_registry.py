from __future__ import annotations

import logging

import pytest

from config import Settings
from core.errors import UnmappedFieldPathError
from models.onboarding import UltimateBeneficialOwner
from wizard.step_registry import (
    COMPANY_STEPS,
    INDIVIDUAL_STEPS,
    build_steps,
    get_step,
    has_documents_step,
    has_ownership_step,
    resolve_active_steps,
    resolve_nearest_active_step_key,
    step_keys,
)

OWNER = UltimateBeneficialOwner(firstName="Ada", lastName="Lovelace")

INVALID_CITY = {
    "__typename": "OnboardingInvalidStatusInfo",
    "errors": [{"field": "legalRepresentativePersonalAddress.city", "errors": ["Missing"]}],
}


@pytest.mark.parametrize(
    ("company_type", "country", "owners", "expected"),
    [
        ("Company", "FRA", [], True),
        ("Company", None, [], True),
        ("Other", "DEU", [], True),
        ("Association", "NLD", [], True),
        ("HomeOwnerAssociation", "NLD", [], True),
        ("Association", "FRA", [], False),
        ("SelfEmployed", "NLD", [], False),
        ("SelfEmployed", "FRA", [OWNER], True),
        ("Association", "FRA", [None], False),
    ],
)
def test_has_ownership_step(company_type, country, owners, expected) -> None:
    assert has_ownership_step(company_type, country, owners) is expected


@pytest.mark.parametrize(
    ("status", "purposes", "expected"),
    [
        ("WaitingForDocument", ["CompanyRegistration"], True),
        ("WaitingForDocument", [], False),
        ("PendingReview", ["CompanyRegistration"], False),
        ("Approved", ["CompanyRegistration"], False),
        (None, ["CompanyRegistration"], False),
    ],
)
def test_has_documents_step(status, purposes, expected) -> None:
    assert has_documents_step(status, purposes) is expected


def test_step_keys_are_unique() -> None:
    for steps in (COMPANY_STEPS, INDIVIDUAL_STEPS):
        keys = [step.key for step in steps]
        assert len(keys) == len(set(keys))


def test_company_steps_full_sequence(make_company, make_info, settings: Settings) -> None:
    info = make_info(
        make_company("Company"),
        documents={
            "status": "WaitingForDocument",
            "requiredSupportingDocumentPurposes": [{"name": "CompanyRegistration"}],
        },
    )

    steps = build_steps(info.account_holder, info, "onb-1", settings=settings)

    assert [step.id for step in steps] == [
        "Registration",
        "Organisation1",
        "Organisation2",
        "Ownership",
        "Documents",
        "Finalize",
    ]
    assert steps[0].url == "/onboardings/onb-1/registration"
    assert steps[-1].label == "step.title.swanApp"
    assert all(step.errors == () for step in steps)


def test_self_employed_with_owner_includes_ownership(make_company, make_info, settings: Settings) -> None:
    info = make_info(make_company("SelfEmployed", "FRA", owners=[{"firstName": "Ada"}]))

    keys = [step.id for step in build_steps(info.account_holder, info, "onb-1", settings=settings)]

    assert keys == ["Registration", "Organisation1", "Organisation2", "Ownership", "Finalize"]


def test_association_outside_netherlands_skips_ownership(make_company, make_info) -> None:
    info = make_info(make_company("Association", "FRA"))

    assert tuple(step.key for step in resolve_active_steps(info.account_holder, info)) == (
        "Registration",
        "Organisation1",
        "Organisation2",
        "Finalize",
    )


def test_individual_steps(make_individual, make_info, settings: Settings) -> None:
    info = make_info(make_individual())

    steps = build_steps(info.account_holder, info, "onb-1", settings=settings)

    assert [step.id for step in steps] == ["Email", "Location", "Details", "Finalize"]
    assert [step.url for step in steps] == [
        "/onboardings/onb-1/email",
        "/onboardings/onb-1/location",
        "/onboardings/onb-1/details",
        "/onboardings/onb-1/finalize",
    ]
    assert step_keys(info.account_holder) == ("Email", "Location", "Details", "Finalize")


def test_build_steps_is_deterministic(make_company, make_info, settings: Settings) -> None:
    info = make_info(make_company("Company"), status=INVALID_CITY)

    first = build_steps(info.account_holder, info, "onb-1", settings=settings)
    second = build_steps(info.account_holder, info, "onb-1", settings=settings)

    assert first == second


def test_build_steps_attaches_errors_to_owning_step(make_company, make_info, settings: Settings) -> None:
    info = make_info(make_company("Company"), status=INVALID_CITY)

    steps = {step.id: step for step in build_steps(info.account_holder, info, "onb-1", settings=settings)}

    assert [error.field_name for error in steps["Registration"].errors] == ["city"]
    assert steps["Registration"].errors[0].code == "Missing"
    assert steps["Organisation1"].errors == ()


def test_errors_never_change_step_inclusion(make_company, make_info, settings: Settings) -> None:
    valid = make_info(make_company("Association", "FRA"))
    invalid = make_info(make_company("Association", "FRA"), status=INVALID_CITY)

    valid_ids = [step.id for step in build_steps(valid.account_holder, valid, "onb-1", settings=settings)]
    invalid_ids = [step.id for step in build_steps(invalid.account_holder, invalid, "onb-1", settings=settings)]

    assert valid_ids == invalid_ids


def test_unmapped_paths_are_logged(make_company, make_info, settings: Settings, caplog) -> None:
    info = make_info(
        make_company("Company"),
        status={"status": "Invalid", "errors": [{"field": "unknownThing.x", "errors": ["Missing"]}]},
    )

    with caplog.at_level(logging.WARNING, logger="wizard.field_errors"):
        steps = build_steps(info.account_holder, info, "onb-1", settings=settings)

    assert all(step.errors == () for step in steps)
    assert "unknownThing.x" in caplog.text


def test_unmapped_paths_raise_in_strict_mode(make_company, make_info) -> None:
    info = make_info(
        make_company("Company"),
        status={"status": "Invalid", "errors": [{"field": "unknownThing.x", "errors": ["Missing"]}]},
    )

    with pytest.raises(UnmappedFieldPathError) as excinfo:
        build_steps(info.account_holder, info, "onb-1", settings=Settings(strict_field_mapping=True))

    assert excinfo.value.paths == (("unknownThing", "x"),)


def test_ownership_errors_hidden_when_step_inactive(make_company, make_info, settings: Settings, caplog) -> None:
    info = make_info(
        make_company("Association", "FRA"),
        status={
            "status": "Invalid",
            "errors": [{"field": "individualUltimateBeneficialOwners[0].firstName", "errors": ["Missing"]}],
        },
    )

    with caplog.at_level(logging.WARNING, logger="wizard.field_errors"):
        steps = build_steps(info.account_holder, info, "onb-1", settings=settings)

    assert "Ownership" not in [step.id for step in steps]
    assert "individualUltimateBeneficialOwners[0].firstName" in caplog.text


def test_resolve_nearest_active_step_key_falls_forward() -> None:
    ordered = tuple(step.key for step in COMPANY_STEPS)
    active = ("Registration", "Organisation1", "Organisation2", "Finalize")

    assert resolve_nearest_active_step_key("Ownership", active, ordered) == "Finalize"
    assert resolve_nearest_active_step_key("Organisation2", active, ordered) == "Organisation2"
    assert resolve_nearest_active_step_key("Bogus", active, ordered) == "Registration"


def test_get_step_lookup(make_individual, make_company, make_info) -> None:
    individual = make_info(make_individual()).account_holder
    company = make_info(make_company()).account_holder

    assert get_step("Email", individual).label == "step.title.email"
    assert get_step("Email", company) is None
    assert get_step("Ownership", company).label == "step.title.ownership"
