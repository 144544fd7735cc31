"""Registry for onboarding wizard steps and their canonical order."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Final

from config import Settings, load_settings
from models.onboarding import (
    AccountHolderInfo,
    CompanyAccountHolderInfo,
    CompanyType,
    OnboardingInfo,
    SupportingDocumentCollectionStatus,
    UltimateBeneficialOwner,
)
from wizard.field_errors import (
    DETAILS_FIELDS,
    EMAIL_FIELDS,
    EMPTY_FIELD_MAP,
    LOCATION_FIELDS,
    ORGANISATION1_FIELDS,
    ORGANISATION2_FIELDS,
    OWNERSHIP_FIELDS,
    REGISTRATION_FIELDS,
    StepFieldMap,
    find_unmapped_paths,
    map_errors,
    report_unmapped_paths,
)
from wizard.routes import route_url
from wizard.types import StepId, WizardStep

logger = logging.getLogger(__name__)

StepPredicate = Callable[[AccountHolderInfo, OnboardingInfo], bool]

OWNERSHIP_COMPANY_TYPES: Final[frozenset[CompanyType]] = frozenset({CompanyType.COMPANY, CompanyType.OTHER})
OWNERSHIP_ASSOCIATION_TYPES: Final[frozenset[CompanyType]] = frozenset(
    {CompanyType.ASSOCIATION, CompanyType.HOME_OWNER_ASSOCIATION}
)
OWNERSHIP_ASSOCIATION_COUNTRY: Final[str] = "NLD"


@dataclass(frozen=True)
class StepDefinition:
    """Metadata for an individual wizard step."""

    key: StepId
    label: str
    field_map: StepFieldMap = EMPTY_FIELD_MAP
    is_active: StepPredicate | None = None


def has_ownership_step(
    company_type: CompanyType | str,
    residency_country: str | None,
    ultimate_beneficial_owners: Sequence[UltimateBeneficialOwner | object],
) -> bool:
    """Return ``True`` when a company must declare its beneficial owners.

    The three rules are a disjunction: any one of them is sufficient.
    """

    normalized = CompanyType(company_type)
    if normalized in OWNERSHIP_COMPANY_TYPES:
        return True
    if residency_country == OWNERSHIP_ASSOCIATION_COUNTRY and normalized in OWNERSHIP_ASSOCIATION_TYPES:
        return True
    return any(owner is not None for owner in ultimate_beneficial_owners)


def has_documents_step(
    status: SupportingDocumentCollectionStatus | str | None,
    required_purposes: Sequence[str],
) -> bool:
    """Return ``True`` when supporting documents are still expected."""

    return status == SupportingDocumentCollectionStatus.WAITING_FOR_DOCUMENT and len(required_purposes) > 0


def _ownership_step_active(account_holder: AccountHolderInfo, _info: OnboardingInfo) -> bool:
    if not isinstance(account_holder, CompanyAccountHolderInfo):
        return False
    return has_ownership_step(
        account_holder.company_type,
        account_holder.residency_country,
        account_holder.ultimate_beneficial_owners,
    )


def _documents_step_active(_account_holder: AccountHolderInfo, info: OnboardingInfo) -> bool:
    collection = info.supporting_document_collection
    if collection is None:
        return False
    return has_documents_step(collection.status, collection.required_purposes)


FINALIZE_STEP: Final[StepDefinition] = StepDefinition(key="Finalize", label="step.title.swanApp")

COMPANY_STEPS: Final[tuple[StepDefinition, ...]] = (
    StepDefinition(key="Registration", label="step.title.registration", field_map=REGISTRATION_FIELDS),
    StepDefinition(key="Organisation1", label="step.title.organisationPart1", field_map=ORGANISATION1_FIELDS),
    StepDefinition(key="Organisation2", label="step.title.organisationPart2", field_map=ORGANISATION2_FIELDS),
    StepDefinition(
        key="Ownership",
        label="step.title.ownership",
        field_map=OWNERSHIP_FIELDS,
        is_active=_ownership_step_active,
    ),
    StepDefinition(key="Documents", label="step.title.document", is_active=_documents_step_active),
    FINALIZE_STEP,
)

INDIVIDUAL_STEPS: Final[tuple[StepDefinition, ...]] = (
    StepDefinition(key="Email", label="step.title.email", field_map=EMAIL_FIELDS),
    StepDefinition(key="Location", label="step.title.address", field_map=LOCATION_FIELDS),
    StepDefinition(key="Details", label="step.title.occupation", field_map=DETAILS_FIELDS),
    FINALIZE_STEP,
)


def step_definitions(account_holder: AccountHolderInfo) -> tuple[StepDefinition, ...]:
    """Return every step of the flow matching ``account_holder``."""

    if isinstance(account_holder, CompanyAccountHolderInfo):
        return COMPANY_STEPS
    return INDIVIDUAL_STEPS


def step_keys(account_holder: AccountHolderInfo) -> tuple[str, ...]:
    """Return wizard step keys in canonical order, active or not."""

    return tuple(step.key for step in step_definitions(account_holder))


def resolve_active_steps(account_holder: AccountHolderInfo, info: OnboardingInfo) -> tuple[StepDefinition, ...]:
    """Return the steps that apply to ``account_holder`` in canonical order."""

    active: list[StepDefinition] = []
    for step in step_definitions(account_holder):
        if step.is_active and not step.is_active(account_holder, info):
            continue
        active.append(step)
    return tuple(active)



def resolve_nearest_active_step_key(
    target_key: str,
    active_keys: Sequence[str],
    ordered_keys: Sequence[str],
) -> str | None:
    """Return the nearest active step key for ``target_key``."""

    if target_key in active_keys:
        return target_key
    if target_key in ordered_keys:
        start_index = list(ordered_keys).index(target_key)
        for key in ordered_keys[start_index + 1 :]:
            if key in active_keys:
                return key
    return active_keys[0] if active_keys else None


def get_step(key: str, account_holder: AccountHolderInfo) -> StepDefinition | None:
    """Lookup step metadata by key within the flow of ``account_holder``."""

    return next((step for step in step_definitions(account_holder) if step.key == key), None)


def build_steps(
    account_holder: AccountHolderInfo,
    info: OnboardingInfo,
    onboarding_id: str,
    *,
    settings: Settings | None = None,
) -> list[WizardStep]:
    """Derive the ordered step list, each step carrying its mapped server errors.

    Inclusion depends only on the account holder and the supporting document
    collection, never on whether a step has errors.
    """

    resolved = settings or load_settings()
    active = resolve_active_steps(account_holder, info)
    steps = [
        WizardStep(
            id=step.key,
            url=route_url(step.key, onboarding_id, settings=resolved),
            label=step.label,
            errors=tuple(map_errors(info.status, step.field_map)),
        )
        for step in active
    ]
    logger.debug("Active steps for onboarding %s: %s", onboarding_id, ", ".join(step.key for step in active))
    unmapped = find_unmapped_paths(info.status, [step.field_map for step in active])
    report_unmapped_paths(unmapped, strict=resolved.strict_field_mapping)
    return steps


__all__ = [
    "COMPANY_STEPS",
    "FINALIZE_STEP",
    "INDIVIDUAL_STEPS",
    "StepDefinition",
    "StepPredicate",
    "build_steps",
    "get_step",
    "has_documents_step",
    "has_ownership_step",
    "resolve_active_steps",
    "resolve_nearest_active_step_key",
    "step_definitions",
    "step_keys",
]
