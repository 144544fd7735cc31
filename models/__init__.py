"""Pydantic models for the onboarding snapshot and API payloads."""

from .onboarding import (
    AccountHolderInfo,
    CompanyAccountHolderInfo,
    CompanyType,
    ErrorCode,
    FieldError,
    FinalizedStatus,
    IndividualAccountHolderInfo,
    InvalidStatus,
    MutationResult,
    MutationSuccess,
    OnboardingInfo,
    OnboardingStatus,
    OtherRejection,
    SupportingDocumentCollection,
    SupportingDocumentCollectionStatus,
    UltimateBeneficialOwner,
    ValidStatus,
    ValidationFieldError,
    ValidationRejection,
    parse_mutation_result,
    parse_onboarding_info,
    parse_status_payload,
)

__all__ = [
    "AccountHolderInfo",
    "CompanyAccountHolderInfo",
    "CompanyType",
    "ErrorCode",
    "FieldError",
    "FinalizedStatus",
    "IndividualAccountHolderInfo",
    "InvalidStatus",
    "MutationResult",
    "MutationSuccess",
    "OnboardingInfo",
    "OnboardingStatus",
    "OtherRejection",
    "SupportingDocumentCollection",
    "SupportingDocumentCollectionStatus",
    "UltimateBeneficialOwner",
    "ValidStatus",
    "ValidationFieldError",
    "ValidationRejection",
    "parse_mutation_result",
    "parse_onboarding_info",
    "parse_status_payload",
]
