"""Pydantic models for the onboarding snapshot and the server payloads it is built from."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from core.errors import PayloadError

DottedPath = tuple[str, ...]


def split_dotted_path(value: object) -> object:
    """Split ``"a.b.c"`` into ``("a", "b", "c")``; leave sequences untouched."""

    if isinstance(value, str):
        return tuple(segment for segment in value.split(".") if segment)
    return value


class ErrorCode(StrEnum):
    """Validation codes reported by the onboarding API."""

    MISSING = "Missing"
    INVALID_STRING = "InvalidString"
    INVALID_TYPE = "InvalidType"
    TOO_LONG = "TooLong"
    TOO_SHORT = "TooShort"
    UNRECOGNIZED_KEYS = "UnrecognizedKeys"


class CompanyType(StrEnum):
    """Legal nature of a company account holder."""

    COMPANY = "Company"
    ASSOCIATION = "Association"
    HOME_OWNER_ASSOCIATION = "HomeOwnerAssociation"
    SELF_EMPLOYED = "SelfEmployed"
    OTHER = "Other"


class SupportingDocumentCollectionStatus(StrEnum):
    """Lifecycle of the supporting document collection."""

    WAITING_FOR_DOCUMENT = "WaitingForDocument"
    PENDING_REVIEW = "PendingReview"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELED = "Canceled"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


_ACCOUNT_HOLDER_TYPENAMES: dict[str, str] = {
    "OnboardingIndividualAccountHolderInfo": "Individual",
    "OnboardingCompanyAccountHolderInfo": "Company",
}

_STATUS_TYPENAMES: dict[str, str] = {
    "OnboardingInvalidStatusInfo": "Invalid",
    "OnboardingValidStatusInfo": "Valid",
    "OnboardingFinalizedStatusInfo": "Finalized",
}


def _lift_residency_country(value: object) -> object:
    """Accept ``residencyAddress.country`` as the residency country."""

    if not isinstance(value, Mapping):
        return value
    data = dict(value)
    address = data.get("residencyAddress")
    if data.get("residencyCountry") is None and isinstance(address, Mapping):
        data["residencyCountry"] = address.get("country")
    return data


class UltimateBeneficialOwner(_Frozen):
    """Natural person owning or controlling a company account holder."""

    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    birth_date: Optional[str] = Field(default=None, alias="birthDate")
    birth_country: Optional[str] = Field(default=None, alias="birthCountryCode")
    residency_country: Optional[str] = Field(default=None, alias="residencyCountry")


class IndividualAccountHolderInfo(_Frozen):
    """Account holder data for a natural person."""

    type: Literal["Individual"] = "Individual"
    residency_country: Optional[str] = Field(default=None, alias="residencyCountry")
    employment_status: Optional[str] = Field(default=None, alias="employmentStatus")
    monthly_income: Optional[str] = Field(default=None, alias="monthlyIncome")
    tax_identification_number: Optional[str] = Field(default=None, alias="taxIdentificationNumber")

    @model_validator(mode="before")
    @classmethod
    def _flatten_address(cls, value: object) -> object:
        return _lift_residency_country(value)


class CompanyAccountHolderInfo(_Frozen):
    """Account holder data for a legal entity."""

    type: Literal["Company"] = "Company"
    company_type: CompanyType = Field(alias="companyType")
    residency_country: Optional[str] = Field(default=None, alias="residencyCountry")
    ultimate_beneficial_owners: tuple[UltimateBeneficialOwner, ...] = Field(
        default=(),
        alias="individualUltimateBeneficialOwners",
    )
    name: Optional[str] = None
    registration_number: Optional[str] = Field(default=None, alias="registrationNumber")

    @model_validator(mode="before")
    @classmethod
    def _flatten_address(cls, value: object) -> object:
        return _lift_residency_country(value)

    @field_validator("ultimate_beneficial_owners", mode="before")
    @classmethod
    def _drop_null_owners(cls, value: object) -> object:
        if value is None:
            return ()
        if isinstance(value, (list, tuple)):
            return tuple(item for item in value if item is not None)
        return value

    @field_validator("residency_country", mode="before")
    @classmethod
    def _normalise_country(cls, value: object) -> object:
        if isinstance(value, str):
            stripped = value.strip().upper()
            return stripped or None
        return value


AccountHolderInfo = Annotated[
    Union[IndividualAccountHolderInfo, CompanyAccountHolderInfo],
    Field(discriminator="type"),
]


class FieldError(_Frozen):
    """Server-side validation failure for one dotted field path."""

    field: DottedPath
    codes: tuple[ErrorCode, ...] = Field(default=(), alias="errors")

    @field_validator("field", mode="before")
    @classmethod
    def _split_field(cls, value: object) -> object:
        return split_dotted_path(value)

    @property
    def dotted(self) -> str:
        return ".".join(self.field)


class InvalidStatus(_Frozen):
    status: Literal["Invalid"] = "Invalid"
    errors: tuple[FieldError, ...] = ()


class ValidStatus(_Frozen):
    status: Literal["Valid"] = "Valid"


class FinalizedStatus(_Frozen):
    status: Literal["Finalized"] = "Finalized"


OnboardingStatus = Annotated[
    Union[InvalidStatus, ValidStatus, FinalizedStatus],
    Field(discriminator="status"),
]


class SupportingDocumentCollection(_Frozen):
    """Status of the supporting documents requested from a company."""

    status: SupportingDocumentCollectionStatus
    required_purposes: tuple[str, ...] = Field(default=(), alias="requiredSupportingDocumentPurposes")

    @field_validator("required_purposes", mode="before")
    @classmethod
    def _purpose_names(cls, value: object) -> object:
        # The API nests purposes as ``{"name": ...}`` objects.
        if isinstance(value, (list, tuple)):
            return tuple(
                item.get("name") if isinstance(item, Mapping) else item
                for item in value
                if item is not None
            )
        return value


class OnboardingInfo(_Frozen):
    """Shared onboarding snapshot every step is derived from."""

    id: str
    account_country: Optional[str] = Field(default=None, alias="accountCountry")
    status: OnboardingStatus = Field(default_factory=ValidStatus, alias="statusInfo")
    account_holder: AccountHolderInfo = Field(alias="info")
    supporting_document_collection: Optional[SupportingDocumentCollection] = Field(
        default=None,
        alias="supportingDocumentCollection",
    )
    legal_representative_recommended_identification_level: str = Field(
        default="Expert",
        alias="legalRepresentativeRecommendedIdentificationLevel",
    )
    email: Optional[str] = None
    tcu_url: Optional[str] = Field(default=None, alias="tcuUrl")

    @field_validator("account_holder", mode="before")
    @classmethod
    def _tag_account_holder(cls, value: object) -> object:
        if isinstance(value, Mapping) and "type" not in value:
            typename = value.get("__typename")
            if isinstance(typename, str) and typename in _ACCOUNT_HOLDER_TYPENAMES:
                return {**value, "type": _ACCOUNT_HOLDER_TYPENAMES[typename]}
        return value

    @property
    def is_company(self) -> bool:
        return isinstance(self.account_holder, CompanyAccountHolderInfo)


class ValidationFieldError(_Frozen):
    """One field rejected by an update mutation."""

    path: DottedPath
    code: ErrorCode
    message: str = ""

    @field_validator("path", mode="before")
    @classmethod
    def _split_path(cls, value: object) -> object:
        return split_dotted_path(value)


class MutationSuccess(_Frozen):
    kind: Literal["Success"] = "Success"
    onboarding: OnboardingInfo


class ValidationRejection(_Frozen):
    kind: Literal["ValidationRejection"] = "ValidationRejection"
    fields: tuple[ValidationFieldError, ...] = ()
    message: str = ""


class OtherRejection(_Frozen):
    """Any rejection that carries no field-level information."""

    kind: Literal["OtherRejection"] = "OtherRejection"
    type: str = "InternalErrorRejection"
    message: str = ""


MutationResult = Union[MutationSuccess, ValidationRejection, OtherRejection]

_STATUS_ADAPTER: TypeAdapter[Any] = TypeAdapter(OnboardingStatus)


def parse_status_payload(payload: Mapping[str, Any]) -> InvalidStatus | ValidStatus | FinalizedStatus:
    """Parse ``{"status": ..., "errors": [{"field": "a.b", "errors": [...]}]}``."""

    if not isinstance(payload, Mapping):
        raise PayloadError(f"Status payload must be a mapping, got {type(payload).__name__}")
    data = dict(payload)
    if "status" not in data and data.get("__typename") in _STATUS_TYPENAMES:
        data["status"] = _STATUS_TYPENAMES[data["__typename"]]
    if data.get("status") != "Invalid":
        data.pop("errors", None)
    elif data.get("errors") is None:
        data["errors"] = []
    try:
        return _STATUS_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise PayloadError(f"Invalid onboarding status payload: {exc}") from exc


def parse_onboarding_info(payload: Mapping[str, Any]) -> OnboardingInfo:
    """Parse an onboarding snapshot as returned by the API."""

    if not isinstance(payload, Mapping):
        raise PayloadError(f"Onboarding payload must be a mapping, got {type(payload).__name__}")
    data = dict(payload)
    status = data.get("statusInfo", data.get("status"))
    if isinstance(status, Mapping):
        data["statusInfo"] = parse_status_payload(status)
        data.pop("status", None)
    try:
        return OnboardingInfo.model_validate(data)
    except ValidationError as exc:
        raise PayloadError(f"Invalid onboarding payload: {exc}") from exc


def parse_mutation_result(payload: Mapping[str, Any]) -> MutationResult:
    """Parse an update mutation response into a tagged :data:`MutationResult`."""

    if not isinstance(payload, Mapping):
        raise PayloadError(f"Mutation payload must be a mapping, got {type(payload).__name__}")
    typename = str(payload.get("__typename") or "")
    try:
        if typename == "ValidationRejection":
            return ValidationRejection(
                fields=tuple(payload.get("fields") or ()),
                message=str(payload.get("message") or ""),
            )
        onboarding = payload.get("onboarding")
        if isinstance(onboarding, Mapping):
            return MutationSuccess(onboarding=parse_onboarding_info(onboarding))
    except ValidationError as exc:
        raise PayloadError(f"Invalid mutation payload: {exc}") from exc
    return OtherRejection(
        type=typename or "InternalErrorRejection",
        message=str(payload.get("message") or ""),
    )


__all__ = [
    "AccountHolderInfo",
    "CompanyAccountHolderInfo",
    "CompanyType",
    "DottedPath",
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
    "split_dotted_path",
]
