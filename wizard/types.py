"""Shared types for the onboarding wizard package."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final, Literal

from models.onboarding import DottedPath, ErrorCode

CompanyStepId = Literal["Registration", "Organisation1", "Organisation2", "Ownership", "Documents", "Finalize"]
IndividualStepId = Literal["Email", "Location", "Details", "Finalize"]
StepId = CompanyStepId | IndividualStepId

# Routes that belong to a flow but are not wizard steps.
RouteName = StepId | Literal["Root", "Presentation"]

ServerInvalidFieldCode = Literal["Missing"]

MISSING: Final[ServerInvalidFieldCode] = "Missing"


@dataclass(frozen=True)
class ServerInvalidField:
    """Server-reported error attached to one field of a step.

    ``code`` is always the ``"Missing"`` sentinel consumed by step forms;
    ``server_codes`` keeps what the API actually reported.
    """

    field_name: str
    code: ServerInvalidFieldCode = MISSING
    server_codes: tuple[ErrorCode, ...] = ()
    path: DottedPath = ()


@dataclass(frozen=True)
class WizardStep:
    """One entry of the ordered step list derived from the onboarding snapshot."""

    id: StepId
    url: str
    label: str
    errors: tuple[ServerInvalidField, ...] = field(default=())

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


__all__ = [
    "CompanyStepId",
    "IndividualStepId",
    "MISSING",
    "RouteName",
    "ServerInvalidField",
    "ServerInvalidFieldCode",
    "StepId",
    "WizardStep",
]
