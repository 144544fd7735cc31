"""Finalization gate: decides when computed server errors become visible.

The gate starts ``NOT_FINALIZED`` and moves to ``FINALIZED`` on the first
submission attempt that fails validation. There is no way back within the
session; errors disappear only when a fresh onboarding status no longer
reports them.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Final
from urllib.parse import urlencode

import streamlit as st

from config import Settings, load_settings
from constants.keys import StateKeys
from wizard.types import ServerInvalidField, WizardStep

logger = logging.getLogger(__name__)

TERMS_ERROR_MESSAGE: Final[str] = "step.finalize.termsError"


class FinalizationState(StrEnum):
    NOT_FINALIZED = "NotFinalized"
    FINALIZED = "Finalized"


class FinalizeOutcomeStatus(StrEnum):
    READY = "ready"
    INVALID_STEPS = "invalid_steps"
    TERMS_REQUIRED = "terms_required"


@dataclass(frozen=True)
class FinalizeOutcome:
    """Result of pressing "finalize" on the last step."""

    status: FinalizeOutcomeStatus
    invalid_steps: tuple[WizardStep, ...] = ()
    redirect_url: str | None = None


def build_identification_url(banking_url: str, identification_level: str, onboarding_id: str) -> str:
    """Return the banking login URL that starts identity verification."""

    query = urlencode({"identificationLevel": identification_level, "onboardingId": onboarding_id})
    return f"{banking_url.rstrip('/')}/auth/login?{query}"


class FinalizationGate:
    """Two-state flag persisted in a session mapping."""

    def __init__(
        self,
        *,
        storage: MutableMapping[str, object] | None = None,
        key: str = StateKeys.FINALIZATION,
    ) -> None:
        self._storage = storage if storage is not None else st.session_state
        self._key = key

    @property
    def state(self) -> FinalizationState:
        raw = self._storage.get(self._key)
        if raw == FinalizationState.FINALIZED:
            return FinalizationState.FINALIZED
        return FinalizationState.NOT_FINALIZED

    @property
    def finalized(self) -> bool:
        return self.state is FinalizationState.FINALIZED

    def mark_finalized(self) -> None:
        """Record a failed submission attempt. Idempotent."""

        if self.finalized:
            return
        self._storage[self._key] = FinalizationState.FINALIZED.value
        logger.info("Onboarding finalization attempted with errors; exposing validation errors")

    def visible_errors(self, step: WizardStep) -> tuple[ServerInvalidField, ...]:
        """Return the errors a step form should display."""

        return step.errors if self.finalized else ()

    def submit(
        self,
        steps: Sequence[WizardStep],
        *,
        onboarding_id: str,
        identification_level: str = "Expert",
        tcu_accepted: bool = True,
        settings: Settings | None = None,
    ) -> FinalizeOutcome:
        """Handle a finalize attempt over the whole step list."""

        invalid_steps = tuple(step for step in steps if step.has_errors)
        if invalid_steps:
            self.mark_finalized()
            return FinalizeOutcome(status=FinalizeOutcomeStatus.INVALID_STEPS, invalid_steps=invalid_steps)
        if not tcu_accepted:
            self.mark_finalized()
            return FinalizeOutcome(status=FinalizeOutcomeStatus.TERMS_REQUIRED)
        resolved = settings or load_settings()
        return FinalizeOutcome(
            status=FinalizeOutcomeStatus.READY,
            redirect_url=build_identification_url(resolved.banking_url, identification_level, onboarding_id),
        )

    def invalid_steps(self, steps: Sequence[WizardStep]) -> tuple[WizardStep, ...]:
        """Return the steps listed on the finalize screen once finalized."""

        if not self.finalized:
            return ()
        return tuple(step for step in steps if step.has_errors)

    def terms_error(self, steps: Sequence[WizardStep], *, tcu_accepted: bool) -> str | None:
        """Return the terms message when it is the only thing blocking finalization."""

        if self.finalized and not tcu_accepted and not any(step.has_errors for step in steps):
            return TERMS_ERROR_MESSAGE
        return None


__all__ = [
    "FinalizationGate",
    "FinalizationState",
    "FinalizeOutcome",
    "FinalizeOutcomeStatus",
    "TERMS_ERROR_MESSAGE",
    "build_identification_url",
]
