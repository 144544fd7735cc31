"""Shared onboarding snapshot and the wizard state hanging off it."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, MutableMapping
from typing import Any, Optional

import streamlit as st

from config import Settings, load_settings
from core.errors import OnboardingError, UnknownStepError
from models.onboarding import OnboardingInfo, parse_onboarding_info
from utils.logging_context import log_context
from wizard import step_registry
from wizard.finalization import FinalizationGate, FinalizeOutcome
from wizard.navigation import NavigationObserver, RoutePusher, WizardNavigator, WizardSessionKeys
from wizard.stepper import StepperNode, project_stepper
from wizard.submission import Mutation, SubmissionOutcome, SubmissionTracker, submit_step
from wizard.types import ServerInvalidField, WizardStep
from wizard.validation import requires_terms_acceptance

logger = logging.getLogger(__name__)


class OnboardingSession:
    """Per-onboarding state stored in ``st.session_state`` (or any mapping).

    The snapshot is only ever replaced as a whole: by :meth:`load` on page
    load and by a successful step submission.
    """

    def __init__(
        self,
        onboarding_id: str,
        *,
        storage: MutableMapping[str, object] | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.onboarding_id = onboarding_id
        self.keys = WizardSessionKeys(onboarding_id)
        self.settings = settings or load_settings()
        self._storage = storage if storage is not None else st.session_state
        self.gate = FinalizationGate(storage=self._storage, key=self.keys.finalization)
        self.tracker = SubmissionTracker(
            storage=self._storage,
            key=self.keys.submissions,
            policy=self.settings.stale_response_policy,
        )

    @property
    def info(self) -> Optional[OnboardingInfo]:
        value = self._storage.get(self.keys.snapshot)
        return value if isinstance(value, OnboardingInfo) else None

    def require_info(self) -> OnboardingInfo:
        info = self.info
        if info is None:
            raise OnboardingError(f"Onboarding '{self.onboarding_id}' has not been loaded")
        return info

    def load(self, payload: OnboardingInfo | Mapping[str, Any]) -> OnboardingInfo:
        """Parse ``payload`` (if needed) and install it as the current snapshot."""

        info = payload if isinstance(payload, OnboardingInfo) else parse_onboarding_info(payload)
        self.replace_snapshot(info)
        return info

    def replace_snapshot(self, info: OnboardingInfo) -> None:
        if info.id != self.onboarding_id:
            raise OnboardingError(f"Snapshot for onboarding '{info.id}' cannot replace '{self.onboarding_id}'")
        self._storage[self.keys.snapshot] = info
        with log_context(onboarding_id=self.onboarding_id):
            logger.debug("Onboarding snapshot replaced (status=%s)", info.status.status)

    def steps(self) -> list[WizardStep]:
        info = self.require_info()
        return step_registry.build_steps(info.account_holder, info, self.onboarding_id, settings=self.settings)

    def step(self, step_id: str) -> WizardStep:
        for step in self.steps():
            if step.id == step_id:
                return step
        raise UnknownStepError(step_id)

    def stepper(self) -> list[StepperNode]:
        return project_stepper(self.steps(), self.gate.finalized)

    def visible_errors(self, step_id: str) -> tuple[ServerInvalidField, ...]:
        """Return the server errors the form of ``step_id`` should display."""

        return self.gate.visible_errors(self.step(step_id))

    def navigator(
        self,
        *,
        push: RoutePusher | None = None,
        observers: Iterable[NavigationObserver] = (),
    ) -> WizardNavigator:
        return WizardNavigator(steps=self.steps(), push=push, observers=observers)

    @property
    def current_step(self) -> Optional[str]:
        value = self._storage.get(self.keys.current_step)
        return value if isinstance(value, str) else None

    def set_current_step(self, step_id: str) -> None:
        self._storage[self.keys.current_step] = step_id

    @property
    def tcu_accepted(self) -> bool:
        """Terms start accepted unless the account country asks for them."""

        value = self._storage.get(self.keys.tcu_accepted)
        if isinstance(value, bool):
            return value
        info = self.info
        return not requires_terms_acceptance(info.account_country if info else None)

    def set_tcu_accepted(self, accepted: bool) -> None:
        self._storage[self.keys.tcu_accepted] = bool(accepted)

    def submit(self, step_id: str, values: Mapping[str, object], mutation: Mutation) -> SubmissionOutcome:
        """Submit ``values`` for ``step_id``; a success replaces the snapshot."""

        return submit_step(
            step_id,
            values,
            info=self.require_info(),
            mutation=mutation,
            tracker=self.tracker,
            on_success=self.replace_snapshot,
        )

    def finalize(self, *, tcu_accepted: bool | None = None) -> FinalizeOutcome:
        info = self.require_info()
        accepted = self.tcu_accepted if tcu_accepted is None else tcu_accepted
        with log_context(onboarding_id=self.onboarding_id, wizard_step="Finalize"):
            return self.gate.submit(
                self.steps(),
                onboarding_id=self.onboarding_id,
                identification_level=info.legal_representative_recommended_identification_level,
                tcu_accepted=accepted,
                settings=self.settings,
            )

    def terms_error(self) -> Optional[str]:
        return self.gate.terms_error(self.steps(), tcu_accepted=self.tcu_accepted)


__all__ = ["OnboardingSession"]
