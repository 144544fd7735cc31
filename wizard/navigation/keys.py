from __future__ import annotations

from dataclasses import dataclass

from constants.keys import StateKeys


@dataclass(frozen=True)
class WizardSessionKeys:
    """Session-state keys namespaced per onboarding."""

    onboarding_id: str

    @property
    def prefix(self) -> str:
        return f"onb:{self.onboarding_id}:"

    def namespace(self, key: str) -> str:
        return f"{self.prefix}{key}"

    @property
    def snapshot(self) -> str:
        return self.namespace(StateKeys.ONBOARDING)

    @property
    def finalization(self) -> str:
        return self.namespace(StateKeys.FINALIZATION)

    @property
    def submissions(self) -> str:
        return self.namespace(StateKeys.SUBMISSIONS)

    @property
    def tcu_accepted(self) -> str:
        return self.namespace(StateKeys.TCU_ACCEPTED)

    @property
    def current_step(self) -> str:
        return self.namespace(StateKeys.CURRENT_STEP)
