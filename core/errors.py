"""Custom exception types for the onboarding wizard engine."""

from __future__ import annotations

from collections.abc import Sequence


class OnboardingError(Exception):
    """Base exception for onboarding wizard issues."""


class UnknownStepError(OnboardingError):
    """Raised when a step id is not part of the active step list."""

    def __init__(self, step_id: str) -> None:
        super().__init__(f"Unknown onboarding step: {step_id}")
        self.step_id = step_id


class UnmappedFieldPathError(OnboardingError):
    """Raised in strict mode when server field paths match no wizard step."""

    def __init__(self, paths: Sequence[tuple[str, ...]]) -> None:
        joined = ", ".join(".".join(path) for path in paths)
        super().__init__(f"Server reported field paths no step recognizes: {joined}")
        self.paths = tuple(paths)


class PayloadError(OnboardingError):
    """Raised when a status or mutation payload cannot be parsed."""
