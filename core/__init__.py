"""Core package for the onboarding wizard engine."""

from .errors import OnboardingError, PayloadError, UnknownStepError, UnmappedFieldPathError

__all__ = ["OnboardingError", "PayloadError", "UnknownStepError", "UnmappedFieldPathError"]
