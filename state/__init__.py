"""Session state utilities."""

from .onboarding_session import OnboardingSession

__all__ = ["OnboardingSession"]
