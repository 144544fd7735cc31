"""Utility helpers for the onboarding wizard."""

from .logging_context import configure_logging, log_context, set_onboarding_id

__all__ = ["configure_logging", "log_context", "set_onboarding_id"]
