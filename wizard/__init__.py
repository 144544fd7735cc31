"""Onboarding wizard orchestration: step graph, error mapping, navigation and finalization."""

from __future__ import annotations

from .field_errors import map_errors
from .finalization import FinalizationGate, FinalizationState
from .navigation import WizardNavigator, next_route, previous_route
from .step_registry import build_steps, has_documents_step, has_ownership_step
from .stepper import StepperGroup, StepperLeaf, project_stepper
from .types import ServerInvalidField, WizardStep

__all__ = [
    "FinalizationGate",
    "FinalizationState",
    "ServerInvalidField",
    "StepperGroup",
    "StepperLeaf",
    "WizardNavigator",
    "WizardStep",
    "build_steps",
    "has_documents_step",
    "has_ownership_step",
    "map_errors",
    "next_route",
    "previous_route",
    "project_stepper",
]
