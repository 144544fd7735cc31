"""Navigation helpers for the onboarding wizard."""

from __future__ import annotations

from wizard.navigation.keys import WizardSessionKeys
from wizard.navigation.router import (
    NavigationDirection,
    NavigationEvent,
    NavigationObserver,
    RoutePusher,
    WizardNavigator,
    next_route,
    previous_route,
    push_query_route,
)

__all__ = [
    "NavigationDirection",
    "NavigationEvent",
    "NavigationObserver",
    "RoutePusher",
    "WizardNavigator",
    "WizardSessionKeys",
    "next_route",
    "previous_route",
    "push_query_route",
]
