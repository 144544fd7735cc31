from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum

import streamlit as st

from constants.keys import QueryKeys
from wizard import step_registry
from wizard.types import WizardStep
from utils.logging_context import log_context

logger = logging.getLogger(__name__)


class NavigationDirection(StrEnum):
    NEXT = "next"
    PREVIOUS = "previous"
    JUMP = "jump"


@dataclass(frozen=True)
class NavigationEvent:
    """Emitted on every step change so collaborators (analytics) can react."""

    from_step: str | None
    to_step: str
    url: str
    direction: NavigationDirection


RoutePusher = Callable[[str], None]
NavigationObserver = Callable[[NavigationEvent], None]


def _index_of(steps: Sequence[WizardStep], step_id: str) -> int | None:
    for index, step in enumerate(steps):
        if step.id == step_id:
            return index
    return None


def _neighbour(steps: Sequence[WizardStep], current_id: str, offset: int) -> WizardStep | None:
    index = _index_of(steps, current_id)
    if index is None:
        return None
    target = index + offset
    if 0 <= target < len(steps):
        return steps[target]
    return None


def next_route(steps: Sequence[WizardStep], current_id: str) -> str | None:
    """Return the URL of the step after ``current_id`` or ``None`` at the end."""

    step = _neighbour(steps, current_id, 1)
    return step.url if step is not None else None


def previous_route(steps: Sequence[WizardStep], current_id: str) -> str | None:
    """Return the URL of the step before ``current_id`` or ``None`` at the start."""

    step = _neighbour(steps, current_id, -1)
    return step.url if step is not None else None


def push_query_route(url: str) -> None:
    """Default route change: store ``url`` in the query string and rerun."""

    st.query_params[QueryKeys.ROUTE] = url
    st.rerun()


class WizardNavigator:
    """Move the wizard cursor along the computed step list.

    Reaching either end of the list is a normal terminal condition and
    results in no route change.
    """

    def __init__(
        self,
        *,
        steps: Sequence[WizardStep],
        push: RoutePusher | None = None,
        observers: Iterable[NavigationObserver] = (),
    ) -> None:
        self._steps: tuple[WizardStep, ...] = tuple(steps)
        self._push = push or push_query_route
        self._observers: list[NavigationObserver] = list(observers)

    @property
    def steps(self) -> tuple[WizardStep, ...]:
        return self._steps

    def subscribe(self, observer: NavigationObserver) -> Callable[[], None]:
        """Register ``observer`` and return a callable that removes it."""

        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def next_key(self, current_id: str) -> str | None:
        step = _neighbour(self._steps, current_id, 1)
        return step.id if step is not None else None

    def previous_key(self, current_id: str) -> str | None:
        step = _neighbour(self._steps, current_id, -1)
        return step.id if step is not None else None

    def go_next(self, current_id: str) -> str | None:
        """Navigate to the step after ``current_id``; return the URL or ``None``."""

        return self._move(current_id, 1, NavigationDirection.NEXT)

    def go_previous(self, current_id: str) -> str | None:
        """Navigate to the step before ``current_id``; return the URL or ``None``."""

        return self._move(current_id, -1, NavigationDirection.PREVIOUS)

    def navigate(self, target_id: str, *, from_step: str | None = None) -> str | None:
        """Jump to ``target_id`` (stepper click, invalid-step tile)."""

        index = _index_of(self._steps, target_id)
        if index is None:
            logger.warning("Ignoring navigation to inactive step '%s'", target_id)
            return None
        target = self._steps[index]
        self._emit(from_step, target, NavigationDirection.JUMP)
        return target.url

    def resolve_current(self, route_name: str, ordered_keys: Sequence[str]) -> str | None:
        """Return the active step to display for ``route_name``.

        A route pointing at a step that is not active for this account holder
        falls forward to the nearest active step.
        """

        active_keys = tuple(step.id for step in self._steps)
        return step_registry.resolve_nearest_active_step_key(route_name, active_keys, ordered_keys)

    def _move(self, current_id: str, offset: int, direction: NavigationDirection) -> str | None:
        if _index_of(self._steps, current_id) is None:
            logger.warning("Navigation requested from unknown step '%s'", current_id)
            return None
        target = _neighbour(self._steps, current_id, offset)
        if target is None:
            return None
        self._emit(current_id, target, direction)
        return target.url

    def _emit(self, from_step: str | None, target: WizardStep, direction: NavigationDirection) -> None:
        with log_context(wizard_step=target.id):
            logger.debug("Navigating %s from '%s' to '%s'", direction, from_step, target.id)
        event = NavigationEvent(from_step=from_step, to_step=target.id, url=target.url, direction=direction)
        for observer in tuple(self._observers):
            observer(event)
        # st.rerun() raises; the route change must come last
        self._push(target.url)


__all__ = [
    "NavigationDirection",
    "NavigationEvent",
    "NavigationObserver",
    "RoutePusher",
    "WizardNavigator",
    "next_route",
    "previous_route",
    "push_query_route",
]
