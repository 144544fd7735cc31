"""Streamlit shell for one onboarding: route resolution, stepper and step navigation.

Step forms are rendered by the host page; this module only decides which
step is current and wires the stepper, back/next buttons and the finalize
screen to :class:`~state.onboarding_session.OnboardingSession`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Optional

import streamlit as st

from components.stepper import render_stepper
from constants.keys import QueryKeys
from core.errors import OnboardingError
from state.onboarding_session import OnboardingSession
from utils.logging_context import log_context
from wizard import step_registry
from wizard.finalization import FinalizeOutcomeStatus
from wizard.forms import server_error_messages
from wizard.navigation import NavigationObserver, WizardNavigator
from wizard.validation import requires_terms_acceptance

logger = logging.getLogger(__name__)

Translate = Callable[[str], str]

ROOT_ROUTE = "Root"


def current_route() -> Optional[str]:
    """Return the route URL stored in the query string, if any."""

    value = st.query_params.get(QueryKeys.ROUTE)
    return value or None


def resolve_current_step(session: OnboardingSession, navigator: WizardNavigator, route_name: str | None) -> str | None:
    """Map ``route_name`` onto the active step to display.

    Root, Presentation and inactive step routes fall forward to the nearest
    active step.
    """

    info = session.require_info()
    ordered = step_registry.step_keys(info.account_holder)
    current = navigator.resolve_current(route_name or ROOT_ROUTE, ordered)
    if current is not None and current != session.current_step:
        logger.debug("Current step for route '%s' is '%s'", route_name, current)
        session.set_current_step(current)
    return current


def _render_server_errors(session: OnboardingSession, step_id: str, translate: Translate) -> None:
    for field_name, message in server_error_messages(session.visible_errors(step_id)).items():
        st.error(f"{field_name}: {translate(message)}")


def _render_finalize(session: OnboardingSession, navigator: WizardNavigator, translate: Translate) -> None:
    info = session.require_info()
    if requires_terms_acceptance(info.account_country):
        accepted = st.checkbox(
            translate("step.finalize.tcu"),
            value=session.tcu_accepted,
            key=f"{session.keys.tcu_accepted}.widget",
        )
        session.set_tcu_accepted(accepted)

    steps = session.steps()
    for step in session.gate.invalid_steps(steps):
        if st.button(f"⚠ {translate(step.label)}", key=f"wizard.invalid.{step.id}"):
            navigator.navigate(step.id, from_step="Finalize")
    terms_error = session.terms_error()
    if terms_error:
        st.warning(translate(terms_error))

    if not st.button(translate("step.finalize.submit"), key="wizard.finalize", type="primary"):
        return
    outcome = session.finalize()
    if outcome.status is FinalizeOutcomeStatus.READY and outcome.redirect_url:
        st.link_button(translate("step.finalize.identify"), outcome.redirect_url)
    else:
        # errors and the terms message become visible from the next run on
        st.rerun()


def _render_step_buttons(navigator: WizardNavigator, current: str, translate: Translate) -> None:
    back_col, next_col = st.columns(2)
    with back_col:
        if st.button(
            translate("wizard.back"),
            key="wizard.back",
            disabled=navigator.previous_key(current) is None,
        ):
            navigator.go_previous(current)
    with next_col:
        if st.button(
            translate("wizard.next"),
            key="wizard.next",
            disabled=navigator.next_key(current) is None,
        ):
            navigator.go_next(current)


def run_wizard(
    session: OnboardingSession,
    *,
    route_name: str | None = None,
    translate: Translate = str,
    observers: Iterable[NavigationObserver] = (),
) -> str | None:
    """Render the wizard chrome for ``session`` and return the current step id."""

    try:
        navigator = session.navigator(observers=observers)
        current = resolve_current_step(session, navigator, route_name)
        if current is None:
            return None
        with log_context(onboarding_id=session.onboarding_id, wizard_step=current):
            render_stepper(
                session.stepper(),
                current,
                route_name=route_name,
                translate=translate,
                on_select=lambda leaf: navigator.navigate(leaf.id, from_step=current),
            )
            st.subheader(translate(session.step(current).label))
            _render_server_errors(session, current, translate)
            if current == "Finalize":
                _render_finalize(session, navigator, translate)
            _render_step_buttons(navigator, current, translate)
        return current
    except OnboardingError as error:
        logger.warning("Onboarding wizard could not be rendered", exc_info=error)
        st.error(translate("error.tryAgain"))
        return None


__all__ = ["current_route", "resolve_current_step", "run_wizard"]
