# app.py — onboarding wizard entrypoint (`streamlit run app.py`)
from __future__ import annotations

import json
import logging
from pathlib import Path
import sys

import streamlit as st

APP_ROOT = Path(__file__).resolve().parent
if str(APP_ROOT) not in sys.path:
    sys.path.insert(0, str(APP_ROOT))

from config import load_settings  # noqa: E402
from core.errors import OnboardingError  # noqa: E402
from state import OnboardingSession  # noqa: E402
from utils import configure_logging, set_onboarding_id  # noqa: E402
from wizard.flow import current_route, run_wizard  # noqa: E402
from wizard.routes import parse_route  # noqa: E402

SETTINGS = load_settings()
configure_logging(level=SETTINGS.log_level)
logger = logging.getLogger("app")

st.set_page_config(page_title="Onboarding", page_icon="🪪", layout="centered")


def _load_snapshot(session: OnboardingSession) -> None:
    """Install an onboarding snapshot uploaded from the sidebar."""

    uploaded = st.sidebar.file_uploader("Onboarding snapshot (JSON)", type=["json"], key="app.snapshot")
    if uploaded is None:
        return
    try:
        session.load(json.loads(uploaded.getvalue()))
    except (json.JSONDecodeError, OnboardingError) as error:
        logger.warning("Rejected onboarding snapshot upload", exc_info=error)
        st.sidebar.error(str(error))


def main() -> None:
    route = current_route()
    parsed = parse_route(route, settings=SETTINGS) if route else None
    if parsed is None:
        st.info("Open an onboarding link, for example `?route=/onboardings/<id>`.")
        return

    onboarding_id, route_name = parsed
    set_onboarding_id(onboarding_id)
    session = OnboardingSession(onboarding_id, settings=SETTINGS)
    if session.info is None:
        _load_snapshot(session)
    if session.info is None:
        st.info("No onboarding snapshot loaded yet.")
        return
    run_wizard(session, route_name=route_name)


main()
