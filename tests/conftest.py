from pathlib import Path
import sys
from dataclasses import dataclass
from typing import Any, Callable

import streamlit as st

import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import config
from config import Settings
from models.onboarding import OnboardingInfo, parse_onboarding_info

_CONFIG_ENV_VARS = (
    "BANKING_URL",
    "PROJECT_ID",
    "PROJECT_MODE",
    "STRICT_FIELD_MAPPING",
    "STALE_RESPONSE_POLICY",
    "LOG_LEVEL",
)


@dataclass
class _SessionDict(dict[str, object]):
    """Lightweight replacement for ``st.session_state`` during tests."""

    def clear(self) -> None:  # type: ignore[override]
        super().clear()


@pytest.fixture(autouse=True)
def _stub_streamlit_session_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Replace Streamlit's runtime-bound session state with a plain dictionary."""

    session_state = _SessionDict()
    monkeypatch.setattr(st, "session_state", session_state, raising=False)
    yield


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep local ``.env`` files and secrets out of the settings under test."""

    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "_read_secrets", lambda: {}, raising=False)
    yield


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def make_company() -> Callable[..., dict[str, Any]]:
    def _make(
        company_type: str = "Company",
        residency_country: str | None = "FRA",
        owners: list[dict[str, Any] | None] | None = None,
    ) -> dict[str, Any]:
        return {
            "__typename": "OnboardingCompanyAccountHolderInfo",
            "companyType": company_type,
            "residencyAddress": {"country": residency_country},
            "individualUltimateBeneficialOwners": owners or [],
            "name": "Acme",
        }

    return _make


@pytest.fixture
def make_individual() -> Callable[..., dict[str, Any]]:
    def _make(residency_country: str | None = "FRA") -> dict[str, Any]:
        return {
            "__typename": "OnboardingIndividualAccountHolderInfo",
            "residencyAddress": {"country": residency_country},
        }

    return _make


@pytest.fixture
def make_info() -> Callable[..., OnboardingInfo]:
    def _make(
        holder: dict[str, Any],
        *,
        onboarding_id: str = "onb-1",
        account_country: str = "FRA",
        status: dict[str, Any] | None = None,
        documents: dict[str, Any] | None = None,
        email: str | None = None,
    ) -> OnboardingInfo:
        payload: dict[str, Any] = {
            "id": onboarding_id,
            "accountCountry": account_country,
            "info": holder,
            "statusInfo": status or {"__typename": "OnboardingValidStatusInfo"},
            "email": email,
        }
        if documents is not None:
            payload["supportingDocumentCollection"] = documents
        return parse_onboarding_info(payload)

    return _make
