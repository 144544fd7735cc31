"""Runtime configuration for the onboarding wizard.

Values are read from environment variables (a local ``.env`` file is loaded
on import) or from Streamlit secrets and exposed through :class:`Settings`.

``STALE_RESPONSE_POLICY`` (``discard`` | ``overwrite``) controls what happens
when an update response arrives after a newer submission was issued for the
same step. ``STRICT_FIELD_MAPPING`` turns unmapped server field paths into
:class:`core.errors.UnmappedFieldPathError` instead of a logged warning.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import StrEnum
from typing import Mapping, Optional

import streamlit as st
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_TRUTHY_ENV_VALUES: tuple[str, ...] = ("1", "true", "yes", "on")

DEFAULT_BANKING_URL = "https://banking.swan.io"


class ProjectMode(StrEnum):
    """How onboarding routes are mounted."""

    SINGLE = "SingleProject"
    MULTI = "MultiProject"


class StaleResponsePolicy(StrEnum):
    """What to do with a response superseded by a newer submission."""

    DISCARD = "discard"
    OVERWRITE = "overwrite"


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime configuration values.

    Attributes:
        banking_url: Base URL of the banking app used for the identification redirect.
        project_id: Project identifier, used as route prefix in multi-project mode.
        project_mode: Whether routes are mounted under ``/projects/<id>``.
        strict_field_mapping: Raise on server field paths no step recognizes.
        stale_response_policy: Handling of responses superseded by a newer submission.
        log_level: Root log level name.
    """

    banking_url: str = DEFAULT_BANKING_URL
    project_id: Optional[str] = None
    project_mode: ProjectMode = ProjectMode.SINGLE
    strict_field_mapping: bool = False
    stale_response_policy: StaleResponsePolicy = StaleResponsePolicy.DISCARD
    log_level: str = "INFO"

    @property
    def base_path(self) -> str:
        """Return the route prefix for the configured project mode."""

        if self.project_mode is ProjectMode.MULTI and self.project_id:
            return f"/projects/{self.project_id}"
        return ""


def _is_truthy_flag(value: str | None) -> bool:
    """Return ``True`` when ``value`` matches a truthy environment token."""

    if value is None:
        return False
    return value.strip().lower() in _TRUTHY_ENV_VALUES


def _coerce_project_mode(value: str | None) -> ProjectMode:
    if not value:
        return ProjectMode.SINGLE
    try:
        return ProjectMode(value.strip())
    except ValueError:
        logger.warning("Unsupported PROJECT_MODE '%s'; falling back to %s", value, ProjectMode.SINGLE)
        return ProjectMode.SINGLE


def _coerce_stale_policy(value: str | None) -> StaleResponsePolicy:
    if not value:
        return StaleResponsePolicy.DISCARD
    try:
        return StaleResponsePolicy(value.strip().lower())
    except ValueError:
        logger.warning(
            "Unsupported STALE_RESPONSE_POLICY '%s'; falling back to %s",
            value,
            StaleResponsePolicy.DISCARD,
        )
        return StaleResponsePolicy.DISCARD


def _read_secrets() -> Mapping[str, object]:
    try:
        return dict(st.secrets)
    except Exception:  # no secrets file outside a deployment
        return {}


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Load settings from env vars or Streamlit secrets.

    Args:
        environ: Optional mapping used instead of ``os.environ`` and secrets.
    """

    if environ is None:
        secrets = _read_secrets()

        def _get(key: str) -> Optional[str]:
            value = secrets.get(key)
            if isinstance(value, str) and value:
                return value
            return os.getenv(key)

    else:

        def _get(key: str) -> Optional[str]:
            return environ.get(key)

    banking_url = (_get("BANKING_URL") or DEFAULT_BANKING_URL).rstrip("/")
    project_id = (_get("PROJECT_ID") or "").strip() or None
    return Settings(
        banking_url=banking_url,
        project_id=project_id,
        project_mode=_coerce_project_mode(_get("PROJECT_MODE")),
        strict_field_mapping=_is_truthy_flag(_get("STRICT_FIELD_MAPPING")),
        stale_response_policy=_coerce_stale_policy(_get("STALE_RESPONSE_POLICY")),
        log_level=(_get("LOG_LEVEL") or "INFO").strip().upper(),
    )


__all__ = [
    "DEFAULT_BANKING_URL",
    "ProjectMode",
    "Settings",
    "StaleResponsePolicy",
    "load_settings",
]
