"""Onboarding id and wizard step attached to every log record."""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import Iterator

_DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [onboarding=%(onboarding_id)s step=%(wizard_step)s] %(name)s: %(message)s"

_onboarding_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("onboarding_id", default="-")
_wizard_step_var: contextvars.ContextVar[str] = contextvars.ContextVar("wizard_step", default="-")
_DEFAULT_RECORD_FACTORY = logging.getLogRecordFactory()
_RECORD_FACTORY_INSTALLED = False


def _record_factory(*args: object, **kwargs: object) -> logging.LogRecord:
    record = _DEFAULT_RECORD_FACTORY(*args, **kwargs)
    record.onboarding_id = _onboarding_id_var.get()
    record.wizard_step = _wizard_step_var.get()
    return record


def _install_record_factory() -> None:
    global _RECORD_FACTORY_INSTALLED
    if not _RECORD_FACTORY_INSTALLED:
        logging.setLogRecordFactory(_record_factory)
        _RECORD_FACTORY_INSTALLED = True


def _coerce(value: str | None) -> str:
    if value is None:
        return "-"
    stripped = value.strip()
    return stripped or "-"


def configure_logging(*, level: int | str = logging.INFO) -> None:
    """Set the root level and format records with onboarding metadata."""

    _install_record_factory()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=_DEFAULT_LOG_FORMAT)
        return
    root.setLevel(level)
    for handler in root.handlers:
        if handler.formatter is None:
            handler.setFormatter(logging.Formatter(_DEFAULT_LOG_FORMAT))


def set_onboarding_id(onboarding_id: str | None) -> None:
    """Bind an onboarding identifier for the rest of the script run."""

    _install_record_factory()
    _onboarding_id_var.set(_coerce(onboarding_id))


@contextmanager
def log_context(
    *,
    onboarding_id: str | None = None,
    wizard_step: str | None = None,
) -> Iterator[None]:
    """Temporarily override logging context variables."""

    tokens: list[tuple[contextvars.ContextVar[str], contextvars.Token[str]]] = []
    if onboarding_id is not None:
        tokens.append((_onboarding_id_var, _onboarding_id_var.set(_coerce(onboarding_id))))
    if wizard_step is not None:
        tokens.append((_wizard_step_var, _wizard_step_var.set(_coerce(wizard_step))))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)
