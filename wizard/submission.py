"""Submit one wizard step and fold the mutation result back into the session.

Each step allows a single request in flight. Every request receives a
per-step id that grows monotonically; a response for an id that is no
longer the latest one is stale and handled by the configured
``StaleResponsePolicy``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, MutableMapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Final

import streamlit as st

from config import StaleResponsePolicy, load_settings
from constants.keys import StateKeys
from core.errors import UnknownStepError
from models.onboarding import (
    MutationResult,
    MutationSuccess,
    OnboardingInfo,
    OtherRejection,
    ValidationRejection,
    parse_mutation_result,
)
from utils.logging_context import log_context
from wizard import step_registry
from wizard.field_errors import PathToField, extract_server_validation_errors, validation_error_message
from wizard.forms import form_for_step

logger = logging.getLogger(__name__)

Mutation = Callable[[Mapping[str, object]], "MutationResult | Mapping[str, Any]"]
SnapshotSink = Callable[[OnboardingInfo], None]

INVALID_FIELDS_TITLE: Final[str] = "error.invalidFields"
FIX_INVALID_FIELDS: Final[str] = "error.fixInvalidFields"
TRY_AGAIN: Final[str] = "error.tryAgain"
REJECTION_TITLE_PREFIX: Final[str] = "error.rejection."

_LATEST: Final[str] = "latest"
_IN_FLIGHT: Final[str] = "in_flight"


class SubmissionStatus(StrEnum):
    LOCAL_ERRORS = "local_errors"
    SUCCESS = "success"
    VALIDATION_REJECTED = "validation_rejected"
    REJECTED = "rejected"
    STALE = "stale"
    BUSY = "busy"


@dataclass(frozen=True)
class Notification:
    """Toast-style message not attached to any field."""

    title: str
    description: str


@dataclass(frozen=True)
class SubmissionOutcome:
    status: SubmissionStatus
    field_errors: dict[str, str] = field(default_factory=dict)
    notification: Notification | None = None
    onboarding: OnboardingInfo | None = None
    request_id: int | None = None

    @property
    def ok(self) -> bool:
        return self.status is SubmissionStatus.SUCCESS


def update_error_notification(rejection: ValidationRejection | OtherRejection) -> Notification:
    """Return the toast shown for a rejected update."""

    if isinstance(rejection, ValidationRejection):
        return Notification(title=INVALID_FIELDS_TITLE, description=FIX_INVALID_FIELDS)
    return Notification(title=f"{REJECTION_TITLE_PREFIX}{rejection.type}", description=TRY_AGAIN)


class SubmissionTracker:
    """Per-step loading flags and request ids kept in a session mapping."""

    def __init__(
        self,
        *,
        storage: MutableMapping[str, object] | None = None,
        key: str = StateKeys.SUBMISSIONS,
        policy: StaleResponsePolicy | None = None,
    ) -> None:
        self._storage = storage if storage is not None else st.session_state
        self._key = key
        self._policy = policy

    @property
    def policy(self) -> StaleResponsePolicy:
        if self._policy is None:
            self._policy = load_settings().stale_response_policy
        return self._policy

    def _table(self, name: str) -> dict[str, int]:
        state = self._storage.get(self._key)
        if not isinstance(state, dict):
            state = {_LATEST: {}, _IN_FLIGHT: {}}
            self._storage[self._key] = state
        return state.setdefault(name, {})

    def is_loading(self, step_id: str) -> bool:
        return step_id in self._table(_IN_FLIGHT)

    def latest(self, step_id: str) -> int:
        return self._table(_LATEST).get(step_id, 0)

    def begin(self, step_id: str) -> int | None:
        """Start a request for ``step_id``; ``None`` while another is in flight."""

        in_flight = self._table(_IN_FLIGHT)
        if step_id in in_flight:
            return None
        request_id = self.latest(step_id) + 1
        self._table(_LATEST)[step_id] = request_id
        in_flight[step_id] = request_id
        return request_id

    def release(self, step_id: str) -> None:
        """Stop waiting for the in-flight request; a late answer becomes stale."""

        self._table(_IN_FLIGHT).pop(step_id, None)

    def complete(self, step_id: str, request_id: int) -> bool:
        """Record the response for ``request_id``; return whether it is the latest."""

        in_flight = self._table(_IN_FLIGHT)
        if in_flight.get(step_id) == request_id:
            del in_flight[step_id]
        return request_id == self.latest(step_id)


def _default_field_map(step_id: str, info: OnboardingInfo) -> PathToField:
    definition = step_registry.get_step(step_id, info.account_holder)
    if definition is None:
        raise UnknownStepError(step_id)
    return definition.field_map


def resolve_submission(
    step_id: str,
    request_id: int,
    raw_result: MutationResult | Mapping[str, Any],
    *,
    tracker: SubmissionTracker,
    values: Mapping[str, object] | None = None,
    path_to_field: PathToField | None = None,
    on_success: SnapshotSink | None = None,
) -> SubmissionOutcome:
    """Apply a mutation response for ``request_id``."""

    is_latest = tracker.complete(step_id, request_id)
    if not is_latest:
        if tracker.policy is StaleResponsePolicy.DISCARD:
            logger.warning(
                "Discarding stale response %s for step '%s' (latest is %s)",
                request_id,
                step_id,
                tracker.latest(step_id),
            )
            return SubmissionOutcome(status=SubmissionStatus.STALE, request_id=request_id)
        logger.warning("Applying stale response %s for step '%s'", request_id, step_id)

    # the step is already released here; a malformed payload raises PayloadError
    result = raw_result if not isinstance(raw_result, Mapping) else parse_mutation_result(raw_result)

    if isinstance(result, MutationSuccess):
        if on_success is not None:
            on_success(result.onboarding)
        return SubmissionOutcome(status=SubmissionStatus.SUCCESS, onboarding=result.onboarding, request_id=request_id)

    notification = update_error_notification(result)
    if isinstance(result, ValidationRejection):
        current = values or {}
        field_errors: dict[str, str] = {}
        for error in extract_server_validation_errors(result, path_to_field or (lambda _path: None)):
            value = current.get(error.field_name)
            field_errors[error.field_name] = validation_error_message(
                error.code,
                value if isinstance(value, str) else None,
            )
        return SubmissionOutcome(
            status=SubmissionStatus.VALIDATION_REJECTED,
            field_errors=field_errors,
            notification=notification,
            request_id=request_id,
        )

    logger.warning("Update of step '%s' rejected with %s: %s", step_id, result.type, result.message)
    return SubmissionOutcome(status=SubmissionStatus.REJECTED, notification=notification, request_id=request_id)


def submit_step(
    step_id: str,
    values: Mapping[str, object],
    *,
    info: OnboardingInfo,
    mutation: Mutation,
    tracker: SubmissionTracker,
    on_success: SnapshotSink | None = None,
    path_to_field: PathToField | None = None,
) -> SubmissionOutcome:
    """Validate ``values`` locally, then send them through ``mutation``.

    Local errors and a pending request for the same step both return
    without calling ``mutation``.
    """

    form = form_for_step(step_id, info)
    local_errors = form.validate(values)
    if local_errors:
        return SubmissionOutcome(status=SubmissionStatus.LOCAL_ERRORS, field_errors=local_errors)

    field_map = path_to_field or _default_field_map(step_id, info)
    request_id = tracker.begin(step_id)
    if request_id is None:
        return SubmissionOutcome(status=SubmissionStatus.BUSY)

    cleaned = form.sanitize(values)
    payload: dict[str, object] = {"onboardingId": info.id, **cleaned}
    with log_context(onboarding_id=info.id, wizard_step=step_id):
        logger.debug("Submitting step '%s' as request %s", step_id, request_id)
        try:
            raw_result = mutation(payload)
        except Exception:
            tracker.release(step_id)
            raise
        return resolve_submission(
            step_id,
            request_id,
            raw_result,
            tracker=tracker,
            values=cleaned,
            path_to_field=field_map,
            on_success=on_success,
        )


__all__ = [
    "Mutation",
    "Notification",
    "SubmissionOutcome",
    "SubmissionStatus",
    "SubmissionTracker",
    "resolve_submission",
    "submit_step",
    "update_error_notification",
]
