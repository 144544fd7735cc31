"""Progress stepper rendered above each wizard step."""

from __future__ import annotations

import html
from typing import Callable, Mapping, Sequence

import streamlit as st

from wizard.stepper import (
    StepperGroup,
    StepperLeaf,
    StepperNode,
    active_node_index,
    is_stepper_displayed,
    iter_leaves,
)

_STYLE_STATE_KEY = "_onboarding_stepper_styles_v1"

Translate = Callable[[str], str]


def _inject_stepper_styles() -> None:
    """Inject the stepper styling once per session."""

    if st.session_state.get(_STYLE_STATE_KEY):
        return

    st.session_state[_STYLE_STATE_KEY] = True
    st.markdown(
        """
        <style>
        .onboarding-stepper {
            display: flex;
            flex-wrap: wrap;
            gap: 0.35rem;
            font-size: 0.85rem;
            color: var(--text-muted);
            margin: 0.25rem 0 0.75rem;
        }

        .onboarding-stepper span[data-state="current"] {
            color: var(--text-strong);
            font-weight: 600;
        }

        .onboarding-stepper span[data-state="done"] {
            color: var(--text-strong);
        }

        .onboarding-stepper span[data-errors="true"] {
            color: var(--danger, #d14343);
        }

        .onboarding-stepper span[aria-hidden="true"] {
            color: var(--border-strong);
        }
        </style>
        """,
        unsafe_allow_html=True,
    )


def _node_label(node: StepperNode, translate: Translate) -> str:
    if isinstance(node, StepperGroup):
        children = ", ".join(translate(child.label) for child in node.children)
        return f"{translate(node.label)} ({children})" if children else translate(node.label)
    return translate(node.label)


def build_segments(
    nodes: Sequence[StepperNode],
    current_step_id: str,
    *,
    translate: Translate = str,
) -> list[str]:
    """Return one HTML ``<span>`` per top-level stepper node."""

    status_icons: Mapping[str, str] = {
        "done": "✔︎",
        "current": "➤",
        "upcoming": "•",
    }
    current = active_node_index(nodes, current_step_id)
    segments: list[str] = []
    for idx, node in enumerate(nodes):
        if current is not None and idx < current:
            status = "done"
        elif idx == current:
            status = "current"
        else:
            status = "upcoming"
        icon = "⚠" if node.has_errors else status_icons[status]
        text = f"{icon} {idx + 1}. {_node_label(node, translate)}"
        errors = "true" if node.has_errors else "false"
        segments.append(f"<span data-state='{status}' data-errors='{errors}'>{html.escape(text)}</span>")
    return segments


def render_stepper(
    nodes: Sequence[StepperNode],
    current_step_id: str,
    *,
    route_name: str | None = None,
    translate: Translate = str,
    on_select: Callable[[StepperLeaf], None] | None = None,
) -> None:
    """Render the stepper; leaves become buttons when ``on_select`` is given."""

    if not nodes or not is_stepper_displayed(route_name or current_step_id):
        return

    _inject_stepper_styles()
    arrow = "<span aria-hidden='true'>→</span>"
    st.markdown(
        "<div class='onboarding-stepper'>"
        + arrow.join(build_segments(nodes, current_step_id, translate=translate))
        + "</div>",
        unsafe_allow_html=True,
    )
    if on_select is None:
        return

    leaves = list(iter_leaves(nodes))
    columns = st.columns(len(leaves))
    for column, leaf in zip(columns, leaves):
        with column:
            if st.button(
                translate(leaf.label),
                key=f"stepper.{leaf.id}",
                disabled=leaf.id == current_step_id,
            ):
                on_select(leaf)


__all__ = ["build_segments", "render_stepper"]
