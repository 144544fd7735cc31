"""Display model for the condensed progress stepper.

The stepper groups the Organisation steps under a single parent entry but
never changes the step list the navigator walks.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Final

from wizard.types import WizardStep

ORGANISATION_PREFIX: Final[str] = "Organisation"
ORGANISATION_ANCHOR: Final[str] = "Organisation1"
ORGANISATION_GROUP_LABEL: Final[str] = "step.title.organisation"

# Routes that render without the stepper.
_STEPPERLESS_ROUTES: Final[frozenset[str]] = frozenset({"Root", "Presentation"})


@dataclass(frozen=True)
class StepperLeaf:
    id: str
    label: str
    url: str
    has_errors: bool = False


@dataclass(frozen=True)
class StepperGroup:
    label: str
    children: tuple[StepperLeaf, ...]

    @property
    def has_errors(self) -> bool:
        return any(child.has_errors for child in self.children)


StepperNode = StepperLeaf | StepperGroup


def _leaf(step: WizardStep, finalized: bool) -> StepperLeaf:
    return StepperLeaf(
        id=step.id,
        label=step.label,
        url=step.url,
        has_errors=finalized and len(step.errors) > 0,
    )


def project_stepper(steps: Sequence[WizardStep], finalized: bool) -> list[StepperNode]:
    """Return the stepper entries for ``steps``.

    Errors are flagged only once ``finalized`` is set.
    """

    nodes: list[StepperNode] = []
    for step in steps:
        if step.id != ORGANISATION_ANCHOR and step.id.startswith(ORGANISATION_PREFIX):
            continue
        if step.id == ORGANISATION_ANCHOR:
            children = tuple(_leaf(item, finalized) for item in steps if item.id.startswith(ORGANISATION_PREFIX))
            nodes.append(StepperGroup(label=ORGANISATION_GROUP_LABEL, children=children))
            continue
        nodes.append(_leaf(step, finalized))
    return nodes


def iter_leaves(nodes: Sequence[StepperNode]) -> Iterator[StepperLeaf]:
    """Yield every leaf of ``nodes`` in display order."""

    for node in nodes:
        if isinstance(node, StepperGroup):
            yield from node.children
        else:
            yield node


def active_node_index(nodes: Sequence[StepperNode], step_id: str) -> int | None:
    """Return the index of the top-level node containing ``step_id``."""

    for index, node in enumerate(nodes):
        if isinstance(node, StepperGroup):
            if any(child.id == step_id for child in node.children):
                return index
        elif node.id == step_id:
            return index
    return None


def is_stepper_displayed(route_name: str | None) -> bool:
    """Return ``True`` when the stepper is shown for ``route_name``."""

    return route_name is not None and route_name not in _STEPPERLESS_ROUTES


__all__ = [
    "ORGANISATION_GROUP_LABEL",
    "StepperGroup",
    "StepperLeaf",
    "StepperNode",
    "active_node_index",
    "is_stepper_displayed",
    "iter_leaves",
    "project_stepper",
]
