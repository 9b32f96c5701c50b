"""Step Graph — the fixed sequence of workflow steps and their transition rule.

The graph is built once at import time and never mutated. Every query is a
pure function of a step id (or of state["currentStep"]), so callers share the
module-level STEP_GRAPH freely.
"""

import math
from dataclasses import dataclass
from types import MappingProxyType

PHASE_ORDER = ("rfc", "plan", "rollout", "prompts")

COMPLETE_STEP = "complete"


@dataclass(frozen=True)
class StepDefinition:
    id: str
    phase: str
    label: str
    is_checkpoint: bool
    next: str | None


# Linear order matters: progress is measured by position in this tuple.
_STEP_DEFINITIONS = (
    # RFC phase
    StepDefinition("rfc.problem", "rfc", "Problem Statement", True, "rfc.goals"),
    StepDefinition("rfc.goals", "rfc", "Goals and Non-Goals", True, "rfc.approach"),
    StepDefinition("rfc.approach", "rfc", "Approach", True, "rfc.interfaces"),
    StepDefinition("rfc.interfaces", "rfc", "Interfaces & Contracts", True, "rfc.alternatives"),
    StepDefinition("rfc.alternatives", "rfc", "Alternatives & Tradeoffs", True, "rfc.complete"),
    StepDefinition("rfc.complete", "rfc", "RFC Complete", False, "plan.stages"),
    # Plan phase
    StepDefinition("plan.stages", "plan", "Stage Breakdown", True, "plan.criteria"),
    StepDefinition("plan.criteria", "plan", "Acceptance Criteria", True, "plan.complete"),
    StepDefinition("plan.complete", "plan", "Plan Complete", False, "rollout.risks"),
    # Rollout phase
    StepDefinition("rollout.risks", "rollout", "Risk Analysis", True, "rollout.observability"),
    StepDefinition("rollout.observability", "rollout", "Observability Plan", True, "rollout.procedures"),
    StepDefinition("rollout.procedures", "rollout", "Rollout & Rollback Procedures", True, "rollout.complete"),
    StepDefinition("rollout.complete", "rollout", "Rollout Complete", False, "prompts.generate"),
    # Prompts phase
    StepDefinition("prompts.generate", "prompts", "Generate Stage Prompts", False, COMPLETE_STEP),
    StepDefinition(COMPLETE_STEP, "prompts", "All Complete", False, None),
)


class StepGraph:
    """Immutable lookup over a linear chain of step definitions.

    Raises ValueError at construction if the chain is not total, acyclic and
    terminated by exactly one step without a successor.
    """

    def __init__(self, definitions: tuple[StepDefinition, ...]):
        steps = {d.id: d for d in definitions}
        if len(steps) != len(definitions):
            raise ValueError("Duplicate step ids in step definitions.")

        terminals = [d.id for d in definitions if d.next is None]
        if len(terminals) != 1:
            raise ValueError(f"Expected exactly one terminal step, found {terminals}.")

        for d in definitions:
            if d.phase not in PHASE_ORDER:
                raise ValueError(f"Step '{d.id}' has unknown phase '{d.phase}'.")
            if d.next is not None and d.next not in steps:
                raise ValueError(f"Step '{d.id}' points at undefined step '{d.next}'.")

        # Walk the chain from the first step: it must reach every step once.
        seen = []
        current = definitions[0].id
        while current is not None:
            if current in seen:
                raise ValueError(f"Cycle in step chain at '{current}'.")
            seen.append(current)
            current = steps[current].next
        if len(seen) != len(steps):
            unreachable = sorted(set(steps) - set(seen))
            raise ValueError(f"Steps unreachable from '{definitions[0].id}': {unreachable}.")

        self._steps = MappingProxyType(steps)
        self._order = tuple(seen)

    @property
    def first_step(self) -> str:
        return self._order[0]

    @property
    def order(self) -> tuple[str, ...]:
        return self._order

    def get(self, step_id: str) -> StepDefinition:
        return self._steps[step_id]

    def index(self, step_id: str) -> int:
        self._steps[step_id]  # KeyError for unknown ids
        return self._order.index(step_id)

    def phase_steps(self, phase: str) -> list[StepDefinition]:
        return [self._steps[s] for s in self._order if self._steps[s].phase == phase]

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self):
        return (self._steps[s] for s in self._order)


STEP_GRAPH = StepGraph(_STEP_DEFINITIONS)

FIRST_STEP = STEP_GRAPH.first_step

# Reaching a sentinel marks its phase complete. The prompts phase ends at the terminal step.
PHASE_SENTINELS = MappingProxyType({
    "rfc": "rfc.complete",
    "plan": "plan.complete",
    "rollout": "rollout.complete",
    "prompts": COMPLETE_STEP,
})


def get_step(step_id: str) -> StepDefinition:
    """Return the definition for a step. Raises KeyError for unknown ids."""
    return STEP_GRAPH.get(step_id)


def get_next_step(step_id: str) -> str | None:
    return STEP_GRAPH.get(step_id).next


def is_checkpoint(step_id: str) -> bool:
    return STEP_GRAPH.get(step_id).is_checkpoint


def get_phase(step_id: str) -> str:
    return STEP_GRAPH.get(step_id).phase


def get_step_label(step_id: str) -> str:
    return STEP_GRAPH.get(step_id).label


def get_phase_steps(phase: str) -> list[StepDefinition]:
    """Return the steps of a phase in workflow order."""
    if phase not in PHASE_ORDER:
        raise ValueError(f"Unknown phase '{phase}'. Must be one of: {PHASE_ORDER}")
    return STEP_GRAPH.phase_steps(phase)


def advance_step(state: dict) -> str | None:
    """Return the step that follows state's current step, or None at the end."""
    return get_next_step(state["currentStep"])


def is_phase_complete(state: dict, phase: str) -> bool:
    """Check whether a phase is complete for the given state.

    Complete means the workflow has moved into a later phase, or sits exactly
    on the phase's sentinel step. Being past a phase's last substantive step
    but before its sentinel still counts as incomplete.
    """
    if phase not in PHASE_ORDER:
        raise ValueError(f"Unknown phase '{phase}'. Must be one of: {PHASE_ORDER}")
    current_phase = get_phase(state["currentStep"])
    return (
        PHASE_ORDER.index(current_phase) > PHASE_ORDER.index(phase)
        or state["currentStep"] == PHASE_SENTINELS[phase]
    )


def get_progress_percentage(state: dict) -> int:
    """Position of the current step in the linear ordering, as 0-100.

    Not weighted by work: every step counts the same. Rounds half up.
    """
    current_index = STEP_GRAPH.index(state["currentStep"])
    return math.floor(current_index / (len(STEP_GRAPH) - 1) * 100 + 0.5)


def get_remaining_steps(state: dict) -> int:
    return len(STEP_GRAPH) - STEP_GRAPH.index(state["currentStep"]) - 1
