"""Tests for docforge.steps: the step chain and its queries."""

import pytest

from docforge.steps import (
    COMPLETE_STEP,
    FIRST_STEP,
    PHASE_ORDER,
    STEP_GRAPH,
    StepDefinition,
    StepGraph,
    advance_step,
    get_next_step,
    get_phase,
    get_phase_steps,
    get_progress_percentage,
    get_remaining_steps,
    get_step,
    get_step_label,
    is_checkpoint,
    is_phase_complete,
)

ALL_STEPS = [
    "rfc.problem", "rfc.goals", "rfc.approach", "rfc.interfaces", "rfc.alternatives",
    "rfc.complete", "plan.stages", "plan.criteria", "plan.complete", "rollout.risks",
    "rollout.observability", "rollout.procedures", "rollout.complete", "prompts.generate",
    "complete",
]


def _at(step_id):
    return {"currentStep": step_id}


class TestChain:
    def test_first_step(self):
        assert FIRST_STEP == "rfc.problem"

    def test_linear_order(self):
        assert list(STEP_GRAPH.order) == ALL_STEPS

    def test_walk_terminates_at_complete(self):
        seen = []
        current = FIRST_STEP
        while current is not None:
            assert current not in seen
            seen.append(current)
            current = get_next_step(current)
        assert seen[-1] == COMPLETE_STEP
        assert len(seen) == 15

    def test_only_terminal_has_no_successor(self):
        terminals = [d.id for d in STEP_GRAPH if d.next is None]
        assert terminals == [COMPLETE_STEP]

    def test_every_step_in_a_known_phase(self):
        for definition in STEP_GRAPH:
            assert definition.phase in PHASE_ORDER

    def test_definitions_are_immutable(self):
        with pytest.raises(AttributeError):
            get_step("rfc.goals").next = "complete"

    def test_advance_step(self):
        assert advance_step(_at("rfc.alternatives")) == "rfc.complete"
        assert advance_step(_at("rfc.complete")) == "plan.stages"
        assert advance_step(_at(COMPLETE_STEP)) is None


class TestStepGraphConstruction:
    def test_rejects_cycle(self):
        defs = (
            StepDefinition("a", "rfc", "A", False, "b"),
            StepDefinition("b", "rfc", "B", False, "a"),
            StepDefinition("c", "rfc", "C", False, None),
        )
        with pytest.raises(ValueError):
            StepGraph(defs)

    def test_rejects_dangling_successor(self):
        defs = (
            StepDefinition("a", "rfc", "A", False, "missing"),
            StepDefinition("b", "rfc", "B", False, None),
        )
        with pytest.raises(ValueError):
            StepGraph(defs)

    def test_rejects_two_terminals(self):
        defs = (
            StepDefinition("a", "rfc", "A", False, None),
            StepDefinition("b", "rfc", "B", False, None),
        )
        with pytest.raises(ValueError):
            StepGraph(defs)

    def test_rejects_unreachable_step(self):
        defs = (
            StepDefinition("a", "rfc", "A", False, "c"),
            StepDefinition("b", "rfc", "B", False, "c"),
            StepDefinition("c", "rfc", "C", False, None),
        )
        with pytest.raises(ValueError):
            StepGraph(defs)

    def test_rejects_duplicate_ids(self):
        defs = (
            StepDefinition("a", "rfc", "A", False, "b"),
            StepDefinition("a", "rfc", "A2", False, "b"),
            StepDefinition("b", "rfc", "B", False, None),
        )
        with pytest.raises(ValueError):
            StepGraph(defs)


class TestStepQueries:
    def test_checkpoints(self):
        assert is_checkpoint("rfc.problem")
        assert is_checkpoint("plan.criteria")
        assert is_checkpoint("rollout.procedures")
        assert not is_checkpoint("rfc.complete")
        assert not is_checkpoint("prompts.generate")
        assert not is_checkpoint(COMPLETE_STEP)

    def test_phase_and_label(self):
        assert get_phase("rollout.risks") == "rollout"
        assert get_phase(COMPLETE_STEP) == "prompts"
        assert get_step_label("rfc.interfaces") == "Interfaces & Contracts"
        assert get_step_label(COMPLETE_STEP) == "All Complete"

    def test_unknown_step_raises_key_error(self):
        with pytest.raises(KeyError):
            get_step("rfc.unknown")
        with pytest.raises(KeyError):
            get_next_step("nope")
        with pytest.raises(KeyError):
            get_progress_percentage(_at("nope"))

    def test_phase_steps_in_order(self):
        assert [s.id for s in get_phase_steps("plan")] == [
            "plan.stages", "plan.criteria", "plan.complete",
        ]
        assert [s.id for s in get_phase_steps("prompts")] == ["prompts.generate", COMPLETE_STEP]

    def test_phase_steps_unknown_phase(self):
        with pytest.raises(ValueError):
            get_phase_steps("deploy")


class TestPhaseCompletion:
    def test_rfc_incomplete_before_sentinel(self):
        assert not is_phase_complete(_at("rfc.alternatives"), "rfc")

    def test_rfc_complete_on_sentinel(self):
        assert is_phase_complete(_at("rfc.complete"), "rfc")

    def test_rfc_complete_in_later_phase(self):
        assert is_phase_complete(_at("plan.stages"), "rfc")

    def test_plan_not_complete_during_rfc(self):
        assert not is_phase_complete(_at("rfc.complete"), "plan")

    def test_rollout_complete_at_prompts(self):
        assert is_phase_complete(_at("prompts.generate"), "rollout")

    def test_prompts_complete_only_at_terminal(self):
        assert not is_phase_complete(_at("prompts.generate"), "prompts")
        assert is_phase_complete(_at(COMPLETE_STEP), "prompts")

    def test_unknown_phase(self):
        with pytest.raises(ValueError):
            is_phase_complete(_at("rfc.problem"), "deploy")


class TestProgress:
    def test_start_is_zero(self):
        assert get_progress_percentage(_at("rfc.problem")) == 0

    def test_end_is_hundred(self):
        assert get_progress_percentage(_at(COMPLETE_STEP)) == 100

    def test_midpoint(self):
        # index 7 of 15 -> 7/14 -> 50
        assert get_progress_percentage(_at("plan.criteria")) == 50

    def test_rounds_half_up(self):
        # index 1 -> 7.142..., index 6 -> 42.857...
        assert get_progress_percentage(_at("rfc.goals")) == 7
        assert get_progress_percentage(_at("plan.stages")) == 43

    def test_monotonic_over_chain(self):
        values = [get_progress_percentage(_at(s)) for s in ALL_STEPS]
        assert values == sorted(values)
        assert all(0 <= v <= 100 for v in values)

    def test_remaining_steps(self):
        assert get_remaining_steps(_at("rfc.problem")) == 14
        assert get_remaining_steps(_at("prompts.generate")) == 1
        assert get_remaining_steps(_at(COMPLETE_STEP)) == 0
