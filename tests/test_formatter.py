"""Tests for docforge.utils.formatter: document and stage prompt rendering."""

import pytest

from docforge.utils.formatter import (
    format_alternatives,
    format_goals_list,
    parse_stages,
    render_document,
    render_plan,
    render_rfc,
    render_rollout,
    render_stage_prompt,
)
from docforge.utils.validator import validate_document


# --- render_rfc ---

class TestRenderRfc:
    def test_title_and_stack(self, sample_state):
        md = render_rfc(sample_state)
        assert md.startswith("# RFC: todo-api")
        assert "Stack: Python 3.12, FastAPI" in md
        assert "Constraints: must run offline" in md

    def test_all_sections_present(self, sample_state):
        md = render_rfc(sample_state)
        for heading in (
            "## Problem Statement", "## Goals", "## Non-Goals", "## Proposed Approach",
            "## Interfaces & Contracts", "## Alternatives Considered", "## Open Questions",
            "## Assumptions",
        ):
            assert heading in md

    def test_sections_appear_only_when_generated(self, sample_state):
        sample_state["documentProgress"]["rfc"] = {"problem": "Only the problem."}
        md = render_rfc(sample_state)
        assert "## Problem Statement" in md
        assert "## Goals" not in md
        assert "## Assumptions" not in md

    def test_validates(self, sample_state):
        assert validate_document("rfc", render_rfc(sample_state)).valid


# --- render_plan ---

class TestRenderPlan:
    def test_stage_headings_zero_padded(self, sample_state):
        md = render_plan(sample_state)
        assert "## Stage 00: Foundation" in md
        assert "## Stage 01: Task API" in md

    def test_stage_subsections(self, sample_state):
        md = render_plan(sample_state)
        assert "### Deliverables" in md
        assert "- [ ] State file round-trips" in md
        assert "### Definition of Done" in md
        assert "### Validation Notes" in md

    def test_no_dependencies_rendered_as_none(self, sample_state):
        md = render_plan(sample_state)
        foundation = md.split("## Stage 00: Foundation")[1].split("## Stage 01")[0]
        assert "- None" in foundation

    def test_overview_always_present(self, sample_state):
        sample_state["documentProgress"]["plan"] = {}
        md = render_plan(sample_state)
        assert "## Overview" in md
        assert "## Stage" not in md

    def test_validates(self, sample_state):
        assert validate_document("plan", render_plan(sample_state)).valid


# --- render_rollout ---

class TestRenderRollout:
    def test_risk_table_with_markers(self, sample_state):
        md = render_rollout(sample_state)
        assert "| Risk | Severity | Mitigation |" in md
        assert "| SQLite write contention | 🟠 high | Move to Postgres past 50 rps |" in md
        assert "🟢 low" in md

    def test_pipes_escaped_in_table(self, sample_state):
        sample_state["documentProgress"]["rollout"]["risks"][0]["description"] = "a | b"
        assert "a \\| b" in render_rollout(sample_state)

    def test_numbered_steps_and_stop_conditions(self, sample_state):
        md = render_rollout(sample_state)
        assert "1. Deploy to staging" in md
        assert "3. Full rollout" in md
        assert "- ⛔ Error rate above 2%" in md

    def test_validates(self, sample_state):
        assert validate_document("rollout", render_rollout(sample_state)).valid


class TestRenderDocument:
    def test_dispatch(self, sample_state):
        assert render_document("plan", sample_state) == render_plan(sample_state)

    def test_unknown_type(self, sample_state):
        with pytest.raises(ValueError):
            render_document("readme", sample_state)


# --- helpers ---

class TestHelpers:
    def test_format_goals_list(self):
        assert format_goals_list(["a", "b"]) == "- a\n- b"

    def test_format_alternatives(self):
        md = format_alternatives([
            {"name": "Monolith", "pros": ["Simple"], "cons": ["Scaling"], "decision": "Chosen"},
        ])
        assert md.startswith("### Monolith")
        assert "**Pros:**\n- Simple" in md
        assert "**Cons:**\n- Scaling" in md
        assert md.endswith("**Decision:** Chosen")


# --- stage prompts ---

class TestRenderStagePrompt:
    def test_required_headings(self, sample_state, stages):
        md = render_stage_prompt(stages[0], sample_state, stages)
        for heading in (
            "# Stage 00: Foundation", "## Context Recap", "## Stage Scope", "### In Scope",
            "### Non-Goals (This Stage)", "## Tasks", "## Required Validation",
            "## Checkpoint Questions", "## ⛔ Don't Proceed Until",
        ):
            assert heading in md

    def test_project_context(self, sample_state, stages):
        md = render_stage_prompt(stages[0], sample_state, stages)
        assert "**Project:** todo-api" in md
        assert "**Stack:** Python 3.12, FastAPI" in md

    def test_future_deliverables_are_non_goals(self, sample_state, stages):
        md = render_stage_prompt(stages[0], sample_state, stages)
        scope = md.split("### Non-Goals (This Stage)")[1].split("## Tasks")[0]
        assert "- CRUD endpoints" in scope
        assert "- Pagination" in scope

    def test_final_stage_has_no_future_work(self, sample_state, stages):
        md = render_stage_prompt(stages[1], sample_state, stages)
        assert "Final stage" in md
        assert "## Dependencies" in md
        assert "- [ ] Foundation" in md

    def test_long_problem_truncated(self, sample_state, stages):
        sample_state["documentProgress"]["rfc"]["problem"] = "x" * 500
        md = render_stage_prompt(stages[0], sample_state, stages)
        assert "x" * 200 + "..." in md
        assert "x" * 201 not in md


class TestParseStages:
    def test_recovers_rendered_stages(self, sample_state, stages):
        parsed = parse_stages(render_plan(sample_state))
        assert [s["id"] for s in parsed] == [0, 1]
        assert parsed[0]["name"] == "Foundation"
        assert parsed[0]["deliverables"] == stages[0]["deliverables"]
        assert parsed[0]["dependencies"] == []
        assert parsed[1]["dependencies"] == ["Foundation"]
        assert parsed[1]["acceptanceCriteria"] == ["All endpoints return JSON"]
        assert parsed[1]["definitionOfDone"] == "API deployed to staging"

    def test_no_stages(self):
        assert parse_stages("# Implementation Plan: x\n\n## Overview\n") == []
