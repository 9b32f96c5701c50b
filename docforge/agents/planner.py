"""Planner Agent — breaks the RFC into implementation stages."""

from docforge.agents.base import BaseAgent, object_schema, string_field, string_list

STAGE_SCHEMA = object_schema("Stage", {
    "id": {"type": "integer"},
    "name": string_field(),
    "deliverables": string_list(),
    "dependencies": string_list("Names of earlier stages this one depends on"),
    "acceptanceCriteria": string_list(),
    "definitionOfDone": string_field(),
    "validationNotes": string_field(),
})

STAGES_SCHEMA = object_schema("Stages", {
    "stages": {"type": "array", "items": STAGE_SCHEMA},
})

CRITERIA_SCHEMA = object_schema("CriteriaRefinement", {
    "stages": {
        "type": "array",
        "items": object_schema("StageCriteria", {
            "id": {"type": "integer"},
            "acceptanceCriteria": string_list(),
            "definitionOfDone": string_field(),
            "validationNotes": string_field(),
        }),
    },
})

_REFINED_FIELDS = ("acceptanceCriteria", "definitionOfDone", "validationNotes")


def format_stages_overview(stages: list[dict]) -> str:
    blocks = []
    for s in stages:
        deliverables = "\n".join(f"  - {d}" for d in s.get("deliverables", []))
        deps = ", ".join(s.get("dependencies", [])) or "None"
        blocks.append(
            f"Stage {s['id']:02d}: {s['name']}\nDeliverables:\n{deliverables}\nDependencies: {deps}"
        )
    return "\n\n".join(blocks)


def format_detailed_stages(stages: list[dict]) -> str:
    blocks = []
    for s in stages:
        deliverables = "\n".join(f"  - {d}" for d in s.get("deliverables", []))
        criteria = "\n".join(f"  - {c}" for c in s.get("acceptanceCriteria", []))
        blocks.append(
            f"Stage {s['id']:02d}: {s['name']}\n"
            f"Deliverables:\n{deliverables}\n"
            f"Acceptance Criteria:\n{criteria}\n"
            f"Definition of Done: {s.get('definitionOfDone', '')}\n"
            f"Validation: {s.get('validationNotes', '')}"
        )
    return "\n\n---\n\n".join(blocks)


def _normalize_stage(stage: dict, index: int) -> dict:
    """Fill optional stage fields the model left out."""
    return {
        "id": int(stage.get("id", index)),
        "name": stage.get("name") or f"Stage {index}",
        "deliverables": list(stage.get("deliverables", [])),
        "dependencies": list(stage.get("dependencies", [])),
        "acceptanceCriteria": list(stage.get("acceptanceCriteria", [])),
        "definitionOfDone": stage.get("definitionOfDone", ""),
        "validationNotes": stage.get("validationNotes", ""),
    }


class PlannerAgent(BaseAgent):
    name = "PlannerAgent"
    steps = ("plan.stages", "plan.criteria")

    def _generate(self, state: dict, step_id: str) -> tuple[dict, str]:
        if step_id == "plan.stages":
            return self._stages(state)
        return self._criteria(state)

    def _stages(self, state: dict) -> tuple[dict, str]:
        self.announce("Drafting Stage Breakdown...")
        rfc = state["documentProgress"]["rfc"]
        prompt = f"""\
Based on the RFC:

Problem: {rfc.get('problem', '')}
Goals: {rfc.get('goals', '')}
Approach: {rfc.get('approach', '')}

Create a staged implementation plan with 3-5 stages.
Each stage should:
- Have clear deliverables
- List dependencies on previous stages
- Include initial acceptance criteria
- Be independently testable

Start with Stage 0 for foundation/setup.
{self.feedback(state, 'plan')}"""

        result = self.chat_json(prompt, STAGES_SCHEMA, self.build_system_prompt(state))

        stages = [_normalize_stage(s, i) for i, s in enumerate(result["stages"])]
        state["documentProgress"]["plan"]["stages"] = stages
        return state, format_stages_overview(stages)

    def _criteria(self, state: dict) -> tuple[dict, str]:
        self.announce("Refining Acceptance Criteria...")
        stages = state["documentProgress"]["plan"].get("stages")
        if not stages:
            raise ValueError("No stages defined. Run plan.stages first.")

        prompt = f"""\
Review and refine the acceptance criteria for these stages:

{format_stages_overview(stages)}

For each stage, provide:
1. Detailed, testable acceptance criteria (at least 3 per stage)
2. Clear definition of done
3. Specific validation notes (commands to run, tests to check)
{self.feedback(state, 'plan')}"""

        result = self.chat_json(prompt, CRITERIA_SCHEMA, self.build_system_prompt(state))

        # Merge by id; refinements for unknown stages are dropped.
        by_id = {s["id"]: s for s in stages}
        for refined in result["stages"]:
            existing = by_id.get(refined.get("id"))
            if existing is None:
                continue
            for key in _REFINED_FIELDS:
                if key in refined:
                    existing[key] = refined[key]

        return state, format_detailed_stages(stages)
