"""Prompt Agent — writes one implementation prompt per plan stage."""

from pathlib import Path

from docforge.agents.base import BaseAgent
from docforge.utils.files import get_stage_prompt_path, write_file_safe
from docforge.utils.formatter import render_stage_prompt


class PromptAgent(BaseAgent):
    """Renders prompts/Stage-NN.md from the plan. Makes no provider calls."""

    name = "PromptAgent"
    steps = ("prompts.generate",)

    def _stages(self, state: dict) -> list[dict]:
        stages = state["documentProgress"]["plan"].get("stages")
        if not stages:
            raise ValueError("No stages defined. Complete PLAN first.")
        return stages

    def _generate(self, state: dict, step_id: str) -> tuple[dict, str]:
        self.announce("Generating Stage Prompts...")
        stages = self._stages(state)

        written = []
        for stage in stages:
            path = write_file_safe(
                get_stage_prompt_path(stage["id"], self.root),
                render_stage_prompt(stage, state, stages),
            )
            written.append(path)
            print(f"[DocForge] Generated: {path.name}")

        content = f"Generated {len(written)} stage prompt files:\n" + "\n".join(f"- {p}" for p in written)
        return state, content

    def regenerate_stage(self, state: dict, stage_id: int) -> Path:
        """Rewrite the prompt for a single stage. Raises ValueError if the stage is unknown."""
        stages = self._stages(state)
        stage = next((s for s in stages if s["id"] == stage_id), None)
        if stage is None:
            raise ValueError(f"Stage {stage_id} not found.")
        return write_file_safe(
            get_stage_prompt_path(stage_id, self.root),
            render_stage_prompt(stage, state, stages),
        )
