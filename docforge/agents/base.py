"""Base agent — shared prompt building and provider calls for the document agents."""

from abc import ABC, abstractmethod
from pathlib import Path

from docforge.providers.base import LLMProvider
from docforge.store import get_relevant_feedback, save_state


class BaseAgent(ABC):
    """Generates the content of the steps one document phase owns.

    generate_step mutates state["documentProgress"], persists the whole
    state and returns it with a human-readable summary of what was produced.
    """

    name = "BaseAgent"
    steps: tuple[str, ...] = ()

    def __init__(self, provider: LLMProvider, root: Path):
        self.provider = provider
        self.root = Path(root)

    def generate_step(self, state: dict, step_id: str) -> tuple[dict, str]:
        if step_id not in self.steps:
            raise ValueError(f"{self.name} cannot handle step: {step_id}")
        state, content = self._generate(state, step_id)
        save_state(state, self.root)
        return state, content

    @abstractmethod
    def _generate(self, state: dict, step_id: str) -> tuple[dict, str]:
        ...

    def chat_json(self, user_prompt: str, json_schema: dict, system_prompt: str | None = None) -> dict:
        response = self.provider.generate(
            [{"role": "user", "content": user_prompt}],
            system_prompt=system_prompt,
            json_schema=json_schema,
        )
        return response.parsed

    def announce(self, task: str) -> None:
        print(f"[DocForge] {self.name}: {task}")

    def build_system_prompt(self, state: dict) -> str:
        project = state["project"]
        return f"""\
You are an expert technical writer helping generate senior-level planning documents.

Project: {project['name']}
Stack: {', '.join(project['stack'])}
Constraints: {', '.join(project['constraints']) or 'None specified'}

Guidelines:
- Be concise and precise
- Use technical language appropriate for senior engineers
- Focus on actionable content
- Avoid fluff and filler text
- Structure content with clear headings and lists"""

    def feedback(self, state: dict, phase: str) -> str:
        return get_relevant_feedback(state, phase)


def string_list(description: str = "") -> dict:
    schema = {"type": "array", "items": {"type": "string"}}
    if description:
        schema["description"] = description
    return schema


def string_field(description: str = "") -> dict:
    schema = {"type": "string"}
    if description:
        schema["description"] = description
    return schema


def object_schema(title: str, properties: dict) -> dict:
    """JSON schema for an object whose properties are all required."""
    return {
        "title": title,
        "type": "object",
        "properties": properties,
        "required": list(properties),
    }
