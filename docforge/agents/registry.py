"""Maps each workflow phase to the agent that generates its steps."""

from pathlib import Path

from docforge.agents.base import BaseAgent
from docforge.agents.planner import PlannerAgent
from docforge.agents.prompt import PromptAgent
from docforge.agents.rfc import RFCAgent
from docforge.agents.rollout import RolloutAgent
from docforge.providers.base import LLMProvider
from docforge.steps import get_phase

AGENTS_BY_PHASE = {
    "rfc": RFCAgent,
    "plan": PlannerAgent,
    "rollout": RolloutAgent,
    "prompts": PromptAgent,
}


def get_agent_for_step(step_id: str, provider: LLMProvider, root: Path) -> BaseAgent:
    return AGENTS_BY_PHASE[get_phase(step_id)](provider, root)


def step_generates_content(step_id: str) -> bool:
    """Sentinel steps (phase completions and the terminal step) produce nothing."""
    agent_cls = AGENTS_BY_PHASE[get_phase(step_id)]
    return step_id in agent_cls.steps
