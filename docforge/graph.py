"""LangGraph StateGraph driving the step workflow.

generate runs the agent for the current step, advance moves the stored
currentStep to its successor and writes any document whose phase just became
complete. The loop ends at the terminal step.
"""

from pathlib import Path
from typing import TypedDict

from langgraph.graph import END, StateGraph

from docforge.agents.registry import get_agent_for_step, step_generates_content
from docforge.providers.factory import get_provider
from docforge.state import DOCUMENT_TYPES
from docforge.steps import COMPLETE_STEP, get_next_step, is_phase_complete
from docforge.store import load_state, update_state
from docforge.utils.files import get_doc_path, write_file_safe
from docforge.utils.formatter import render_document

# Two nodes per step, with headroom.
RECURSION_LIMIT = 100


class PipelineState(TypedDict):
    project_root: str
    current_step: str
    last_content: str
    generated_steps: list[str]


def advance_project(root: Path) -> tuple[dict, list[Path]]:
    """Move the stored project to its next step.

    Returns the new state and the documents written because their phase was
    completed by this move. A project already at the terminal step is
    returned unchanged.
    """
    state = load_state(root)
    next_step = get_next_step(state["currentStep"])
    if next_step is None:
        return state, []

    was_complete = {doc: is_phase_complete(state, doc) for doc in DOCUMENT_TYPES}
    state = update_state({"currentStep": next_step}, root)

    written = []
    for doc in DOCUMENT_TYPES:
        if not was_complete[doc] and is_phase_complete(state, doc):
            path = write_file_safe(get_doc_path(doc, root), render_document(doc, state))
            print(f"[DocForge] Saved: {path}")
            written.append(path)
    return state, written


def _generate(state: PipelineState) -> dict:
    """Generate content for the current step. Sentinel steps produce nothing."""
    step_id = state["current_step"]
    if not step_generates_content(step_id):
        return {"last_content": ""}

    root = Path(state["project_root"])
    agent = get_agent_for_step(step_id, get_provider(), root)
    _, content = agent.generate_step(load_state(root), step_id)
    return {
        "last_content": content,
        "generated_steps": state["generated_steps"] + [step_id],
    }


def _advance(state: PipelineState) -> dict:
    project, _ = advance_project(Path(state["project_root"]))
    return {"current_step": project["currentStep"]}


def _route_after_advance(state: PipelineState) -> str:
    if state["current_step"] == COMPLETE_STEP:
        return "end"
    return "generate"


# --- Build the graph ---

workflow = StateGraph(PipelineState)

workflow.add_node("generate", _generate)
workflow.add_node("advance", _advance)

workflow.set_entry_point("generate")

workflow.add_edge("generate", "advance")

workflow.add_conditional_edges(
    "advance",
    _route_after_advance,
    {
        "end": END,
        "generate": "generate",
    },
)

graph = workflow.compile()


# --- Step-execution helpers for the interactive CLI loop ---

_NODE_FNS = {
    "generate": _generate,
    "advance": _advance,
}


def initial_pipeline_state(root: Path) -> PipelineState:
    """Seed a pipeline run from the stored project. Raises ProjectNotFoundError."""
    project = load_state(root)
    return {
        "project_root": str(root),
        "current_step": project["currentStep"],
        "last_content": "",
        "generated_steps": [],
    }


def run_single_step(state: PipelineState, node_name: str) -> PipelineState:
    """Run a single node and return the updated state.

    Used by the CLI for step-by-step execution with checkpoints.
    """
    node_fn = _NODE_FNS[node_name]
    updates = node_fn(state)
    return {**state, **updates}


def run_pipeline(root: Path) -> PipelineState:
    """Run every remaining step to completion without checkpoints."""
    state = initial_pipeline_state(root)
    if state["current_step"] == COMPLETE_STEP:
        return state
    return graph.invoke(state, {"recursion_limit": RECURSION_LIMIT})
