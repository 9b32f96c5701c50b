"""Project State Store — durable load/save of .docforge/state.json.

Also hosts the approval ledger and the checkpoint recorder, which are thin
load-modify-save cycles over the same record. Every function takes the
project root explicitly.

Writes are atomic (temp file + os.replace), so an interrupted save leaves the
previous record intact. The load-modify-save helpers additionally hold an
exclusive fcntl lock for the whole cycle. A bare save_state is still
last-writer-wins.
"""

import fcntl
import json
import os
import sys
import tempfile
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from docforge.errors import ProjectExistsError, ProjectNotFoundError
from docforge.state import (
    DOCUMENT_TYPES,
    REQUIRED_STATE_KEYS,
    ProjectMetadata,
    ProjectState,
    create_initial_state,
)
from docforge.steps import FIRST_STEP, STEP_GRAPH
from docforge.utils.hashing import calculate_hash

STATE_DIR = ".docforge"
STATE_FILE = "state.json"
_LOCK_SUFFIX = ".lock"

_FIELD_TYPES = {
    "project": dict,
    "checkpointResponses": list,
    "approvals": list,
    "documentHashes": dict,
    "documentProgress": dict,
    "strictMode": bool,
}


def _now() -> str:
    """Return current UTC time as ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


def get_state_dir(root: Path) -> Path:
    return Path(root) / STATE_DIR


def get_state_file(root: Path) -> Path:
    return get_state_dir(root) / STATE_FILE


# ---------------------------------------------------------------------------
# File helpers
# ---------------------------------------------------------------------------


@contextmanager
def _locked(root: Path) -> Iterator[None]:
    """Hold an exclusive lock on the state record for a load-modify-save cycle.

    The lock lives on a sidecar file so the record itself can be replaced
    with os.replace while the lock is held.
    """
    state_path = get_state_file(root)
    if not state_path.parent.is_dir():
        raise ProjectNotFoundError(root)
    lock_path = state_path.with_suffix(state_path.suffix + _LOCK_SUFFIX)
    with lock_path.open("a+", encoding="utf-8") as lock_handle:
        fcntl.flock(lock_handle.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(lock_handle.fileno(), fcntl.LOCK_UN)


def _atomic_write_text(path: Path, content: str) -> None:
    """Write content to path via a temp file in the same directory and a rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp_handle:
            tmp_handle.write(content)
            tmp_handle.flush()
            os.fsync(tmp_handle.fileno())
        os.replace(tmp_path, str(path))
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


# ---------------------------------------------------------------------------
# Project lifecycle
# ---------------------------------------------------------------------------


def project_exists(root: Path) -> bool:
    """True iff a state record is present under root."""
    return get_state_file(root).is_file()


def initialize_project(project: ProjectMetadata, root: Path) -> ProjectState:
    """Create the state directory and write a fresh state record.

    Raises ProjectExistsError rather than overwriting an existing project.
    """
    if project_exists(root):
        raise ProjectExistsError(root)

    get_state_dir(root).mkdir(parents=True, exist_ok=True)
    state = create_initial_state(project, FIRST_STEP)
    save_state(state, root)
    return state


def _shape_problem(state: dict) -> str | None:
    for key, expected in _FIELD_TYPES.items():
        if not isinstance(state[key], expected):
            return f"\"{key}\" should be a {expected.__name__}, got {type(state[key]).__name__}"
    if state["currentStep"] not in STEP_GRAPH.order:
        return f"unknown currentStep {state['currentStep']!r}"
    return None


def load_state(root: Path) -> ProjectState:
    """Load the state record.

    A missing record and a record that cannot be parsed both raise
    ProjectNotFoundError; the corrupt case is reported on stderr.
    """
    state_path = get_state_file(root)
    try:
        text = state_path.read_text(encoding="utf-8")
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
        raise ProjectNotFoundError(root) from None

    try:
        state = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        print(f"[DocForge] Warning: state file {state_path} is corrupt: {exc}", file=sys.stderr)
        raise ProjectNotFoundError(root) from exc

    if not isinstance(state, dict) or not REQUIRED_STATE_KEYS <= set(state):
        print(
            f"[DocForge] Warning: state file {state_path} is missing required fields.",
            file=sys.stderr,
        )
        raise ProjectNotFoundError(root)

    problem = _shape_problem(state)
    if problem:
        print(f"[DocForge] Warning: state file {state_path} is corrupt: {problem}", file=sys.stderr)
        raise ProjectNotFoundError(root)

    return state


def save_state(state: ProjectState, root: Path) -> None:
    """Overwrite the state record with state."""
    # Serialize fully before touching the file.
    content = json.dumps(state, indent=2, ensure_ascii=False)
    _atomic_write_text(get_state_file(root), content)


def update_state(updates: dict, root: Path) -> ProjectState:
    """Shallow-merge updates into the stored state and save it.

    Nested objects such as documentProgress are replaced wholesale when
    present in updates; they are not deep-merged.
    """
    with _locked(root):
        state = load_state(root)
        new_state = {**state, **updates}
        save_state(new_state, root)
    return new_state


# ---------------------------------------------------------------------------
# Checkpoint recorder
# ---------------------------------------------------------------------------


def record_checkpoint_response(
    step_id: str,
    disagreements: str | None,
    clarifications: str | None,
    missed_constraints: str | None,
    root: Path,
) -> ProjectState:
    """Append the user's checkpoint answers. Revisited steps accumulate entries."""
    with _locked(root):
        state = load_state(root)
        state["checkpointResponses"].append({
            "stepId": step_id,
            "disagreements": disagreements,
            "clarifications": clarifications,
            "missedConstraints": missed_constraints,
            "respondedAt": _now(),
        })
        save_state(state, root)
    return state


def get_relevant_feedback(state: ProjectState, phase: str) -> str:
    """Collect every non-empty checkpoint response recorded for a phase.

    Returns a prompt-ready block, or an empty string if there is none.
    """
    relevant = [
        r for r in state["checkpointResponses"]
        if r["stepId"].startswith(phase)
        and (r.get("disagreements") or r.get("clarifications") or r.get("missedConstraints"))
    ]
    if not relevant:
        return ""

    lines = []
    for r in relevant:
        parts = []
        if r.get("disagreements"):
            parts.append(f"Disagreement: {r['disagreements']}")
        if r.get("clarifications"):
            parts.append(f"Clarification needed: {r['clarifications']}")
        if r.get("missedConstraints"):
            parts.append(f"Missed constraint: {r['missedConstraints']}")
        lines.append(f"[{r['stepId']}] {'; '.join(parts)}")

    return "\n\nUser Feedback from previous steps:\n" + "\n".join(lines)


# ---------------------------------------------------------------------------
# Approval ledger
# ---------------------------------------------------------------------------


def _check_document_type(document_type: str) -> None:
    if document_type not in DOCUMENT_TYPES:
        raise ValueError(f"Unknown document type '{document_type}'. Must be one of: {DOCUMENT_TYPES}")


def record_approval(document_type: str, content: str, root: Path) -> ProjectState:
    """Approve content for a document type, replacing any earlier approval."""
    _check_document_type(document_type)
    content_hash = calculate_hash(content)

    with _locked(root):
        state = load_state(root)
        state["approvals"] = [a for a in state["approvals"] if a["documentType"] != document_type]
        state["approvals"].append({
            "documentType": document_type,
            "contentHash": content_hash,
            "approvedAt": _now(),
        })
        state["documentHashes"][document_type] = content_hash
        save_state(state, root)
    return state


def revoke_approval(document_type: str, root: Path) -> ProjectState:
    """Remove the live approval (and its hash) for a document type."""
    _check_document_type(document_type)

    with _locked(root):
        state = load_state(root)
        state["approvals"] = [a for a in state["approvals"] if a["documentType"] != document_type]
        state["documentHashes"].pop(document_type, None)
        save_state(state, root)
    return state


def get_approval(state: ProjectState, document_type: str) -> dict | None:
    for approval in state["approvals"]:
        if approval["documentType"] == document_type:
            return approval
    return None


def is_document_approved(state: ProjectState, document_type: str) -> bool:
    return get_approval(state, document_type) is not None


def has_document_changed(state: ProjectState, document_type: str, current_content: str) -> bool:
    """True if the document is unapproved or its content hash differs from the approved one."""
    approval = get_approval(state, document_type)
    if approval is None:
        return True
    return approval["contentHash"] != calculate_hash(current_content)


def are_all_documents_approved(state: ProjectState) -> bool:
    return all(is_document_approved(state, doc) for doc in DOCUMENT_TYPES)
