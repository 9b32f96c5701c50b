"""DocForge State — the persisted project record and its parts.

Key names are camelCase because they are the on-disk JSON format of
.docforge/state.json and must stay stable across versions.
"""

from typing import Literal, TypedDict

STATE_VERSION = 1

DocumentType = Literal["rfc", "plan", "rollout"]
DOCUMENT_TYPES: tuple[str, ...] = ("rfc", "plan", "rollout")

Phase = Literal["rfc", "plan", "rollout", "prompts"]

Severity = Literal["low", "medium", "high", "critical"]


class ProjectMetadata(TypedDict):
    name: str
    stack: list[str]
    constraints: list[str]
    createdAt: str  # ISO-8601. Immutable after init.


class CheckpointResponse(TypedDict):
    stepId: str
    disagreements: str | None
    clarifications: str | None
    missedConstraints: str | None
    respondedAt: str


class Approval(TypedDict):
    documentType: DocumentType
    contentHash: str
    approvedAt: str


class Stage(TypedDict):
    id: int
    name: str
    deliverables: list[str]
    dependencies: list[str]
    acceptanceCriteria: list[str]
    definitionOfDone: str
    validationNotes: str


class Risk(TypedDict):
    description: str
    severity: Severity
    mitigation: str


class RfcProgress(TypedDict, total=False):
    problem: str
    goals: str
    nonGoals: str
    approach: str
    interfaces: str
    alternatives: str
    openQuestions: str
    assumptions: str


class PlanProgress(TypedDict, total=False):
    stages: list[Stage]


class RolloutProgress(TypedDict, total=False):
    risks: list[Risk]
    observability: str
    rolloutSteps: list[str]
    killSwitch: str
    rollback: str
    stopConditions: list[str]


class DocumentProgress(TypedDict):
    rfc: RfcProgress
    plan: PlanProgress
    rollout: RolloutProgress


class ProjectState(TypedDict):
    version: int
    project: ProjectMetadata
    currentStep: str
    checkpointResponses: list[CheckpointResponse]  # Append-only.
    approvals: list[Approval]  # At most one per document type.
    documentHashes: dict[str, str]  # documentType -> last approved hash.
    documentProgress: DocumentProgress
    strictMode: bool


REQUIRED_STATE_KEYS = frozenset(ProjectState.__annotations__)


def create_initial_state(project: ProjectMetadata, first_step: str) -> ProjectState:
    """Build a fresh state for a newly initialized project."""
    return {
        "version": STATE_VERSION,
        "project": project,
        "currentStep": first_step,
        "checkpointResponses": [],
        "approvals": [],
        "documentHashes": {},
        "documentProgress": {"rfc": {}, "plan": {}, "rollout": {}},
        "strictMode": False,
    }
