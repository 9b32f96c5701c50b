"""Mock provider — deterministic canned payloads, no network.

Structured requests are answered by the title of the requested JSON schema.
Plain text requests get a fixed sentence.
"""

import copy
import json

from docforge.providers.base import GenerateResponse, LLMProvider

MOCK_RESPONSES = {
    "ProblemStatement": {
        "statement": (
            "The current system lacks proper documentation and planning infrastructure, "
            "leading to inconsistent project execution and knowledge gaps."
        ),
        "impact": (
            "Teams spend excessive time communicating context and resolving misunderstandings "
            "that could be prevented with better planning documents."
        ),
    },
    "GoalsAndNonGoals": {
        "goals": [
            "Provide a standardized format for project planning documents",
            "Enable collaborative document generation with AI assistance",
            "Ensure traceability between planning and implementation",
        ],
        "nonGoals": [
            "Replace existing project management tools",
            "Automate code generation from documents",
            "Provide real-time collaboration features",
        ],
    },
    "Approach": {
        "approach": (
            "Implement a CLI-based tool that guides users through generating RFC, PLAN, and "
            "ROLLOUT documents using AI-assisted prompts with checkpoint-based review."
        ),
        "keyDecisions": [
            "Use Python for the CLI and workflow core",
            "Drive generation steps with a LangGraph state graph",
            "Store state in a JSON file for portability",
        ],
    },
    "Interfaces": {
        "api": "CLI commands: init, continue, review, approve, revoke, prompts",
        "dataFormat": "Markdown documents with structured sections; JSON state in .docforge/state.json",
        "errorHandling": "Human-readable messages on stderr and a non-zero exit status",
    },
    "Alternatives": {
        "alternatives": [
            {
                "name": "Web-based dashboard",
                "pros": ["Real-time collaboration", "Visual interface"],
                "cons": ["More complex deployment", "Requires server infrastructure"],
                "decision": "Rejected: focus on simplicity and a local-first approach",
            },
            {
                "name": "IDE extension",
                "pros": ["Integrated workflow", "Direct file access"],
                "cons": ["IDE-specific", "More development overhead"],
                "decision": "Deferred: can be added later as a complement to the CLI",
            },
        ],
        "openQuestions": [
            "Should we support custom templates?",
            "How to handle multi-user workflows?",
        ],
        "assumptions": [
            "Users have access to an LLM API",
            "Projects follow a staged implementation approach",
        ],
    },
    "Stages": {
        "stages": [
            {
                "id": 0,
                "name": "Foundation",
                "deliverables": ["Project scaffold", "Core CLI structure", "State management"],
                "dependencies": [],
                "acceptanceCriteria": [
                    "CLI responds to help command",
                    "State file can be created and loaded",
                ],
                "definitionOfDone": "All foundation components implemented and tested",
                "validationNotes": "Run unit tests and verify CLI help output",
            },
            {
                "id": 1,
                "name": "Document Generation",
                "deliverables": ["RFC generation", "PLAN generation", "ROLLOUT generation"],
                "dependencies": ["Foundation"],
                "acceptanceCriteria": [
                    "Each document type can be generated",
                    "Documents follow template structure",
                ],
                "definitionOfDone": "All document types generate valid markdown",
                "validationNotes": "Verify document structure matches template",
            },
            {
                "id": 2,
                "name": "Review & Approval",
                "deliverables": ["Review command", "Approval workflow", "Strict mode"],
                "dependencies": ["Document Generation"],
                "acceptanceCriteria": [
                    "Documents can be reviewed",
                    "Approvals are persisted",
                    "Strict mode validates completeness",
                ],
                "definitionOfDone": "Full approval workflow functional",
                "validationNotes": "Test approval flow end-to-end",
            },
        ],
    },
    "CriteriaRefinement": {
        "stages": [
            {
                "id": 0,
                "acceptanceCriteria": [
                    "CLI responds to help command",
                    "State file can be created and loaded",
                    "Corrupt state is reported, not silently reset",
                ],
                "definitionOfDone": "All foundation components implemented and tested",
                "validationNotes": "Run pytest and verify `docforge --help` output",
            },
            {
                "id": 1,
                "acceptanceCriteria": [
                    "Each document type can be generated",
                    "Documents follow template structure",
                    "Generated documents pass structural validation",
                ],
                "definitionOfDone": "All document types generate valid markdown",
                "validationNotes": "Run the pipeline with the mock provider",
            },
            {
                "id": 2,
                "acceptanceCriteria": [
                    "Documents can be reviewed",
                    "Approvals are persisted",
                    "Strict mode validates completeness",
                ],
                "definitionOfDone": "Full approval workflow functional",
                "validationNotes": "Test approval flow end-to-end",
            },
        ],
    },
    "Risks": {
        "risks": [
            {
                "description": "LLM API rate limits could block document generation",
                "severity": "medium",
                "mitigation": "Retry transient failures with exponential backoff",
            },
            {
                "description": "Generated content quality may vary",
                "severity": "medium",
                "mitigation": "Checkpoint-based review allows user corrections",
            },
            {
                "description": "State file corruption could lose progress",
                "severity": "low",
                "mitigation": "Write state atomically via a temp file and rename",
            },
            {
                "description": "Provider credentials leak through shared .env files",
                "severity": "high",
                "mitigation": "Keep .env out of version control and document key rotation",
            },
        ],
    },
    "Observability": {
        "monitoring": "Track command success rates and generation latency per provider.",
        "logging": "Progress on stdout; warnings and retry notices on stderr.",
        "alerts": "Surface repeated provider failures to the user with setup instructions.",
    },
    "Procedures": {
        "rolloutSteps": [
            "Publish a pre-release package",
            "Dogfood on internal projects",
            "Announce on project channels",
            "Gather early feedback",
            "Iterate based on user input",
        ],
        "killSwitch": "Users can delete the .docforge directory to reset state.",
        "rollback": "pip uninstall docforge to remove the tool.",
        "stopConditions": [
            "Critical bugs affecting data integrity",
            "Security vulnerabilities discovered",
            "API breaking changes in dependencies",
        ],
    },
    "ConsistencyReview": {
        "issues": [
            {
                "severity": "info",
                "location": "ROLLOUT.md / Key Risks",
                "description": "No risk covers provider outages lasting longer than the retry window.",
                "suggestion": "Add a risk with a manual fallback to the mock provider.",
            },
        ],
        "summary": "Documents are consistent. One informational note.",
    },
}

MOCK_TEXT = "Mock response."


class MockProvider(LLMProvider):
    """Always configured. Records every request in self.calls."""

    name = "mock"

    def __init__(self, responses: dict | None = None):
        self.responses = responses if responses is not None else MOCK_RESPONSES
        self.calls = []

    def is_configured(self) -> bool:
        return True

    def get_config_instructions(self) -> str:
        return "Mock provider requires no configuration."

    def generate(
        self,
        messages: list[dict],
        *,
        system_prompt: str | None = None,
        json_schema: dict | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerateResponse:
        self.calls.append({
            "messages": messages,
            "system_prompt": system_prompt,
            "json_schema": json_schema,
        })
        usage = {"promptTokens": 100, "completionTokens": 200, "totalTokens": 300}

        if json_schema is None:
            return GenerateResponse(content=MOCK_TEXT, usage=usage)

        title = json_schema.get("title", "")
        if title not in self.responses:
            raise ValueError(f"Mock provider has no canned response for schema '{title}'.")
        parsed = copy.deepcopy(self.responses[title])
        return GenerateResponse(content=json.dumps(parsed, indent=2), parsed=parsed, usage=usage)
