"""Critic Agent — cross-document consistency review before approval.

Issue severities are error, warning and info. Any error fails the review.
"""

from dataclasses import dataclass, field

from docforge.agents.base import BaseAgent, object_schema, string_field
from docforge.utils.formatter import render_document, render_plan, render_rfc, render_rollout

ISSUE_SEVERITIES = ("error", "warning", "info")

REVIEW_SCHEMA = object_schema("ConsistencyReview", {
    "issues": {
        "type": "array",
        "items": object_schema("Issue", {
            "severity": {"type": "string", "enum": list(ISSUE_SEVERITIES)},
            "location": string_field("Document and section"),
            "description": string_field("What is inconsistent"),
            "suggestion": string_field("How to fix it"),
        }),
    },
    "summary": string_field("Overall assessment"),
})

_REVIEWER_PROMPT = """\
You are a senior technical reviewer.
Review the provided planning documents for consistency and completeness.
Flag any contradictions, gaps, or misalignments between documents."""


@dataclass
class CriticResult:
    passed: bool
    issues: list[dict] = field(default_factory=list)
    summary: str = ""

    @property
    def errors(self) -> list[dict]:
        return [i for i in self.issues if i.get("severity") == "error"]


def _to_result(data: dict) -> CriticResult:
    issues = []
    for issue in data.get("issues", []):
        severity = str(issue.get("severity", "info")).lower()
        if severity not in ISSUE_SEVERITIES:
            severity = "info"
        issues.append({**issue, "severity": severity})
    return CriticResult(
        passed=not any(i["severity"] == "error" for i in issues),
        issues=issues,
        summary=data.get("summary", ""),
    )


class CriticAgent(BaseAgent):
    name = "CriticAgent"
    steps = ()

    def _generate(self, state: dict, step_id: str) -> tuple[dict, str]:
        raise ValueError(f"CriticAgent does not generate steps. Got: {step_id}")

    def review_all(self, state: dict) -> CriticResult:
        self.announce("Reviewing documents for consistency...")
        prompt = f"""\
Review these planning documents for consistency:

=== RFC.md ===
{render_rfc(state)}

=== PLAN.md ===
{render_plan(state)}

=== ROLLOUT.md ===
{render_rollout(state)}

Check for:
1. Goals in RFC align with deliverables in PLAN
2. Risks in ROLLOUT cover the approach in RFC
3. Stage dependencies are consistent
4. Acceptance criteria match stated goals
5. No contradictory statements

Report any issues found."""

        return _to_result(self.chat_json(prompt, REVIEW_SCHEMA, _REVIEWER_PROMPT))

    def validate_document(self, state: dict, document_type: str) -> CriticResult:
        """Review a single document for completeness and internal consistency."""
        self.announce(f"Validating {document_type.upper()}...")
        prompt = f"""\
Review this {document_type.upper()} document:

{render_document(document_type, state)}

Check for:
1. All required sections present and complete
2. Internal consistency (no contradictions)
3. Clarity and specificity
4. Actionable content

Report any issues found."""

        return _to_result(self.chat_json(prompt, REVIEW_SCHEMA, _REVIEWER_PROMPT))
