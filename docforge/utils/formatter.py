"""Output Formatter — renders documentProgress into RFC, PLAN and ROLLOUT markdown.

All renderers are pure: they read state and return text. Writing the files is
left to the caller.
"""

import re

SEVERITY_MARKERS = {
    "critical": "🔴",
    "high": "🟠",
    "medium": "🟡",
    "low": "🟢",
}


def _stack_line(project: dict) -> str:
    return ", ".join(project.get("stack", [])) or "Not specified"


def format_goals_list(goals: list[str]) -> str:
    """Render a list of goals as markdown bullets."""
    return "\n".join(f"- {g}" for g in goals)


def format_alternatives(alternatives: list[dict]) -> str:
    """Render considered alternatives with pros, cons and the decision taken."""
    blocks = []
    for alt in alternatives:
        lines = [f"### {alt.get('name', 'Alternative')}", ""]
        pros = alt.get("pros", [])
        cons = alt.get("cons", [])
        if pros:
            lines.append("**Pros:**")
            lines.extend(f"- {p}" for p in pros)
            lines.append("")
        if cons:
            lines.append("**Cons:**")
            lines.extend(f"- {c}" for c in cons)
            lines.append("")
        lines.append(f"**Decision:** {alt.get('decision', '')}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def render_rfc(state: dict) -> str:
    """Render the RFC. Sections appear only once their content has been generated."""
    project = state["project"]
    rfc = state["documentProgress"].get("rfc", {})
    lines = []

    lines.append(f"# RFC: {project['name']}")
    lines.append("")
    lines.append(f"> Stack: {_stack_line(project)}")
    if project.get("constraints"):
        lines.append(f"> Constraints: {', '.join(project['constraints'])}")
    lines.append("")

    sections = (
        ("Problem Statement", "problem"),
        ("Goals", "goals"),
        ("Non-Goals", "nonGoals"),
        ("Proposed Approach", "approach"),
        ("Interfaces & Contracts", "interfaces"),
        ("Alternatives Considered", "alternatives"),
        ("Open Questions", "openQuestions"),
        ("Assumptions", "assumptions"),
    )
    for heading, key in sections:
        body = rfc.get(key)
        if not body:
            continue
        lines.append(f"## {heading}")
        lines.append("")
        lines.append(body)
        lines.append("")

    return "\n".join(lines)


def _render_stage(stage: dict) -> list[str]:
    lines = [f"## Stage {stage['id']:02d}: {stage['name']}", ""]

    lines.append("### Deliverables")
    lines.append("")
    for d in stage.get("deliverables", []):
        lines.append(f"- {d}")
    lines.append("")

    lines.append("### Dependencies")
    lines.append("")
    deps = stage.get("dependencies", [])
    if deps:
        for d in deps:
            lines.append(f"- {d}")
    else:
        lines.append("- None")
    lines.append("")

    lines.append("### Acceptance Criteria")
    lines.append("")
    for c in stage.get("acceptanceCriteria", []):
        lines.append(f"- [ ] {c}")
    lines.append("")

    lines.append("### Definition of Done")
    lines.append("")
    lines.append(stage.get("definitionOfDone", ""))
    lines.append("")

    if stage.get("validationNotes"):
        lines.append("### Validation Notes")
        lines.append("")
        lines.append(stage["validationNotes"])
        lines.append("")

    return lines


def render_plan(state: dict) -> str:
    """Render the staged implementation plan."""
    project = state["project"]
    stages = state["documentProgress"].get("plan", {}).get("stages") or []
    lines = []

    lines.append(f"# Implementation Plan: {project['name']}")
    lines.append("")
    lines.append("## Overview")
    lines.append("")
    lines.append(f"**Stack:** {_stack_line(project)}")
    lines.append("")
    constraints = project.get("constraints", [])
    if constraints:
        lines.append("**Constraints:**")
        lines.append("")
        for c in constraints:
            lines.append(f"- {c}")
        lines.append("")
    if stages:
        lines.append("| Stage | Name | Depends On |")
        lines.append("|-------|------|------------|")
        for stage in stages:
            deps = ", ".join(stage.get("dependencies", [])) or "None"
            lines.append(f"| {stage['id']:02d} | {stage['name']} | {deps} |")
        lines.append("")

    for stage in stages:
        lines.extend(_render_stage(stage))

    return "\n".join(lines)


def render_rollout(state: dict) -> str:
    """Render the rollout plan: risks, observability and procedures."""
    project = state["project"]
    rollout = state["documentProgress"].get("rollout", {})
    lines = []

    lines.append(f"# Rollout Plan: {project['name']}")
    lines.append("")

    risks = rollout.get("risks") or []
    if risks:
        lines.append("## Key Risks")
        lines.append("")
        lines.append("| Risk | Severity | Mitigation |")
        lines.append("|------|----------|------------|")
        for risk in risks:
            severity = risk.get("severity", "unknown")
            marker = SEVERITY_MARKERS.get(severity, "⚪")
            desc = risk.get("description", "").replace("|", "\\|")
            mitigation = risk.get("mitigation", "").replace("|", "\\|")
            lines.append(f"| {desc} | {marker} {severity} | {mitigation} |")
        lines.append("")

    if rollout.get("observability"):
        lines.append("## Observability")
        lines.append("")
        lines.append(rollout["observability"])
        lines.append("")

    steps = rollout.get("rolloutSteps") or []
    if steps:
        lines.append("## Rollout Steps")
        lines.append("")
        for i, step in enumerate(steps, 1):
            lines.append(f"{i}. {step}")
        lines.append("")

    if rollout.get("killSwitch"):
        lines.append("## Kill Switch")
        lines.append("")
        lines.append(rollout["killSwitch"])
        lines.append("")

    if rollout.get("rollback"):
        lines.append("## Rollback Procedure")
        lines.append("")
        lines.append(rollout["rollback"])
        lines.append("")

    stop_conditions = rollout.get("stopConditions") or []
    if stop_conditions:
        lines.append("## Stop-the-Line Conditions")
        lines.append("")
        for condition in stop_conditions:
            lines.append(f"- ⛔ {condition}")
        lines.append("")

    return "\n".join(lines)


_RENDERERS = {
    "rfc": render_rfc,
    "plan": render_plan,
    "rollout": render_rollout,
}


def render_document(document_type: str, state: dict) -> str:
    """Render a document by type. Raises ValueError for unknown types."""
    try:
        renderer = _RENDERERS[document_type]
    except KeyError:
        raise ValueError(f"Unknown document type '{document_type}'.") from None
    return renderer(state)


def _truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + "..."


def render_stage_prompt(stage: dict, state: dict, all_stages: list[dict]) -> str:
    """Render the implementation prompt handed to a coding agent for one stage."""
    project = state["project"]
    rfc = state["documentProgress"].get("rfc", {})
    lines = []

    lines.append(f"# Stage {stage['id']:02d}: {stage['name']}")
    lines.append("")
    lines.append(f"> Implementation prompt for {project['name']}")
    lines.append("")

    # Context Recap
    lines.append("## Context Recap")
    lines.append("")
    lines.append(f"**Project:** {project['name']}")
    lines.append(f"**Stack:** {', '.join(project.get('stack', []))}")
    lines.append("")
    if rfc.get("problem"):
        lines.append("**Problem Summary:**")
        lines.append(_truncate(rfc["problem"], 200))
        lines.append("")

    # Stage Scope
    lines.append("## Stage Scope")
    lines.append("")
    lines.append("### In Scope")
    lines.append("")
    for d in stage.get("deliverables", []):
        lines.append(f"- {d}")
    lines.append("")

    lines.append("### Non-Goals (This Stage)")
    lines.append("")
    future = [
        d for s in all_stages if s["id"] > stage["id"] for d in s.get("deliverables", [])
    ][:5]
    if future:
        lines.append("Do not implement in this stage (handled later):")
        for d in future:
            lines.append(f"- {d}")
    else:
        lines.append("- Final stage: ensure all previous non-goals are addressed")
    lines.append("")

    deps = stage.get("dependencies", [])
    if deps:
        lines.append("## Dependencies")
        lines.append("")
        lines.append("Ensure the following are complete before starting:")
        for d in deps:
            lines.append(f"- [ ] {d}")
        lines.append("")

    # Tasks
    lines.append("## Tasks")
    lines.append("")
    lines.append("### Implementation Checklist")
    lines.append("")
    for i, d in enumerate(stage.get("deliverables", []), 1):
        lines.append(f"{i}. [ ] **{d}**")
        lines.append("   - File(s): _specify target files_")
        lines.append("   - Approach: _describe implementation steps_")
        lines.append("")

    # Validation
    lines.append("## Required Validation")
    lines.append("")
    lines.append("### Acceptance Criteria")
    lines.append("")
    for c in stage.get("acceptanceCriteria", []):
        lines.append(f"- [ ] {c}")
    lines.append("")
    lines.append("### Testing Requirements")
    lines.append("")
    lines.append(stage.get("validationNotes", ""))
    lines.append("")

    lines.append("## Checkpoint Questions")
    lines.append("")
    lines.append("Before proceeding to the next stage, answer:")
    lines.append("")
    lines.append("1. Have all deliverables been implemented?")
    lines.append("2. Do all acceptance criteria pass?")
    lines.append("3. Are there any blockers for the next stage?")
    lines.append("4. Any technical debt to document?")
    lines.append("")

    lines.append("## ⛔ Don't Proceed Until")
    lines.append("")
    lines.append("- [ ] All deliverables are complete")
    lines.append("- [ ] All acceptance criteria verified")
    lines.append(f"- [ ] {stage.get('definitionOfDone', '')}")
    lines.append("- [ ] Code reviewed (if applicable)")
    lines.append("- [ ] Tests passing")
    lines.append("")

    lines.append("---")
    lines.append("")
    lines.append(f"**Definition of Done:** {stage.get('definitionOfDone', '')}")

    return "\n".join(lines)


_STAGE_HEADING_RE = re.compile(r"^##\s*Stage\s*(\d+)\s*:\s*(.+?)\s*$", re.MULTILINE)
_SUBHEADING_RE = re.compile(r"^###\s*(.+?)\s*$", re.MULTILINE)
_BULLET_RE = re.compile(r"^\s*[-*]\s*(?:\[[ xX]\]\s*)?(.+?)\s*$")


def _bullets(body: str) -> list[str]:
    items = []
    for line in body.splitlines():
        match = _BULLET_RE.match(line)
        if match and match.group(1).lower() != "none":
            items.append(match.group(1))
    return items


def parse_stages(content: str) -> list[dict]:
    """Parse '## Stage NN: Name' blocks from PLAN markdown back into stages."""
    stages = []
    headings = list(_STAGE_HEADING_RE.finditer(content))
    for i, heading in enumerate(headings):
        end = headings[i + 1].start() if i + 1 < len(headings) else len(content)
        block = content[heading.end():end]

        sections = {}
        subs = list(_SUBHEADING_RE.finditer(block))
        for j, sub in enumerate(subs):
            sub_end = subs[j + 1].start() if j + 1 < len(subs) else len(block)
            sections[sub.group(1).lower()] = block[sub.end():sub_end].strip()

        stages.append({
            "id": int(heading.group(1)),
            "name": heading.group(2),
            "deliverables": _bullets(sections.get("deliverables", "")),
            "dependencies": _bullets(sections.get("dependencies", "")),
            "acceptanceCriteria": _bullets(sections.get("acceptance criteria", "")),
            "definitionOfDone": sections.get("definition of done", ""),
            "validationNotes": sections.get("validation notes", ""),
        })
    return stages
