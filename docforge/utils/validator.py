"""Document validation — structural completeness checks on rendered markdown.

Each document type owns an ordered list of section requirements. A required
section that cannot be found makes the document invalid; a missing optional
section only produces a warning. Strict mode turns an invalid document into a
blocking error at approval time.
"""

import re
from dataclasses import dataclass, field

_FLAGS = re.IGNORECASE | re.MULTILINE


@dataclass(frozen=True)
class SectionRequirement:
    name: str
    required: bool
    pattern: re.Pattern


@dataclass
class ValidationResult:
    valid: bool
    missing_sections: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class StrictCheckResult:
    passes: bool
    errors: list[str] = field(default_factory=list)


def _section(name: str, pattern: str, required: bool = True) -> SectionRequirement:
    return SectionRequirement(name=name, required=required, pattern=re.compile(pattern, _FLAGS))


# Heading patterns match a prefix so "Proposed Approach" or "Key Risks" still count.
RFC_SECTIONS = (
    _section("Problem Statement", r"^##\s*Problem"),
    _section("Goals", r"^##\s*Goals"),
    _section("Non-Goals", r"^##\s*Non-Goals"),
    _section("Approach", r"^##\s*(?:Proposed\s+)?Approach"),
    _section("Interfaces & Contracts", r"^##\s*Interfaces"),
    _section("Alternatives", r"^##\s*Alternatives"),
    _section("Open Questions", r"^##\s*Open\s*Questions", required=False),
    _section("Assumptions", r"^##\s*Assumptions", required=False),
)

PLAN_SECTIONS = (
    _section("Overview", r"^##\s*Overview"),
    _section("Stages", r"^##\s*Stage\s*\d+"),
    _section("Acceptance Criteria", r"acceptance\s*criteria"),
    _section("Definition of Done", r"definition\s*of\s*done"),
)

ROLLOUT_SECTIONS = (
    _section("Key Risks", r"^##\s*(?:Key\s*)?Risks"),
    _section("Observability", r"^##\s*Observability"),
    _section("Rollout Steps", r"^##\s*Rollout"),
    _section("Kill Switch", r"kill\s*switch"),
    _section("Rollback", r"^##\s*Rollback"),
    _section("Stop Conditions", r"stop.*condition"),
)

SECTIONS_BY_TYPE = {
    "rfc": RFC_SECTIONS,
    "plan": PLAN_SECTIONS,
    "rollout": ROLLOUT_SECTIONS,
}


def _validate(content: str, sections) -> ValidationResult:
    missing = []
    warnings = []
    for section in sections:
        if section.pattern.search(content):
            continue
        if section.required:
            missing.append(section.name)
        else:
            warnings.append(f"Optional section missing: {section.name}")
    return ValidationResult(valid=not missing, missing_sections=missing, warnings=warnings)


def validate_rfc(content: str) -> ValidationResult:
    return _validate(content, RFC_SECTIONS)


def validate_plan(content: str) -> ValidationResult:
    return _validate(content, PLAN_SECTIONS)


def validate_rollout(content: str) -> ValidationResult:
    return _validate(content, ROLLOUT_SECTIONS)


def validate_document(document_type: str, content: str) -> ValidationResult:
    """Validate rendered document text against its type's section requirements.

    Raises ValueError for an unknown document type.
    """
    try:
        sections = SECTIONS_BY_TYPE[document_type]
    except KeyError:
        raise ValueError(
            f"Unknown document type '{document_type}'. Must be one of: {sorted(SECTIONS_BY_TYPE)}"
        ) from None
    return _validate(content, sections)


def strict_mode_check(state: dict, document_type: str, content: str) -> StrictCheckResult:
    """Gate approval on structural validity when the project is in strict mode.

    Always passes when strict mode is off.
    """
    if not state.get("strictMode", False):
        return StrictCheckResult(passes=True)

    result = validate_document(document_type, content)
    if not result.valid:
        return StrictCheckResult(
            passes=False,
            errors=[f"Missing required section: {s}" for s in result.missing_sections],
        )
    return StrictCheckResult(passes=True)


def validate_project_name(name: str) -> str:
    """Validate that the project name is a non-empty string.

    Returns the stripped name on success.
    Raises ValueError if the name is empty or whitespace-only.
    """
    if not isinstance(name, str) or not name.strip():
        raise ValueError("Project name must be a non-empty string.")
    return name.strip()
