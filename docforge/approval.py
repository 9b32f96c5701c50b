"""Approval flow — validate, gate on strict mode, write the document, record the approval."""

from pathlib import Path

from docforge.errors import StrictModeBlockedError
from docforge.store import load_state, record_approval
from docforge.utils.files import get_doc_path, write_file_safe
from docforge.utils.validator import ValidationResult, strict_mode_check, validate_document

# The progress key whose presence means a document has real content to approve.
_GENERATED_MARKERS = {
    "rfc": "problem",
    "plan": "stages",
    "rollout": "risks",
}


def is_document_generated(document_type: str, state: dict) -> bool:
    """True once the first generating step of the document's phase has run."""
    if document_type not in _GENERATED_MARKERS:
        raise ValueError(f"Unknown document type '{document_type}'.")
    progress = state["documentProgress"].get(document_type, {})
    return bool(progress.get(_GENERATED_MARKERS[document_type]))


def approve_document(
    document_type: str,
    content: str,
    root: Path,
    *,
    force: bool = False,
) -> tuple[dict, ValidationResult]:
    """Approve rendered document content.

    Raises StrictModeBlockedError, without writing anything, when the project
    is in strict mode, the content is missing required sections and force is
    not set. Otherwise writes docs/<TYPE>.md and records the approval.
    """
    state = load_state(root)
    validation = validate_document(document_type, content)

    if not validation.valid and not force:
        strict = strict_mode_check(state, document_type, content)
        if not strict.passes:
            raise StrictModeBlockedError(document_type, strict.errors)

    write_file_safe(get_doc_path(document_type, root), content)
    state = record_approval(document_type, content, root)
    return state, validation
