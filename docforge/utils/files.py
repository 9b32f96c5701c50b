"""Canonical output locations under the project root, and safe file I/O."""

from pathlib import Path

DOCS_DIR = "docs"
PROMPTS_DIR = "prompts"

DOCUMENT_FILENAMES = {
    "rfc": "RFC.md",
    "plan": "PLAN.md",
    "rollout": "ROLLOUT.md",
}


def get_docs_dir(root: Path) -> Path:
    return Path(root) / DOCS_DIR


def get_prompts_dir(root: Path) -> Path:
    return Path(root) / PROMPTS_DIR


def get_doc_path(document_type: str, root: Path) -> Path:
    return get_docs_dir(root) / DOCUMENT_FILENAMES[document_type]


def get_stage_prompt_path(stage_id: int, root: Path) -> Path:
    return get_prompts_dir(root) / f"Stage-{stage_id:02d}.md"


def read_file_safe(path: Path) -> str | None:
    """Read a text file, returning None if it does not exist."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None


def write_file_safe(path: Path, content: str) -> Path:
    """Write a text file, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path
