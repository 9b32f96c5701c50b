"""Entry point: the docforge command line."""

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

from docforge.agents.critic import CriticAgent
from docforge.agents.prompt import PromptAgent
from docforge.agents.registry import step_generates_content
from docforge.approval import approve_document, is_document_generated
from docforge.config import get_config
from docforge.errors import DocForgeError, ProjectExistsError, StrictModeBlockedError
from docforge.graph import initial_pipeline_state, run_pipeline, run_single_step
from docforge.providers.factory import get_provider, is_provider_available
from docforge.providers.mock import MockProvider
from docforge.state import DOCUMENT_TYPES
from docforge.steps import (
    COMPLETE_STEP,
    get_progress_percentage,
    get_remaining_steps,
    get_step_label,
    is_checkpoint,
)
from docforge.store import (
    are_all_documents_approved,
    get_approval,
    has_document_changed,
    initialize_project,
    load_state,
    project_exists,
    record_checkpoint_response,
    revoke_approval,
    update_state,
)
from docforge.utils.files import (
    DOCUMENT_FILENAMES,
    get_docs_dir,
    get_doc_path,
    get_prompts_dir,
    get_stage_prompt_path,
    read_file_safe,
)
from docforge.utils.formatter import render_document
from docforge.utils.hashing import content_equals
from docforge.utils.validator import validate_project_name

_ISSUE_ICONS = {"error": "❌", "warning": "⚠️", "info": "ℹ️"}


def _error(message: str) -> None:
    print(f"[DocForge] Error: {message}", file=sys.stderr)


def _split_list(text: str) -> list[str]:
    return [item.strip() for item in text.split(",") if item.strip()]


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


def cmd_init(args) -> int:
    root = args.project_dir
    if project_exists(root):
        raise ProjectExistsError(root)

    name = args.name
    stack = _split_list(args.stack) if args.stack else []
    constraints = _split_list(args.constraints) if args.constraints else []

    if not name or not stack:
        default_name = root.resolve().name
        if not name:
            name = input(f"Project name [{default_name}]: ").strip() or default_name
        if not stack:
            stack = _split_list(input("Technology stack (comma-separated) [Python]: ") or "Python")
        if args.constraints is None:
            constraints = _split_list(
                input('Constraints (comma-separated, e.g. "no external deps, must work offline"): ')
            )

    project = {
        "name": validate_project_name(name),
        "stack": stack,
        "constraints": constraints,
        "createdAt": datetime.now(timezone.utc).isoformat(),
    }

    state = initialize_project(project, root)
    get_docs_dir(root).mkdir(parents=True, exist_ok=True)
    get_prompts_dir(root).mkdir(parents=True, exist_ok=True)
    if args.strict:
        state = update_state({"strictMode": True}, root)

    print("[DocForge] Project initialized!")
    print(f"  Name: {project['name']}")
    print(f"  Stack: {', '.join(project['stack'])}")
    print(f"  Constraints: {', '.join(project['constraints']) or 'None'}")
    print(f"  Strict Mode: {'Enabled' if state['strictMode'] else 'Disabled'}")
    print('\nRun "docforge continue" to start generating documents.')
    return 0


# ---------------------------------------------------------------------------
# continue
# ---------------------------------------------------------------------------


def _collect_checkpoint_input(step_id: str, content: str, root: Path) -> bool:
    """Ask the checkpoint questions, record the answers, return whether to continue."""
    print(f"\n--- Checkpoint: {get_step_label(step_id)} ---\n")
    print(content)
    print()

    try:
        return _ask_checkpoint_questions(step_id, root)
    except EOFError:
        print("\n[DocForge] No input available; treating the checkpoint as declined.")
        return False


def _ask_checkpoint_questions(step_id: str, root: Path) -> bool:
    disagreements = input("(1) Do you disagree with anything so far? (press Enter to skip) ").strip()
    clarifications = input("(2) Anything unclear or want a deeper explanation? (press Enter to skip) ").strip()
    missed = input("(3) Any constraints we missed (stack, time, infra, cost)? (press Enter to skip) ").strip()

    record_checkpoint_response(
        step_id,
        disagreements or None,
        clarifications or None,
        missed or None,
        root,
    )

    while True:
        answer = input("Continue to the next step? [Y/n] ").strip().lower()
        if answer in ("", "y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        print("Please answer y or n.")


def _print_all_generated() -> None:
    print("[DocForge] All documents generated!")
    print('Run "docforge review" to review documents.')
    print('Run "docforge approve all" to approve all documents.')


def cmd_continue(args) -> int:
    root = args.project_dir

    if args.auto and args.all:
        load_state(root)
        get_provider()
        final = run_pipeline(root)
        print(f"[DocForge] Generated {len(final['generated_steps'])} steps.")
        _print_all_generated()
        return 0

    while True:
        pipeline = initial_pipeline_state(root)
        step_id = pipeline["current_step"]
        if step_id == COMPLETE_STEP:
            _print_all_generated()
            return 0

        state = load_state(root)
        print(f"[DocForge] Resuming at: {get_step_label(step_id)}")
        print(f"[DocForge] Progress: {get_progress_percentage(state)}% "
              f"({get_remaining_steps(state)} steps remaining)")

        if step_generates_content(step_id):
            pipeline = run_single_step(pipeline, "generate")

        if is_checkpoint(step_id):
            if args.auto:
                print("(Auto mode: skipping checkpoint)")
            elif not _collect_checkpoint_input(step_id, pipeline["last_content"], root):
                print('[DocForge] Stopped at checkpoint. Run "docforge continue" to resume.')
                return 0
        elif pipeline["last_content"]:
            print(pipeline["last_content"])

        pipeline = run_single_step(pipeline, "advance")

        if pipeline["current_step"] == COMPLETE_STEP:
            _print_all_generated()
            return 0

        print(f"\n[DocForge] Next step: {get_step_label(pipeline['current_step'])}")
        if not args.all:
            print('Run "docforge continue" to proceed.')
            return 0


# ---------------------------------------------------------------------------
# review
# ---------------------------------------------------------------------------


def _show_document_status(state: dict, doc: str) -> None:
    filename = DOCUMENT_FILENAMES[doc]
    approval = get_approval(state, doc)
    if approval:
        print(f"  ✅ {filename} (approved, {approval['contentHash'][:8]})")
        print(f"      Approved at: {approval['approvedAt']}")
    else:
        print(f"  ⬜ {filename} (pending)")


def _show_document(state: dict, doc: str, show_diff: bool, root: Path) -> None:
    filename = DOCUMENT_FILENAMES[doc]
    print(f"\n=== {filename} ===")

    if not is_document_generated(doc, state):
        print("Document not yet generated.")
        return

    content = render_document(doc, state)

    if show_diff:
        if get_approval(state, doc) is None:
            print("Not approved yet.")
        elif has_document_changed(state, doc, content):
            print("⚠️  Document has changed since last approval.")
        else:
            print("Document unchanged since approval.")

        saved = read_file_safe(get_doc_path(doc, root))
        if saved is None:
            print(f"docs/{filename} has not been written yet.")
        elif content_equals(saved, content):
            print(f"docs/{filename} matches the current content.")
        else:
            print(f"⚠️  docs/{filename} differs from the current content.")

    preview_lines = get_config().get("preview_lines", 30)
    lines = content.split("\n")
    print("\n".join(lines[:preview_lines]))
    if len(lines) > preview_lines:
        print(f"... ({len(lines) - preview_lines} more lines)")
        print(f"View full document: docs/{filename}")


def cmd_review(args) -> int:
    root = args.project_dir
    state = load_state(root)

    print("--- Project Status ---")
    print(f"Project: {state['project']['name']}")
    print(f"Current Step: {get_step_label(state['currentStep'])}")
    print(f"Progress: {get_progress_percentage(state)}%")
    print(f"Strict Mode: {'Enabled' if state['strictMode'] else 'Disabled'}")

    print("\n--- Document Status ---")
    for doc in DOCUMENT_TYPES:
        _show_document_status(state, doc)

    docs = DOCUMENT_TYPES if args.document == "all" else (args.document,)
    for doc in docs:
        _show_document(state, doc, args.diff, root)
    return 0


# ---------------------------------------------------------------------------
# approve / revoke
# ---------------------------------------------------------------------------


def _run_critic(state: dict, root: Path, document: str, force: bool) -> bool:
    """Return False when the consistency review blocks approval.

    "all" reviews the three documents against each other; a single document
    is reviewed on its own.
    """
    print("[DocForge] Running consistency checks...")
    try:
        critic = CriticAgent(get_provider(), root)
        if document == "all":
            review = critic.review_all(state)
        else:
            review = critic.validate_document(state, document)
    except Exception as exc:
        print(f"[DocForge] Warning: could not run critic: {exc}", file=sys.stderr)
        return True

    if review.passed:
        print("[DocForge] Consistency checks passed.")
        return True

    print("[DocForge] Consistency issues found:", file=sys.stderr)
    for issue in review.issues:
        icon = _ISSUE_ICONS.get(issue["severity"], "ℹ️")
        print(f"  {icon} [{issue.get('location', '')}] {issue.get('description', '')}", file=sys.stderr)
    if force:
        return True
    _error("Approval blocked due to consistency issues. "
           "Use --force to approve anyway, or --skip-critic to skip checks.")
    return False


def cmd_approve(args) -> int:
    root = args.project_dir
    state = load_state(root)
    docs = DOCUMENT_TYPES if args.document == "all" else (args.document,)

    critic_wanted = not args.skip_critic and get_config().get("critic_enabled", True)
    if critic_wanted and is_provider_available():
        if not _run_critic(state, root, args.document, args.force):
            return 1

    blocked = False
    for doc in docs:
        filename = DOCUMENT_FILENAMES[doc]
        if not is_document_generated(doc, state):
            print(f"[DocForge] {filename} not yet generated. Skipping.")
            continue

        content = render_document(doc, state)
        try:
            state, validation = approve_document(doc, content, root, force=args.force)
        except StrictModeBlockedError as exc:
            _error(str(exc))
            blocked = True
            continue

        for section in validation.missing_sections:
            print(f"[DocForge] Warning: missing required section: {section}", file=sys.stderr)
        for warning in validation.warnings:
            print(f"[DocForge] Warning: {warning}", file=sys.stderr)
        print(f"[DocForge] Approved: {filename} ({get_approval(state, doc)['contentHash'][:8]})")

    if blocked:
        return 1
    if are_all_documents_approved(state):
        print('All documents approved. Run "docforge prompts" to generate stage prompts.')
    return 0


def cmd_revoke(args) -> int:
    revoke_approval(args.document, args.project_dir)
    print(f"[DocForge] Approval revoked: {DOCUMENT_FILENAMES[args.document]}")
    return 0


# ---------------------------------------------------------------------------
# prompts
# ---------------------------------------------------------------------------


def cmd_prompts(args) -> int:
    root = args.project_dir
    state = load_state(root)

    if not are_all_documents_approved(state) and not args.force:
        _error('Not all documents are approved. Run "docforge approve all" first, '
               "or use --force to generate anyway.")
        for doc in DOCUMENT_TYPES:
            _show_document_status(state, doc)
        return 1

    stages = state["documentProgress"]["plan"].get("stages")
    if not stages:
        _error("No stages defined in PLAN. Complete document generation first.")
        return 1

    # Prompt rendering is template-only, so any provider will do.
    provider = get_provider() if is_provider_available() else MockProvider()
    agent = PromptAgent(provider, root)

    if args.stage is not None:
        path = agent.regenerate_stage(state, args.stage)
        print(f"[DocForge] Regenerated: {path}")
        return 0

    agent.generate_step(state, "prompts.generate")
    update_state({"currentStep": COMPLETE_STEP}, root)

    print("\n[DocForge] All stage prompts generated!")
    for stage in stages:
        print(f"  {get_stage_prompt_path(stage['id'], root).relative_to(root)} - {stage['name']}")
    return 0


# ---------------------------------------------------------------------------
# CLI wiring
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docforge",
        description="Checkpointed RFC, PLAN and ROLLOUT authoring.",
    )
    parser.add_argument(
        "--project-dir",
        type=Path,
        default=Path.cwd(),
        help="Project root (default: current directory)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init", help="Initialize a new DocForge project")
    p.add_argument("--name", help="Project name")
    p.add_argument("--stack", help="Comma-separated list of technologies")
    p.add_argument("--constraints", help="Comma-separated list of constraints")
    p.add_argument("--strict", action="store_true", help="Block approval if required sections are missing")
    p.set_defaults(func=cmd_init)

    p = sub.add_parser("continue", help="Generate the next step")
    p.add_argument("--auto", action="store_true", help="Skip checkpoint questions")
    p.add_argument("--all", action="store_true", help="Keep going until the workflow is complete")
    p.set_defaults(func=cmd_continue)

    p = sub.add_parser("review", help="Show document status and content")
    p.add_argument("document", nargs="?", default="all", choices=[*DOCUMENT_TYPES, "all"])
    p.add_argument("--diff", action="store_true", help="Show what changed since last approval")
    p.set_defaults(func=cmd_review)

    p = sub.add_parser("approve", help="Approve documents")
    p.add_argument("document", choices=[*DOCUMENT_TYPES, "all"])
    p.add_argument("--force", action="store_true", help="Approve even if validation fails")
    p.add_argument("--skip-critic", action="store_true", help="Skip consistency checks")
    p.set_defaults(func=cmd_approve)

    p = sub.add_parser("revoke", help="Withdraw a document's approval")
    p.add_argument("document", choices=list(DOCUMENT_TYPES))
    p.set_defaults(func=cmd_revoke)

    p = sub.add_parser("prompts", help="Generate stage implementation prompts")
    p.add_argument("--force", action="store_true", help="Generate even if not all documents are approved")
    p.add_argument("--stage", type=int, help="Regenerate a single stage prompt")
    p.set_defaults(func=cmd_prompts)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    try:
        code = args.func(args)
    except (DocForgeError, ValueError, OSError) as exc:
        _error(str(exc))
        sys.exit(1)
    except EOFError:
        _error("Input ended before all questions were answered.")
        sys.exit(1)
    except Exception as exc:
        # Provider SDK failures: authentication, quota, rejected requests.
        _error(f"{type(exc).__name__}: {exc}")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
