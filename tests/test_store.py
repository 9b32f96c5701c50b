"""Tests for docforge.store: persistence, checkpoints and the approval ledger."""

import json

import pytest

from docforge.errors import ProjectExistsError, ProjectNotFoundError
from docforge.store import (
    are_all_documents_approved,
    get_approval,
    get_relevant_feedback,
    get_state_file,
    has_document_changed,
    initialize_project,
    is_document_approved,
    load_state,
    project_exists,
    record_approval,
    record_checkpoint_response,
    revoke_approval,
    save_state,
    update_state,
)
from docforge.utils.hashing import calculate_hash


class TestInitialize:
    def test_fresh_state(self, project_root, metadata):
        state = load_state(project_root)
        assert state["version"] == 1
        assert state["project"] == metadata
        assert state["currentStep"] == "rfc.problem"
        assert state["checkpointResponses"] == []
        assert state["approvals"] == []
        assert state["documentHashes"] == {}
        assert state["documentProgress"] == {"rfc": {}, "plan": {}, "rollout": {}}
        assert state["strictMode"] is False

    def test_project_exists(self, project_root, tmp_path_factory):
        assert project_exists(project_root)
        assert not project_exists(tmp_path_factory.mktemp("empty"))

    def test_refuses_to_overwrite(self, project_root, metadata):
        update_state({"currentStep": "plan.stages"}, project_root)
        with pytest.raises(ProjectExistsError):
            initialize_project(metadata, project_root)
        assert load_state(project_root)["currentStep"] == "plan.stages"

    def test_state_file_is_indented_json(self, project_root):
        text = get_state_file(project_root).read_text(encoding="utf-8")
        assert text.startswith("{\n  ")
        assert json.loads(text)["version"] == 1


class TestLoad:
    def test_missing_project_raises(self, tmp_path):
        with pytest.raises(ProjectNotFoundError):
            load_state(tmp_path)

    def test_corrupt_json_raises_not_found(self, project_root, capsys):
        get_state_file(project_root).write_text("{ not json", encoding="utf-8")
        with pytest.raises(ProjectNotFoundError):
            load_state(project_root)
        assert "corrupt" in capsys.readouterr().err

    def test_missing_keys_raises_not_found(self, project_root, capsys):
        get_state_file(project_root).write_text('{"version": 1}', encoding="utf-8")
        with pytest.raises(ProjectNotFoundError):
            load_state(project_root)
        assert "missing required fields" in capsys.readouterr().err

    def test_not_an_object_raises_not_found(self, project_root):
        get_state_file(project_root).write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ProjectNotFoundError):
            load_state(project_root)

    @pytest.mark.parametrize("key, value", [
        ("approvals", None),
        ("checkpointResponses", {"stepId": "rfc.problem"}),
        ("documentHashes", []),
        ("documentProgress", "rfc"),
        ("project", None),
        ("strictMode", "yes"),
    ])
    def test_wrong_field_type_raises_not_found(self, project_root, capsys, key, value):
        record = json.loads(get_state_file(project_root).read_text(encoding="utf-8"))
        record[key] = value
        get_state_file(project_root).write_text(json.dumps(record), encoding="utf-8")

        with pytest.raises(ProjectNotFoundError):
            load_state(project_root)
        assert f'"{key}" should be a' in capsys.readouterr().err

    def test_unknown_current_step_raises_not_found(self, project_root, capsys):
        record = json.loads(get_state_file(project_root).read_text(encoding="utf-8"))
        record["currentStep"] = "rfc.summary"
        get_state_file(project_root).write_text(json.dumps(record), encoding="utf-8")

        with pytest.raises(ProjectNotFoundError):
            load_state(project_root)
        assert "unknown currentStep 'rfc.summary'" in capsys.readouterr().err


class TestSaveAndUpdate:
    def test_round_trip(self, project_root, sample_state):
        save_state(sample_state, project_root)
        assert load_state(project_root) == sample_state

    def test_non_ascii_round_trip(self, project_root, sample_state):
        sample_state["project"]["name"] = "Grüße ⛔"
        save_state(sample_state, project_root)
        assert load_state(project_root)["project"]["name"] == "Grüße ⛔"

    def test_save_leaves_no_temp_files(self, project_root, sample_state):
        save_state(sample_state, project_root)
        names = sorted(p.name for p in get_state_file(project_root).parent.iterdir())
        assert all(not n.endswith(".tmp") for n in names)

    def test_update_merges_top_level(self, project_root):
        state = update_state({"currentStep": "rfc.goals", "strictMode": True}, project_root)
        assert state["currentStep"] == "rfc.goals"
        assert state["strictMode"] is True
        assert load_state(project_root) == state

    def test_update_replaces_nested_objects(self, project_root):
        update_state(
            {"documentProgress": {"rfc": {"problem": "P"}, "plan": {}, "rollout": {}}},
            project_root,
        )
        state = update_state({"documentProgress": {"rfc": {"goals": "G"}}}, project_root)
        assert state["documentProgress"] == {"rfc": {"goals": "G"}}

    def test_update_missing_project(self, tmp_path):
        with pytest.raises(ProjectNotFoundError):
            update_state({"strictMode": True}, tmp_path)
        assert not (tmp_path / ".docforge").exists()


class TestCheckpoints:
    def test_record_appends_with_timestamp(self, project_root):
        state = record_checkpoint_response("rfc.problem", "too vague", None, None, project_root)
        (response,) = state["checkpointResponses"]
        assert response["stepId"] == "rfc.problem"
        assert response["disagreements"] == "too vague"
        assert response["clarifications"] is None
        assert response["missedConstraints"] is None
        assert response["respondedAt"].endswith("+00:00")

    def test_revisits_accumulate(self, project_root):
        record_checkpoint_response("rfc.goals", "a", None, None, project_root)
        record_checkpoint_response("rfc.goals", "b", None, None, project_root)
        responses = load_state(project_root)["checkpointResponses"]
        assert [r["disagreements"] for r in responses] == ["a", "b"]

    def test_feedback_filters_by_phase_and_content(self, project_root):
        record_checkpoint_response("rfc.problem", "scope too wide", None, None, project_root)
        record_checkpoint_response("rfc.goals", None, None, None, project_root)
        record_checkpoint_response("plan.stages", None, "why 4 stages?", "budget", project_root)
        state = load_state(project_root)

        rfc_feedback = get_relevant_feedback(state, "rfc")
        assert rfc_feedback == (
            "\n\nUser Feedback from previous steps:\n"
            "[rfc.problem] Disagreement: scope too wide"
        )

        plan_feedback = get_relevant_feedback(state, "plan")
        assert plan_feedback.endswith(
            "[plan.stages] Clarification needed: why 4 stages?; Missed constraint: budget"
        )

    def test_no_feedback_is_empty_string(self, project_root):
        assert get_relevant_feedback(load_state(project_root), "rollout") == ""


class TestApprovals:
    def test_record_approval(self, project_root):
        state = record_approval("rfc", "# RFC: v1", project_root)
        approval = get_approval(state, "rfc")
        assert approval["contentHash"] == calculate_hash("# RFC: v1")
        assert state["documentHashes"]["rfc"] == approval["contentHash"]
        assert is_document_approved(state, "rfc")
        assert not is_document_approved(state, "plan")

    def test_reapproval_replaces(self, project_root):
        record_approval("rfc", "v1", project_root)
        state = record_approval("rfc", "v2", project_root)
        rfc_approvals = [a for a in state["approvals"] if a["documentType"] == "rfc"]
        assert len(rfc_approvals) == 1
        assert rfc_approvals[0]["contentHash"] == calculate_hash("v2")

    def test_unknown_document_type(self, project_root):
        with pytest.raises(ValueError):
            record_approval("readme", "x", project_root)

    def test_has_document_changed(self, project_root):
        state = load_state(project_root)
        assert has_document_changed(state, "plan", "anything")

        state = record_approval("plan", "# Plan", project_root)
        assert not has_document_changed(state, "plan", "# Plan")
        assert has_document_changed(state, "plan", "# Plan\n")

    def test_all_documents_approved(self, project_root):
        record_approval("rfc", "r", project_root)
        state = record_approval("plan", "p", project_root)
        assert not are_all_documents_approved(state)
        state = record_approval("rollout", "o", project_root)
        assert are_all_documents_approved(state)

    def test_revoke_approval(self, project_root):
        for doc in ("rfc", "plan", "rollout"):
            record_approval(doc, doc, project_root)
        state = revoke_approval("plan", project_root)
        assert not is_document_approved(state, "plan")
        assert "plan" not in state["documentHashes"]
        assert not are_all_documents_approved(state)
        assert is_document_approved(load_state(project_root), "rfc")

    def test_revoke_unapproved_is_noop(self, project_root):
        state = revoke_approval("rollout", project_root)
        assert state["approvals"] == []
