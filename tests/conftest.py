"""Shared fixtures for the DocForge test suite."""

import pytest
from unittest.mock import patch

from docforge.store import initialize_project


@pytest.fixture
def metadata():
    """Project metadata as written by `docforge init`."""
    return {
        "name": "todo-api",
        "stack": ["Python 3.12", "FastAPI"],
        "constraints": ["must run offline"],
        "createdAt": "2026-01-01T00:00:00+00:00",
    }


@pytest.fixture
def project_root(tmp_path, metadata):
    """An initialized project in a temporary directory."""
    initialize_project(metadata, tmp_path)
    return tmp_path


@pytest.fixture
def stages():
    return [
        {
            "id": 0,
            "name": "Foundation",
            "deliverables": ["Project scaffold", "State store"],
            "dependencies": [],
            "acceptanceCriteria": ["State file round-trips", "CLI prints help"],
            "definitionOfDone": "Foundation merged with tests",
            "validationNotes": "Run pytest",
        },
        {
            "id": 1,
            "name": "Task API",
            "deliverables": ["CRUD endpoints", "Pagination"],
            "dependencies": ["Foundation"],
            "acceptanceCriteria": ["All endpoints return JSON"],
            "definitionOfDone": "API deployed to staging",
            "validationNotes": "Run the integration suite",
        },
    ]


@pytest.fixture
def sample_state(metadata, stages):
    """State with every document fully generated, sitting at the terminal step."""
    return {
        "version": 1,
        "project": metadata,
        "currentStep": "complete",
        "checkpointResponses": [],
        "approvals": [],
        "documentHashes": {},
        "documentProgress": {
            "rfc": {
                "problem": "Tasks are tracked in spreadsheets.\n\n**Impact:** Work gets lost.",
                "goals": "- Central task store\n- REST access",
                "nonGoals": "- Mobile app",
                "approach": "FastAPI service over SQLite.",
                "interfaces": "### API Surface\nREST endpoints under /api/tasks",
                "alternatives": "### Hosted SaaS\n\n**Decision:** Rejected: cost",
                "openQuestions": "- Multi-tenant?",
                "assumptions": "- Single region",
            },
            "plan": {"stages": stages},
            "rollout": {
                "risks": [
                    {"description": "SQLite write contention", "severity": "high",
                     "mitigation": "Move to Postgres past 50 rps"},
                    {"description": "Schema drift", "severity": "low",
                     "mitigation": "Alembic migrations"},
                ],
                "observability": "### Monitoring\nRequest latency p95",
                "rolloutSteps": ["Deploy to staging", "Canary 10%", "Full rollout"],
                "killSwitch": "Feature flag TASKS_API_ENABLED",
                "rollback": "Redeploy previous image",
                "stopConditions": ["Error rate above 2%"],
            },
        },
        "strictMode": False,
    }


@pytest.fixture
def mock_config():
    """Patch the config singleton with test-friendly values."""
    test_config = {
        "provider": "mock",
        "models": {"openai": "gpt-4o", "gemini": "gemini-1.5-pro", "anthropic": "claude-sonnet-4-6"},
        "temperature": 0.2,
        "max_tokens": 1024,
        "llm_max_retries": 0,
        "critic_enabled": True,
        "preview_lines": 30,
    }
    with patch("docforge.config._config", test_config):
        yield test_config


@pytest.fixture
def mock_provider_env(monkeypatch, mock_config):
    """Route every provider lookup to the mock provider."""
    monkeypatch.setenv("DOCFORGE_PROVIDER", "mock")
    return mock_config
