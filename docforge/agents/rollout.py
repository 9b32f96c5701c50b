"""Rollout Agent — risks, observability and rollout/rollback procedures."""

from docforge.agents.base import BaseAgent, object_schema, string_field, string_list
from docforge.utils.formatter import SEVERITY_MARKERS

SEVERITIES = ("low", "medium", "high", "critical")

RISKS_SCHEMA = object_schema("Risks", {
    "risks": {
        "type": "array",
        "items": object_schema("Risk", {
            "description": string_field(),
            "severity": {"type": "string", "enum": list(SEVERITIES)},
            "mitigation": string_field(),
        }),
    },
})

OBSERVABILITY_SCHEMA = object_schema("Observability", {
    "monitoring": string_field("Monitoring approach"),
    "logging": string_field("Logging strategy"),
    "alerts": string_field("Alerting setup"),
})

PROCEDURES_SCHEMA = object_schema("Procedures", {
    "rolloutSteps": string_list("Step-by-step rollout"),
    "killSwitch": string_field("How to quickly disable"),
    "rollback": string_field("How to rollback"),
    "stopConditions": string_list("When to stop deployment"),
})


def _validate_risks(risks: list[dict]) -> list[dict]:
    """Normalize severities; an unknown severity is a malformed response."""
    validated = []
    for i, risk in enumerate(risks):
        severity = str(risk.get("severity", "")).lower()
        if severity not in SEVERITIES:
            raise ValueError(f"Risk {i} has invalid severity '{risk.get('severity')}'.")
        validated.append({
            "description": risk.get("description", ""),
            "severity": severity,
            "mitigation": risk.get("mitigation", ""),
        })
    return validated


def format_risks(risks: list[dict]) -> str:
    return "\n\n".join(
        f"{SEVERITY_MARKERS.get(r['severity'], '⚪')} **{r['severity'].upper()}**: {r['description']}\n"
        f"   Mitigation: {r['mitigation']}"
        for r in risks
    )


class RolloutAgent(BaseAgent):
    name = "RolloutAgent"
    steps = ("rollout.risks", "rollout.observability", "rollout.procedures")

    def _generate(self, state: dict, step_id: str) -> tuple[dict, str]:
        handlers = {
            "rollout.risks": self._risks,
            "rollout.observability": self._observability,
            "rollout.procedures": self._procedures,
        }
        return handlers[step_id](state)

    def _stages_text(self, state: dict, with_deliverables: bool) -> str:
        stages = state["documentProgress"]["plan"].get("stages") or []
        if with_deliverables:
            return "\n".join(
                f"Stage {s['id']}: {s['name']} - {', '.join(s.get('deliverables', []))}" for s in stages
            )
        return "\n".join(f"Stage {s['id']}: {s['name']}" for s in stages)

    def _risks(self, state: dict) -> tuple[dict, str]:
        self.announce("Identifying Risks...")
        prompt = f"""\
Analyze risks for this project rollout:

Project: {state['project']['name']}
Approach: {state['documentProgress']['rfc'].get('approach', '')}

Stages:
{self._stages_text(state, with_deliverables=True)}

Identify at least 4 risks:
- Technical risks (dependencies, integration, performance)
- Operational risks (deployment, monitoring)
- Process risks (timeline, resources)

Rate each by severity and provide mitigation strategies.
{self.feedback(state, 'rollout')}"""

        result = self.chat_json(prompt, RISKS_SCHEMA, self.build_system_prompt(state))

        risks = _validate_risks(result["risks"])
        state["documentProgress"]["rollout"]["risks"] = risks
        return state, format_risks(risks)

    def _observability(self, state: dict) -> tuple[dict, str]:
        self.announce("Defining Observability Plan...")
        project = state["project"]
        prompt = f"""\
Define an observability plan for:

Project: {project['name']}
Stack: {', '.join(project['stack'])}
Approach: {state['documentProgress']['rfc'].get('approach', '')}

Cover:
1. What to monitor (metrics, health checks)
2. Logging strategy (levels, key events)
3. Alerting (thresholds, notification channels)
{self.feedback(state, 'rollout')}"""

        result = self.chat_json(prompt, OBSERVABILITY_SCHEMA, self.build_system_prompt(state))

        content = (
            f"### Monitoring\n{result['monitoring']}\n\n"
            f"### Logging\n{result['logging']}\n\n"
            f"### Alerts\n{result['alerts']}"
        )
        state["documentProgress"]["rollout"]["observability"] = content
        return state, content

    def _procedures(self, state: dict) -> tuple[dict, str]:
        self.announce("Drafting Rollout Procedures...")
        prompt = f"""\
Create rollout and rollback procedures for:

Project: {state['project']['name']}
Stages:
{self._stages_text(state, with_deliverables=False)}

Provide:
1. Step-by-step rollout procedure (at least 5 steps)
2. Kill switch mechanism (how to quickly disable)
3. Rollback procedure
4. Stop-the-line conditions (when to halt deployment)
{self.feedback(state, 'rollout')}"""

        result = self.chat_json(prompt, PROCEDURES_SCHEMA, self.build_system_prompt(state))

        rollout = state["documentProgress"]["rollout"]
        rollout["rolloutSteps"] = result["rolloutSteps"]
        rollout["killSwitch"] = result["killSwitch"]
        rollout["rollback"] = result["rollback"]
        rollout["stopConditions"] = result["stopConditions"]

        steps = "\n".join(f"{i}. {s}" for i, s in enumerate(result["rolloutSteps"], 1))
        stops = "\n".join(f"- ⛔ {c}" for c in result["stopConditions"])
        content = (
            f"### Rollout Steps\n{steps}\n\n"
            f"### Kill Switch\n{result['killSwitch']}\n\n"
            f"### Rollback Procedure\n{result['rollback']}\n\n"
            f"### Stop Conditions\n{stops}"
        )
        return state, content
