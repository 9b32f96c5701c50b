"""RFC Agent — drafts the RFC section by section."""

from docforge.agents.base import BaseAgent, object_schema, string_field, string_list
from docforge.utils.formatter import format_alternatives, format_goals_list

PROBLEM_SCHEMA = object_schema("ProblemStatement", {
    "statement": string_field("Clear statement of the problem"),
    "impact": string_field("Impact of not solving this problem"),
})

GOALS_SCHEMA = object_schema("GoalsAndNonGoals", {
    "goals": string_list("What we want to achieve"),
    "nonGoals": string_list("What is explicitly out of scope"),
})

APPROACH_SCHEMA = object_schema("Approach", {
    "approach": string_field("High-level technical approach"),
    "keyDecisions": string_list("Key architectural decisions"),
})

INTERFACES_SCHEMA = object_schema("Interfaces", {
    "api": string_field("API surface and contracts"),
    "dataFormat": string_field("Data formats and schemas"),
    "errorHandling": string_field("Error handling approach"),
})

ALTERNATIVES_SCHEMA = object_schema("Alternatives", {
    "alternatives": {
        "type": "array",
        "items": object_schema("Alternative", {
            "name": string_field(),
            "pros": string_list(),
            "cons": string_list(),
            "decision": string_field(),
        }),
    },
    "openQuestions": string_list(),
    "assumptions": string_list(),
})


class RFCAgent(BaseAgent):
    name = "RFCAgent"
    steps = ("rfc.problem", "rfc.goals", "rfc.approach", "rfc.interfaces", "rfc.alternatives")

    def _generate(self, state: dict, step_id: str) -> tuple[dict, str]:
        handlers = {
            "rfc.problem": self._problem,
            "rfc.goals": self._goals,
            "rfc.approach": self._approach,
            "rfc.interfaces": self._interfaces,
            "rfc.alternatives": self._alternatives,
        }
        return handlers[step_id](state)

    def _problem(self, state: dict) -> tuple[dict, str]:
        self.announce("Drafting Problem Statement...")
        project = state["project"]
        prompt = f"""\
Generate a problem statement for the following project:

Project: {project['name']}
Stack: {', '.join(project['stack'])}
Constraints: {', '.join(project['constraints']) or 'None specified'}

Describe:
1. The core problem being solved
2. The impact of not solving it

Be concise and specific.
{self.feedback(state, 'rfc')}"""

        result = self.chat_json(prompt, PROBLEM_SCHEMA, self.build_system_prompt(state))

        content = f"{result['statement']}\n\n**Impact:** {result['impact']}"
        state["documentProgress"]["rfc"]["problem"] = content
        return state, content

    def _goals(self, state: dict) -> tuple[dict, str]:
        self.announce("Drafting Goals and Non-Goals...")
        rfc = state["documentProgress"]["rfc"]
        prompt = f"""\
Based on this problem statement:

{rfc.get('problem', '')}

Generate goals and non-goals for this project.

Goals should be specific, measurable outcomes.
Non-goals should clarify what is explicitly out of scope.
{self.feedback(state, 'rfc')}"""

        result = self.chat_json(prompt, GOALS_SCHEMA, self.build_system_prompt(state))

        rfc["goals"] = format_goals_list(result["goals"])
        rfc["nonGoals"] = format_goals_list(result["nonGoals"])
        content = f"**Goals:**\n{rfc['goals']}\n\n**Non-Goals:**\n{rfc['nonGoals']}"
        return state, content

    def _approach(self, state: dict) -> tuple[dict, str]:
        self.announce("Drafting Approach...")
        rfc = state["documentProgress"]["rfc"]
        prompt = f"""\
Given:
Problem: {rfc.get('problem', '')}
Goals: {rfc.get('goals', '')}
Non-Goals: {rfc.get('nonGoals', '')}

Describe the high-level technical approach.
Include key architectural decisions.
{self.feedback(state, 'rfc')}"""

        result = self.chat_json(prompt, APPROACH_SCHEMA, self.build_system_prompt(state))

        decisions = format_goals_list(result["keyDecisions"])
        content = f"{result['approach']}\n\n**Key Decisions:**\n{decisions}"
        rfc["approach"] = content
        return state, content

    def _interfaces(self, state: dict) -> tuple[dict, str]:
        self.announce("Drafting Interfaces & Contracts...")
        rfc = state["documentProgress"]["rfc"]
        prompt = f"""\
Based on the approach:
{rfc.get('approach', '')}

Define the interfaces and contracts:
- API surface (commands, functions, endpoints)
- Data formats (JSON schemas, types)
- Error handling strategy
{self.feedback(state, 'rfc')}"""

        result = self.chat_json(prompt, INTERFACES_SCHEMA, self.build_system_prompt(state))

        content = (
            f"### API Surface\n{result['api']}\n\n"
            f"### Data Formats\n{result['dataFormat']}\n\n"
            f"### Error Handling\n{result['errorHandling']}"
        )
        rfc["interfaces"] = content
        return state, content

    def _alternatives(self, state: dict) -> tuple[dict, str]:
        self.announce("Drafting Alternatives Considered...")
        rfc = state["documentProgress"]["rfc"]
        prompt = f"""\
For this project approach:
{rfc.get('approach', '')}

Generate:
1. At least 2 alternative approaches that were considered
2. Pros and cons for each
3. Why they were not chosen
4. Open questions remaining
5. Key assumptions being made
{self.feedback(state, 'rfc')}"""

        result = self.chat_json(prompt, ALTERNATIVES_SCHEMA, self.build_system_prompt(state))

        rfc["alternatives"] = format_alternatives(result["alternatives"])
        rfc["openQuestions"] = format_goals_list(result["openQuestions"])
        rfc["assumptions"] = format_goals_list(result["assumptions"])
        content = (
            f"{rfc['alternatives']}\n\n"
            f"**Open Questions:**\n{rfc['openQuestions']}\n\n"
            f"**Assumptions:**\n{rfc['assumptions']}"
        )
        return state, content
