"""Provider interface — the generation collaborator the agents talk to.

ChatModelProvider adapts any LangChain chat model: it prepends the system
prompt, asks for raw JSON when a schema is given, strips code fences, checks
the schema's required keys and re-prompts once before giving up.
"""

import json
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass

from docforge.config import get_config
from docforge.errors import ProviderNotConfiguredError
from docforge.utils.parsing import invoke_with_retry, message_text, strip_fences

_REPROMPT = (
    "Your response did not match the required JSON schema. "
    "Please try again with ONLY the raw JSON object, "
    "no markdown fences, no commentary."
)


@dataclass
class GenerateResponse:
    content: str
    parsed: dict | None = None
    usage: dict | None = None


class LLMProvider(ABC):
    """A configured source of completions."""

    name: str = ""

    @abstractmethod
    def generate(
        self,
        messages: list[dict],
        *,
        system_prompt: str | None = None,
        json_schema: dict | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerateResponse:
        """Return a completion for messages. When json_schema is given, parsed holds the decoded object."""

    @abstractmethod
    def is_configured(self) -> bool:
        ...

    @abstractmethod
    def get_config_instructions(self) -> str:
        ...


def _schema_instructions(json_schema: dict) -> str:
    return (
        "\n\nYou MUST respond with valid JSON matching this exact schema:\n"
        f"{json.dumps(json_schema, indent=2)}\n\n"
        "Respond ONLY with the JSON object. No markdown fences, no commentary."
    )


def _parse_json(content: str, json_schema: dict) -> dict:
    """Decode a JSON object and check the schema's required keys.

    Raises json.JSONDecodeError or ValueError when the response does not fit.
    """
    data = json.loads(strip_fences(content))
    if not isinstance(data, dict):
        raise ValueError("Response is not a JSON object.")
    missing = [k for k in json_schema.get("required", []) if k not in data]
    if missing:
        raise ValueError(f"Response missing required fields: {missing}")
    return data


def _usage(response) -> dict | None:
    metadata = getattr(response, "usage_metadata", None)
    if not isinstance(metadata, dict):
        return None
    return {
        "promptTokens": metadata.get("input_tokens", 0),
        "completionTokens": metadata.get("output_tokens", 0),
        "totalTokens": metadata.get("total_tokens", 0),
    }


class ChatModelProvider(LLMProvider):
    """Base for providers backed by a LangChain chat model."""

    api_key_vars: tuple[str, ...] = ()
    model_var: str = ""
    default_model: str = ""

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key or self._env_api_key()
        self.model = model or self._configured_model()

    def _env_api_key(self) -> str | None:
        for var in self.api_key_vars:
            value = os.environ.get(var, "").strip()
            if value:
                return value
        return None

    def _configured_model(self) -> str:
        env_model = os.environ.get(self.model_var, "").strip() if self.model_var else ""
        if env_model:
            return env_model
        return get_config().get("models", {}).get(self.name, self.default_model)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    @abstractmethod
    def build_llm(self, temperature: float, max_tokens: int):
        """Construct the underlying chat model."""

    def generate(
        self,
        messages: list[dict],
        *,
        system_prompt: str | None = None,
        json_schema: dict | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerateResponse:
        if not self.is_configured():
            raise ProviderNotConfiguredError(self.name, self.get_config_instructions())

        config = get_config()
        llm = self.build_llm(
            temperature if temperature is not None else config.get("temperature", 0.7),
            max_tokens if max_tokens is not None else config.get("max_tokens", 4096),
        )

        system_content = system_prompt or ""
        if json_schema is not None:
            system_content += _schema_instructions(json_schema)

        chat = []
        if system_content:
            chat.append({"role": "system", "content": system_content.strip()})
        chat.extend(messages)

        response = invoke_with_retry(llm, chat, label=self.name)
        content = message_text(response.content)

        if json_schema is None:
            return GenerateResponse(content=content, usage=_usage(response))

        try:
            parsed = _parse_json(content, json_schema)
        except (json.JSONDecodeError, ValueError):
            # Re-prompt once before raising
            chat.append({"role": "assistant", "content": content})
            chat.append({"role": "user", "content": _REPROMPT})
            response = invoke_with_retry(llm, chat, label=self.name)
            content = message_text(response.content)
            parsed = _parse_json(content, json_schema)

        return GenerateResponse(content=content, parsed=parsed, usage=_usage(response))
