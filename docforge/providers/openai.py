"""OpenAI provider (and OpenAI-compatible endpoints via OPENAI_BASE_URL)."""

import os

from langchain_openai import ChatOpenAI

from docforge.providers.base import ChatModelProvider


class OpenAIProvider(ChatModelProvider):
    name = "openai"
    api_key_vars = ("OPENAI_API_KEY",)
    model_var = "OPENAI_MODEL"
    default_model = "gpt-4o"

    def __init__(self, api_key: str | None = None, model: str | None = None, base_url: str | None = None):
        super().__init__(api_key=api_key, model=model)
        self.base_url = base_url or os.environ.get("OPENAI_BASE_URL") or None

    def build_llm(self, temperature: float, max_tokens: int):
        kwargs = {
            "model": self.model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "api_key": self.api_key,
        }
        if self.base_url:
            kwargs["base_url"] = self.base_url
        return ChatOpenAI(**kwargs)

    def get_config_instructions(self) -> str:
        return """To use the OpenAI provider, set the following environment variables:

  OPENAI_API_KEY=your-api-key-here

Optional:
  OPENAI_MODEL=gpt-4o (default: gpt-4o)
  OPENAI_BASE_URL=https://api.openai.com/v1 (for compatible APIs)

You can get an API key at: https://platform.openai.com/api-keys"""
