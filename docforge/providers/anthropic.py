"""Anthropic provider."""

from langchain_anthropic import ChatAnthropic

from docforge.providers.base import ChatModelProvider


class AnthropicProvider(ChatModelProvider):
    name = "anthropic"
    api_key_vars = ("ANTHROPIC_API_KEY",)
    model_var = "ANTHROPIC_MODEL"
    default_model = "claude-sonnet-4-6"

    def build_llm(self, temperature: float, max_tokens: int):
        return ChatAnthropic(
            model=self.model,
            temperature=temperature,
            max_tokens=max_tokens,
            api_key=self.api_key,
        )

    def get_config_instructions(self) -> str:
        return """To use the Anthropic provider, set the following environment variables:

  ANTHROPIC_API_KEY=your-api-key-here

Optional:
  ANTHROPIC_MODEL=claude-sonnet-4-6 (default: claude-sonnet-4-6)

You can get an API key at: https://console.anthropic.com/settings/keys"""
