"""Google Gemini provider."""

from langchain_google_genai import ChatGoogleGenerativeAI

from docforge.providers.base import ChatModelProvider


class GeminiProvider(ChatModelProvider):
    name = "gemini"
    api_key_vars = ("GEMINI_API_KEY", "GOOGLE_API_KEY")
    model_var = "GEMINI_MODEL"
    default_model = "gemini-1.5-pro"

    def build_llm(self, temperature: float, max_tokens: int):
        return ChatGoogleGenerativeAI(
            model=self.model,
            temperature=temperature,
            max_output_tokens=max_tokens,
            google_api_key=self.api_key,
        )

    def get_config_instructions(self) -> str:
        return """To use the Gemini provider, set the following environment variables:

  GEMINI_API_KEY=your-api-key-here   (GOOGLE_API_KEY is also accepted)

Optional:
  GEMINI_MODEL=gemini-1.5-pro (default: gemini-1.5-pro)

You can get an API key at: https://aistudio.google.com/app/apikey"""
