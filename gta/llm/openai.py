"""OpenAI LLM Client"""

import os

from gta.llm.base import LLMClient, LLMResponse, GenerationFailed, ProviderUnavailable, SYSTEM_PROMPT


class OpenAIClient(LLMClient):
    """OpenAI Responses API client. Requires OPENAI_API_KEY env var."""

    DEFAULT_MODEL = "gpt-4.1-mini"
    TEMPERATURE = 0.4

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self.model = model or self.DEFAULT_MODEL

        if not self.api_key:
            raise ProviderUnavailable(
                "No API key found. Set OPENAI_API_KEY environment variable:\n"
                "  export OPENAI_API_KEY='your-key-here'"
            )

        try:
            from openai import OpenAI
            self._client = OpenAI(api_key=self.api_key)
        except ImportError:
            raise ProviderUnavailable(
                "OpenAI SDK not installed. Run:\n"
                "  pip install openai"
            )

    @property
    def name(self) -> str:
        return f"OpenAI ({self.model})"

    def generate(self, prompt: str, system: str | None = SYSTEM_PROMPT) -> LLMResponse:
        from openai import APIError, AuthenticationError

        kwargs = {"instructions": system} if system else {}
        try:
            response = self._client.responses.create(
                model=self.model,
                input=prompt,
                temperature=self.TEMPERATURE,
                **kwargs,
            )
        except AuthenticationError:
            raise ProviderUnavailable("Invalid API key. Check your OPENAI_API_KEY.")
        except APIError as e:
            raise GenerationFailed(f"OpenAI API error: {e.message}")

        content = (getattr(response, "output_text", "") or "").strip()
        if not content:
            raise GenerationFailed("OpenAI returned an empty response")

        usage = getattr(response, "usage", None)
        return LLMResponse(
            content=content,
            model=self.model,
            tokens_used=getattr(usage, "total_tokens", 0) if usage else 0,
        )
