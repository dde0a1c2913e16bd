"""Claude (Anthropic) LLM Client"""

import os

from gta.llm.base import LLMClient, LLMResponse, GenerationFailed, ProviderUnavailable, SYSTEM_PROMPT


class ClaudeClient(LLMClient):
    """Claude API client. Requires ANTHROPIC_API_KEY env var."""

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    MAX_TOKENS = 1000
    TEMPERATURE = 0.4

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.model = model or self.DEFAULT_MODEL

        if not self.api_key:
            raise ProviderUnavailable(
                "No API key found. Set ANTHROPIC_API_KEY environment variable:\n"
                "  export ANTHROPIC_API_KEY='your-key-here'"
            )

        try:
            from anthropic import Anthropic
            self._client = Anthropic(api_key=self.api_key)
        except ImportError:
            raise ProviderUnavailable(
                "Anthropic SDK not installed. Run:\n"
                "  pip install anthropic"
            )

    @property
    def name(self) -> str:
        return f"Claude ({self.model})"

    def generate(self, prompt: str, system: str | None = SYSTEM_PROMPT) -> LLMResponse:
        from anthropic import APIError, AuthenticationError

        kwargs = {"system": system} if system else {}
        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=self.MAX_TOKENS,
                temperature=self.TEMPERATURE,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
        except AuthenticationError:
            raise ProviderUnavailable("Invalid API key. Check your ANTHROPIC_API_KEY.")
        except APIError as e:
            raise GenerationFailed(f"Claude API error: {e.message}")

        content = ""
        for block in response.content:
            if block.type == "text":
                content = block.text.strip()
                break

        if not content:
            raise GenerationFailed("Claude returned an empty response")

        return LLMResponse(
            content=content,
            model=self.model,
            tokens_used=response.usage.input_tokens + response.usage.output_tokens
        )
