"""LLM Client Package"""

from gta.llm.base import (
    LLMClient,
    LLMResponse,
    LLMError,
    ProviderUnavailable,
    GenerationFailed,
    SYSTEM_PROMPT,
)
from gta.llm.claude import ClaudeClient
from gta.llm.gemini import GeminiClient
from gta.llm.ollama import OllamaClient
from gta.llm.openai import OpenAIClient
from gta.llm.tasks import AITasks, clean_commit_message, validate_commit_message

PROVIDERS = {
    "gemini": GeminiClient,
    "openai": OpenAIClient,
    "anthropic": ClaudeClient,
    "ollama": OllamaClient,
}


def get_client(provider: str = "gemini", model: str | None = None) -> LLMClient:
    """Get an LLM client. Provider is one of PROVIDERS, or 'none' to disable AI."""
    if provider == "none":
        raise ProviderUnavailable("AI provider not configured. Run: gta config set ai_provider gemini")

    if provider in PROVIDERS:
        return PROVIDERS[provider](model=model)

    raise ProviderUnavailable(
        f"Unsupported AI provider: {provider}. Use one of: {', '.join(PROVIDERS)}, none."
    )


__all__ = [
    "LLMClient",
    "LLMResponse",
    "LLMError",
    "ProviderUnavailable",
    "GenerationFailed",
    "ClaudeClient",
    "GeminiClient",
    "OllamaClient",
    "OpenAIClient",
    "get_client",
    "PROVIDERS",
    "SYSTEM_PROMPT",
    "AITasks",
    "clean_commit_message",
    "validate_commit_message",
]
