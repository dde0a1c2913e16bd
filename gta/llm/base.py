"""LLM Base Classes and Shared Code"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


SYSTEM_PROMPT = """You are a senior software engineer who keeps a busy repository readable. You write precise git commit messages, short change summaries and project blurbs.

Your standards:
- Every word earns its place; no filler, no fluff
- Specific verbs over vague ones
- Return exactly what was asked for, with no preamble or explanation"""


@dataclass
class LLMResponse:
    """Structured response from any LLM provider."""
    content: str
    model: str = ""
    tokens_used: int = 0


class LLMError(Exception):
    """Raised when LLM operations fail."""
    pass


class ProviderUnavailable(LLMError):
    """The provider can't be used at all: CLI, SDK, key or server missing."""
    pass


class GenerationFailed(LLMError):
    """The provider was reached but produced no usable text."""
    pass


class LLMClient(ABC):
    """Abstract base for LLM clients."""

    @abstractmethod
    def generate(self, prompt: str, system: str | None = SYSTEM_PROMPT) -> LLMResponse:
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass
