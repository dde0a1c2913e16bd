"""Gemini CLI LLM Client"""

import json
import os
import shutil
import subprocess

from gta.llm.base import LLMClient, LLMResponse, GenerationFailed, ProviderUnavailable, SYSTEM_PROMPT


class GeminiClient(LLMClient):
    """Drives the `gemini` command line tool in non-interactive JSON mode.

    The CLI owns authentication (API key or Google login), so the only
    precondition checked here is that the binary is on PATH.
    """

    DEFAULT_MODEL = "gemini-2.0-flash"
    DEFAULT_TIMEOUT = 120

    def __init__(self, model: str | None = None, binary: str = "gemini"):
        self.model = model or self.DEFAULT_MODEL
        self.binary = binary
        self.timeout = int(os.environ.get("GTA_AI_TIMEOUT", self.DEFAULT_TIMEOUT))

        if shutil.which(self.binary) is None:
            raise ProviderUnavailable(
                "Gemini CLI not installed. Install:\n"
                "  npm install -g @google/gemini-cli"
            )

    @property
    def name(self) -> str:
        return f"Gemini ({self.model})"

    def _build_args(self, prompt: str, system: str | None) -> list[str]:
        full_prompt = f"{system}\n\n{prompt}" if system else prompt
        # Prompt goes last as a positional argument
        return [self.binary, '--model', self.model, '--output-format', 'json', full_prompt]

    def generate(self, prompt: str, system: str | None = SYSTEM_PROMPT) -> LLMResponse:
        try:
            result = subprocess.run(
                self._build_args(prompt, system),
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
                encoding='utf-8',
                errors='replace',
            )
        except FileNotFoundError:
            raise ProviderUnavailable("Gemini CLI not found in PATH")
        except subprocess.TimeoutExpired:
            raise GenerationFailed(f"Gemini timed out after {self.timeout}s")
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or e.stdout or "").strip()
            raise GenerationFailed(
                f"Gemini failed (exit {e.returncode}); this might be an API key issue or rate limit"
                + (f":\n{detail}" if detail else "")
            )

        content = self._extract_text(result.stdout)
        if not content:
            raise GenerationFailed("Gemini returned an empty response")
        return LLMResponse(content=content, model=self.model)

    @staticmethod
    def _extract_text(stdout: str) -> str:
        """Pull the answer out of --output-format json, tolerating plain text."""
        try:
            data = json.loads(stdout)
        except json.JSONDecodeError:
            return stdout.strip()
        if isinstance(data, dict):
            return str(data.get("response") or data.get("text") or "").strip()
        return stdout.strip()
