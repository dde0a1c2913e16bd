"""Ollama LLM Client for Local Models"""

import os
import json
import http.client
import socket
import urllib.request
import urllib.error

from gta.llm.base import LLMClient, LLMResponse, GenerationFailed, ProviderUnavailable, SYSTEM_PROMPT


class OllamaClient(LLMClient):
    """Ollama client for local models. Requires: ollama serve"""

    DEFAULT_MODEL = "llama3.2:3b"
    DEFAULT_HOST = "http://localhost:11434"
    DEFAULT_TIMEOUT = 300  # CPU inference is slow
    KEEP_ALIVE = "10m"

    def __init__(self, model: str | None = None, host: str | None = None):
        self.model = model or self.DEFAULT_MODEL
        self.host = host or os.environ.get("OLLAMA_HOST", self.DEFAULT_HOST)
        self.timeout = int(os.environ.get("GTA_AI_TIMEOUT", self.DEFAULT_TIMEOUT))
        self._verify_connection()

    @property
    def name(self) -> str:
        return f"Ollama ({self.model})"

    def _verify_connection(self) -> None:
        """Check if Ollama is running and accessible."""
        try:
            req = urllib.request.Request(f"{self.host}/api/tags")
            with urllib.request.urlopen(req, timeout=5):
                pass
        except (urllib.error.URLError, OSError):
            raise ProviderUnavailable("Ollama not running. Start with: ollama serve")

    def _call_api(self, prompt: str, system: str | None) -> dict:
        """Make a single API call to Ollama."""
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "keep_alive": self.KEEP_ALIVE,
            "options": {
                "temperature": 0.4,
                "num_predict": 1000,
            }
        }
        if system:
            payload["system"] = system

        data = json.dumps(payload).encode('utf-8')
        req = urllib.request.Request(
            f"{self.host}/api/generate", data=data, headers={"Content-Type": "application/json"}
        )

        with urllib.request.urlopen(req, timeout=self.timeout) as response:
            return json.loads(response.read().decode('utf-8'))

    def generate(self, prompt: str, system: str | None = SYSTEM_PROMPT) -> LLMResponse:
        try:
            result = self._call_api(prompt, system)
        except urllib.error.HTTPError as e:
            if e.code == 404:
                raise ProviderUnavailable(f"Model '{self.model}' not found. Run: ollama pull {self.model}")
            raise GenerationFailed(f"Ollama error ({e.code}): {e.reason}")
        except urllib.error.URLError as e:
            if isinstance(e.reason, socket.timeout):
                raise GenerationFailed(f"Request timed out after {self.timeout}s. Increase GTA_AI_TIMEOUT")
            if "Connection refused" in str(e):
                raise ProviderUnavailable("Ollama not running. Start with: ollama serve")
            raise GenerationFailed(f"Ollama request failed: {e}")
        except socket.timeout:
            raise GenerationFailed(f"Request timed out after {self.timeout}s. Increase GTA_AI_TIMEOUT")
        except json.JSONDecodeError:
            raise GenerationFailed("Invalid response from Ollama.")
        except http.client.HTTPException as e:
            raise GenerationFailed(f"Incomplete response from Ollama: {e}. The model may have run out of memory.")
        except OSError as e:
            raise GenerationFailed(f"Connection to Ollama lost: {e}. Check that 'ollama serve' is still running.")

        content = result.get("response", "").strip()
        if not content:
            raise GenerationFailed("Ollama returned an empty response")

        return LLMResponse(
            content=content,
            model=self.model,
            tokens_used=result.get("eval_count", 0)
        )
