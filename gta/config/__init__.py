"""Configuration Management Package"""

import json
import sys
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Callable, Optional

# Valid configuration values
VALID_MODES = {"manual", "confirm", "auto"}
VALID_PROVIDERS = {"gemini", "openai", "anthropic", "ollama", "none"}

MIN_COMMITS_BEFORE_SUMMARY = 2
MAX_COMMITS_BEFORE_SUMMARY = 10


class ConfigError(Exception):
    """Raised when a configuration key or value is rejected."""
    pass


@dataclass
class Config:
    """User configuration with sensible defaults."""
    auto_mode: str = "auto"
    commit_threshold: int = 20
    ai_commit_messages: bool = True
    ai_provider: str = "gemini"
    ai_model: Optional[str] = None
    commits_before_summary: int = 3
    auto_summary_and_push: bool = True
    default_branch: str = "main"
    ai_commit_prompt: Optional[str] = None
    ai_branch_prompt: Optional[str] = None

    @property
    def ai_enabled(self) -> bool:
        return self.ai_commit_messages and self.ai_provider != "none"

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def validate(self) -> list[str]:
        """Validate config values and return list of warnings.

        Invalid values are replaced with defaults after warning.
        """
        warnings = []
        defaults = Config()

        if self.auto_mode not in VALID_MODES:
            warnings.append(f"Invalid auto_mode '{self.auto_mode}', using '{defaults.auto_mode}'")
            self.auto_mode = defaults.auto_mode

        if self.ai_provider not in VALID_PROVIDERS:
            warnings.append(f"Invalid ai_provider '{self.ai_provider}', using '{defaults.ai_provider}'")
            self.ai_provider = defaults.ai_provider

        if not _is_int(self.commit_threshold) or self.commit_threshold < 1:
            warnings.append(f"Invalid commit_threshold '{self.commit_threshold}', using {defaults.commit_threshold}")
            self.commit_threshold = defaults.commit_threshold

        if (not _is_int(self.commits_before_summary)
                or not MIN_COMMITS_BEFORE_SUMMARY <= self.commits_before_summary <= MAX_COMMITS_BEFORE_SUMMARY):
            warnings.append(
                f"Invalid commits_before_summary '{self.commits_before_summary}', "
                f"using {defaults.commits_before_summary}"
            )
            self.commits_before_summary = defaults.commits_before_summary

        for name in ("ai_commit_messages", "auto_summary_and_push"):
            if not isinstance(getattr(self, name), bool):
                warnings.append(f"Invalid {name} '{getattr(self, name)}', using {str(getattr(defaults, name)).lower()}")
                setattr(self, name, getattr(defaults, name))

        return warnings

    @classmethod
    def from_dict(cls, data: dict, report: Optional[Callable[[str], None]] = None) -> 'Config':
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        config = cls(**filtered)
        for warning in config.validate():
            (report or _print_warning)(f"Config warning: {warning}")
        return config


def _print_warning(message: str) -> None:
    print(message, file=sys.stderr)


def _is_int(value: Any) -> bool:
    # bool is an int subclass; "true" is not a threshold
    return isinstance(value, int) and not isinstance(value, bool)


def coerce_value(raw: str) -> Any:
    """Parse a CLI string into the JSON type it most likely means."""
    lowered = raw.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered in ("null", "none", ""):
        return None
    try:
        return int(raw)
    except ValueError:
        return raw


class ConfigManager:
    """Layered JSON config: ~/.gtarc (global) overlaid by ./.gtarc (local).

    Every reload() re-reads both files, so a long-running watch loop sees
    values changed from another terminal on its next tick. Each distinct
    warning is printed once per manager.
    """

    CONFIG_FILENAME = ".gtarc"

    def __init__(self, cwd: Optional[Path] = None):
        self._cwd = cwd
        self._config: Optional[Config] = None
        self._loaded_from: list[Path] = []
        self._reported: set[str] = set()

    @property
    def global_path(self) -> Path:
        return Path.home() / self.CONFIG_FILENAME

    @property
    def local_path(self) -> Path:
        return (self._cwd or Path.cwd()) / self.CONFIG_FILENAME

    def load(self) -> Config:
        if self._config is not None:
            return self._config
        return self.reload()

    def reload(self) -> Config:
        data: dict = {}
        self._loaded_from = []
        for path in (self.global_path, self.local_path):
            if path.exists():
                data.update(self._read_file(path))
                self._loaded_from.append(path)
        self._config = Config.from_dict(data, report=self._report)
        return self._config

    def _read_file(self, path: Path) -> dict:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            self._report(f"Warning: Could not load {path}: {e}")
            return {}
        if not isinstance(data, dict):
            self._report(f"Warning: Ignoring {path}: expected a JSON object")
            return {}
        return data

    def _report(self, message: str) -> None:
        if message not in self._reported:
            self._reported.add(message)
            _print_warning(message)

    def get(self, key: str) -> Any:
        if key not in _field_names():
            raise ConfigError(f"Unknown config key: {key}")
        return getattr(self.reload(), key)

    def set(self, key: str, value: Any, global_config: bool = True) -> Path:
        """Validate and persist a single key. Raises ConfigError on bad input."""
        if key not in _field_names():
            raise ConfigError(f"Unknown config key: {key}")

        candidate = Config(**{**self.reload().to_dict(), key: value})
        warnings = candidate.validate()
        if warnings:
            raise ConfigError(warnings[0])

        path = self.global_path if global_config else self.local_path
        data = self._read_file(path) if path.exists() else {}
        data[key] = value
        self._write_file(path, data)
        self._config = None
        return path

    def save(self, config: Config, global_config: bool = True) -> Path:
        path = self.global_path if global_config else self.local_path
        self._write_file(path, config.to_dict())
        self._config = None
        return path

    def reset(self, global_config: bool = True) -> Path:
        path = self.global_path if global_config else self.local_path
        if path.exists():
            path.unlink()
        self._config = None
        return path

    def _write_file(self, path: Path, data: dict) -> None:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

    def get_config_paths(self) -> list[Path]:
        return list(self._loaded_from)


def _field_names() -> set[str]:
    return {f.name for f in fields(Config)}


__all__ = [
    "Config",
    "ConfigError",
    "ConfigManager",
    "coerce_value",
    "VALID_MODES",
    "VALID_PROVIDERS",
]
