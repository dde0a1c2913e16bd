"""AI Tasks - the text gta asks a provider for, with cleanup and validation."""

import re

from gta import COMMIT_TYPE_NAMES
from gta.llm.base import LLMClient, GenerationFailed
from gta.prompts import PromptBuilder, PromptConfig

TYPES_PATTERN = '|'.join(COMMIT_TYPE_NAMES)
CONVENTIONAL_RE = re.compile(rf'^({TYPES_PATTERN})(\(.+\))?!?:')
QUOTES = '"\'`'


def validate_commit_message(content: str) -> tuple[bool, str]:
    """Validate that response looks like a conventional commit subject."""
    if not content or len(content.strip()) < 10:
        return False, "Response too short"

    first_line = content.strip().split('\n')[0]
    if not CONVENTIONAL_RE.match(first_line):
        return False, f"Missing conventional commit format. Got: {first_line[:50]}"

    return True, ""


def clean_commit_message(text: str) -> str:
    """Reduce an LLM response to its commit subject line."""
    lines = [line.strip() for line in text.strip().split('\n')]
    subject = next(
        (line for line in lines if re.match(rf'^[`"\'\s]*({TYPES_PATTERN})[\(!:]', line)),
        next((line for line in lines if line and not line.startswith('```')), ''),
    )
    return subject.strip(QUOTES).strip()


def clean_branch_name(text: str) -> str:
    name = text.strip().split('\n')[0].strip(QUOTES).strip()
    name = re.sub(r'\s+', '-', name)
    return name.lower()


class AITasks:
    """Runs gta's prompts against one LLM client."""

    MAX_RETRIES = 2

    def __init__(self, client: LLMClient, builder: PromptBuilder | None = None):
        self.client = client
        self.builder = builder or PromptBuilder()

    def commit_message(self, diff: str, config: PromptConfig | None = None) -> str:
        """Conventional commit subject for a diff; retries when the format is off."""
        if not diff.strip():
            raise GenerationFailed("No changes to describe")

        prompt = self.builder.commit_message(diff, config)
        last_error = ""
        for attempt in range(self.MAX_RETRIES + 1):
            retry_prompt = prompt
            if attempt > 0:
                retry_prompt = (
                    f"{prompt}\n\nIMPORTANT: Your previous response was invalid ({last_error}). "
                    "Start directly with the commit type, e.g., 'feat(scope):'"
                )

            message = clean_commit_message(self.client.generate(retry_prompt).content)
            is_valid, last_error = validate_commit_message(message)
            if is_valid:
                return message

        raise GenerationFailed(f"Failed after {self.MAX_RETRIES} retries: {last_error}")

    def summarize_commits(self, commits: list[str]) -> str:
        if not commits:
            raise GenerationFailed("No commits found")
        return self.client.generate(self.builder.summarize_commits(commits)).content.strip()

    def branch_name(self, description: str, custom_prompt: str | None = None) -> str:
        name = clean_branch_name(self.client.generate(self.builder.branch_name(description, custom_prompt)).content)
        if not name:
            raise GenerationFailed("Empty branch name")
        return name

    def readme(self, project_name: str, context: str = "") -> str:
        return self.client.generate(self.builder.readme(project_name, context)).content.strip()

    def project_description(self, project_name: str, files: list[str] | None = None) -> str:
        response = self.client.generate(self.builder.project_description(project_name, files))
        return response.content.strip().split('\n')[0].strip(QUOTES).strip()
