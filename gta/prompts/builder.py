"""Prompt Builder - Construct LLM prompts for every AI task gta runs."""

from dataclasses import dataclass

from gta import COMMIT_TYPES

# Diffs beyond this many characters are cut before reaching the model
DIFF_CHAR_LIMIT = 3000

BRANCH_NAME_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 100


@dataclass
class PromptConfig:
    """User-provided settings that shape the commit prompt."""
    max_subject_length: int = 72
    custom_prompt: str | None = None
    diff_char_limit: int = DIFF_CHAR_LIMIT


class PromptBuilder:
    """Constructs prompts for commit messages, summaries, branch names and docs."""

    def commit_message(self, diff: str, config: PromptConfig | None = None) -> str:
        config = config or PromptConfig()
        changes = self._build_changes_section(diff, config.diff_char_limit)

        # A user-supplied prompt replaces the built-in instructions entirely
        if config.custom_prompt:
            return f"{config.custom_prompt}\n\n{changes}"

        sections = [
            self._build_commit_format_section(config),
            changes,
            self._build_commit_instructions(config),
        ]
        return "\n\n".join(sections)

    def _build_changes_section(self, diff: str, limit: int) -> str:
        parts = ["<changes>", diff[:limit]]
        if len(diff) > limit:
            parts.append(f"[Note: diff truncated to the first {limit} characters]")
        parts.append("</changes>")
        return "\n".join(parts)

    def _build_commit_format_section(self, config: PromptConfig) -> str:
        types_list = "\n".join(f"  - {t}: {desc}" for t, desc in COMMIT_TYPES.items())
        return f"""<format>
Generate a concise git commit message for these changes.
Follow the conventional commits format: type(scope): description
Keep it under {config.max_subject_length} characters.

Choose the most appropriate type:
{types_list}
</format>"""

    def _build_commit_instructions(self, config: PromptConfig) -> str:
        return """<instructions>
Rules:
- Return ONE line: the commit subject, nothing else
- No markdown formatting, no quotes
- No preamble like "Here's a commit message:"
</instructions>"""

    def summarize_commits(self, commits: list[str]) -> str:
        listing = "\n".join(commits)
        return f"""Summarize these recent git commits in 2-3 sentences. Focus on what was changed and why it matters:

{listing}

Return only the summary, nothing else."""

    def branch_name(self, description: str, custom_prompt: str | None = None) -> str:
        if custom_prompt:
            return f"{custom_prompt}\n\nDescription: {description}"

        return f"""Generate a short, kebab-case git branch name for the following task description.
Rules:
- Use only lowercase letters, numbers, and hyphens
- Start with a type prefix if obvious (feature/, fix/, chore/)
- Keep it under {BRANCH_NAME_MAX_LENGTH} characters
- Return ONLY the branch name

Description: {description}"""

    def readme(self, project_name: str, context: str = "") -> str:
        context_line = f"Context: {context}\n" if context else ""
        return f"""Generate a professional README.md file for a project named "{project_name}".
{context_line}
Include:
- Project title and brief description
- Getting Started section with installation and usage
- Basic project structure if applicable
- License (MIT)

Return only the markdown content, no explanations."""

    def project_description(self, project_name: str, files: list[str] | None = None) -> str:
        with_files = f" with files: {', '.join(files)}" if files else ""
        return (
            f'Generate a brief one-sentence description for a project named "{project_name}"{with_files}.\n'
            f"Keep it under {DESCRIPTION_MAX_LENGTH} characters. Return only the description, nothing else."
        )
