"""Commit composer: message first (AI or fallback), then the commit itself."""

from datetime import datetime
from typing import Callable

from gta.config import Config
from gta.git import CommitResult, GitError, GitRepository
from gta.llm import AITasks, LLMClient, LLMError, get_client
from gta.logging_config import setup_logger
from gta.prompts import PromptConfig
from gta.watch.events import EventBus

logger = setup_logger("gta.watch.composer")

FALLBACK_MESSAGE = "chore(auto): update"

ClientFactory = Callable[[Config], LLMClient]


def client_from_config(config: Config) -> LLMClient:
    return get_client(provider=config.ai_provider, model=config.ai_model)


def timestamp_token(now: datetime) -> str:
    return now.strftime("%H:%M:%S")


class CommitComposer:
    """Builds the commit message and commits everything in the working tree.

    AI trouble of any kind degrades to FALLBACK_MESSAGE; it never blocks
    the commit.
    """

    def __init__(
        self,
        repo: GitRepository,
        bus: EventBus,
        client_factory: ClientFactory = client_from_config,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.repo = repo
        self.bus = bus
        self.client_factory = client_factory
        self.clock = clock

    def compose(self, config: Config) -> str:
        stamp = timestamp_token(self.clock())
        if not config.ai_enabled:
            return f"{stamp} {FALLBACK_MESSAGE}"

        try:
            self.bus.ai("Generating commit message...")
            subject = self._generate(config)
        except (LLMError, GitError) as e:
            logger.warning("AI commit message failed: %s", e)
            self.bus.warning("AI failed, using fallback", error=str(e))
            return f"{stamp} {FALLBACK_MESSAGE}"

        message = f"{stamp} {subject}"
        self.bus.ai(f'Generated: "{message}"')
        return message

    def _generate(self, config: Config) -> str:
        # Stage first so new files show up in the diff the model sees
        self.repo.stage_all()
        diff = self.repo.staged_diff() or self.repo.working_diff()
        tasks = AITasks(self.client_factory(config))
        return tasks.commit_message(diff, PromptConfig(custom_prompt=config.ai_commit_prompt))

    def commit(self, config: Config, message: str | None = None) -> CommitResult:
        """Compose (unless a message is given) and commit. GitError propagates."""
        message = message or self.compose(config)
        return self.repo.commit(message)
